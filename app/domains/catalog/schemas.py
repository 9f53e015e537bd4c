# app/domains/catalog/schemas.py

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from app.domains.inv.schemas import Envelope


class ConnectionCheckResponse(Envelope):
    database: Optional[str] = Field(None, description="연결된 데이터베이스 이름")
    server: Optional[str] = Field(None, description="데이터베이스 서버 호스트")
    dialect: Optional[str] = None


class TableEntry(BaseModel):
    schema_: Optional[str] = Field(None, alias="schema")
    name: str
    type: str
    columns: int


class TablesResponse(Envelope):
    count: int
    tables: List[TableEntry]


class ColumnInfo(BaseModel):
    name: str
    type: str
    max_length: Optional[int] = None
    nullable: bool
    default: Optional[str] = None
    primary_key: bool = False


class TableDataResponse(Envelope):
    table_name: str
    total_rows: int
    returned_rows: int
    limit: int
    columns: List[ColumnInfo]
    data: List[Dict[str, Any]]


class TableInfoResponse(Envelope):
    table_name: str
    columns: List[ColumnInfo]
    primary_keys: List[str]
