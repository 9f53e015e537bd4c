# app/domains/catalog/crud.py

"""
카탈로그 조회 함수 모듈입니다.

테이블 이름은 SQL 식별자 위치에 들어가므로, 데이터 조회 전에 반드시 `require_table()`로
실제 카탈로그에 존재하는지 확인해야 합니다. `require_table()`만이 `Table` 객체를 만들고,
행/건수 조회 함수는 그 `Table` 객체만 받으므로 확인 없이 데이터를 읽는 경로는 없습니다.
"""

import base64
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException, status
from sqlalchemy import MetaData, Table, func, inspect, select
from sqlalchemy.exc import CompileError
from sqlmodel.ext.asyncio.session import AsyncSession


async def _inspect(db: AsyncSession, fn):
    conn = await db.connection()
    return await conn.run_sync(lambda sync_conn: fn(inspect(sync_conn)))


async def list_tables(db: AsyncSession) -> List[Dict[str, Any]]:
    """기본 스키마의 테이블과 뷰 목록 (컬럼 수 포함)."""

    def _collect(inspector) -> List[Dict[str, Any]]:
        schema = inspector.default_schema_name
        entries = []
        for kind, names in (("BASE TABLE", inspector.get_table_names()), ("VIEW", inspector.get_view_names())):
            for name in names:
                entries.append({
                    "schema": schema,
                    "name": name,
                    "type": kind,
                    "columns": len(inspector.get_columns(name)),
                })
        return sorted(entries, key=lambda item: (item["type"], item["name"]))

    return await _inspect(db, _collect)


async def table_names(db: AsyncSession) -> List[str]:
    return await _inspect(db, lambda inspector: inspector.get_table_names() + inspector.get_view_names())


async def require_table(db: AsyncSession, table_name: str) -> Table:
    """
    카탈로그에 존재하는 테이블만 반사(reflect)하여 돌려줍니다. 없으면 404.
    """
    if table_name not in await table_names(db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"الجدول {table_name} غير موجود",
        )
    conn = await db.connection()
    return await conn.run_sync(lambda sync_conn: Table(table_name, MetaData(), autoload_with=sync_conn))


def _type_name(column) -> str:
    try:
        return str(column.type)
    except CompileError:
        # 현재 방언으로 표현할 수 없는 타입 (예: 반사된 NullType)
        return type(column.type).__name__


def describe_columns(table: Table) -> List[Dict[str, Any]]:
    columns = []
    for column in table.columns:
        default = column.server_default.arg if column.server_default is not None else None
        columns.append({
            "name": column.name,
            "type": _type_name(column),
            "max_length": getattr(column.type, "length", None),
            "nullable": bool(column.nullable),
            "default": str(default) if default is not None else None,
            "primary_key": bool(column.primary_key),
        })
    return columns


def primary_key_columns(table: Table) -> List[str]:
    return [column.name for column in table.primary_key.columns]


def _json_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


async def get_rows(db: AsyncSession, table: Table, *, limit: int) -> Tuple[List[Dict[str, Any]], int]:
    """확인된 테이블의 행 일부와 전체 건수를 돌려줍니다."""
    total = (await db.execute(select(func.count()).select_from(table))).scalar_one()
    result = await db.execute(select(table).limit(limit))
    rows = [
        {key: _json_value(value) for key, value in row.items()}
        for row in result.mappings().all()
    ]
    return rows, total


async def connection_info(db: AsyncSession) -> Dict[str, Any]:
    """`SELECT 1`로 연결을 확인하고 데이터베이스/서버 정보를 돌려줍니다."""
    conn = await db.connection()
    await conn.execute(select(1))
    url = conn.engine.url
    return {
        "database": url.database,
        "server": url.host or conn.dialect.name,
        "dialect": conn.dialect.name,
    }
