# app/domains/catalog/routers.py

"""
연결 확인 및 범용 테이블 브라우저 엔드포인트입니다.
"""

from fastapi import APIRouter, Depends, Query
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.responses import envelope
from app.domains.catalog import crud as catalog_crud
from app.domains.catalog import schemas as catalog_schemas
from app.domains.inv.filters import clamp_limit

router = APIRouter(
    tags=["Catalog (테이블 조회)"],
    responses={404: {"description": "Not found"}},
)

DEFAULT_ROW_LIMIT = 100


@router.get("/check-connection", response_model=catalog_schemas.ConnectionCheckResponse)
async def check_connection(db: AsyncSession = Depends(deps.get_db_session)):
    """데이터베이스 연결 상태를 확인합니다."""
    info = await catalog_crud.connection_info(db)
    return envelope("الاتصال بقاعدة البيانات ناجح", **info)


@router.get("/tables", response_model=catalog_schemas.TablesResponse)
async def read_tables(db: AsyncSession = Depends(deps.get_db_session)):
    """데이터베이스의 테이블/뷰 목록을 조회합니다."""
    tables = await catalog_crud.list_tables(db)
    return envelope("تم جلب قائمة الجداول بنجاح", count=len(tables), tables=tables)


@router.get("/table/{table_name}", response_model=catalog_schemas.TableDataResponse)
async def read_table(
    table_name: str,
    limit: int = Query(DEFAULT_ROW_LIMIT),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """테이블의 컬럼 정보와 행 데이터를 조회합니다. 카탈로그에 없는 테이블은 404입니다."""
    table = await catalog_crud.require_table(db, table_name)
    limit = clamp_limit(limit)
    rows, total = await catalog_crud.get_rows(db, table, limit=limit)
    return envelope(
        f"تم جلب بيانات الجدول {table_name} بنجاح",
        table_name=table_name,
        total_rows=total,
        returned_rows=len(rows),
        limit=limit,
        columns=catalog_crud.describe_columns(table),
        data=rows,
    )


@router.get("/table/{table_name}/info", response_model=catalog_schemas.TableInfoResponse)
async def read_table_info(table_name: str, db: AsyncSession = Depends(deps.get_db_session)):
    """테이블의 컬럼 메타데이터와 기본 키 컬럼을 조회합니다."""
    table = await catalog_crud.require_table(db, table_name)
    return envelope(
        f"تم جلب معلومات الجدول {table_name} بنجاح",
        table_name=table_name,
        columns=catalog_crud.describe_columns(table),
        primary_keys=catalog_crud.primary_key_columns(table),
    )
