# app/domains/inv/crud.py

"""
'inv' 도메인의 조회 쿼리를 조립하고 실행하는 모듈입니다.

모든 쿼리는 SQLAlchemy Core 표현식으로 만들어지므로 값은 항상 바인드 파라미터가 됩니다.
정렬 컬럼처럼 식별자가 필요한 곳은 아래의 고정 허용 목록에서만 고릅니다.
"""

import logging
from datetime import date, timedelta
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import and_, case, func, or_, select, true
from sqlalchemy.sql import Select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.domains.inv import filters as inv_filters
from app.domains.inv.filters import (
    DateRangeFilter,
    GroupFilter,
    MaterialQuery,
    MinQtyFilter,
    SearchFilter,
    StoreCodeFilter,
    UnityFilter,
)
from app.domains.inv.models import KNOWN_STORES, Material, MaterialGroup, Movement, Store

logger = logging.getLogger(__name__)

# 집계 컬럼
store_qty = func.coalesce(func.sum(Movement.qty), 0)
avg_price = func.avg(Movement.price)
last_production_date = func.max(Movement.production_date)
first_production_date = func.min(Movement.production_date)
nearest_expire_date = func.min(Movement.expire_date)
transactions_count = func.count(Movement.guid)

# (창고, 자재) 식별 및 설명 컬럼. 집계 쿼리의 GROUP BY 키와 정확히 일치해야 합니다.
DESCRIPTIVE_COLUMNS = (
    Store.code.label("store_code"),
    Store.guid.label("store_guid"),
    Store.name.label("store_name"),
    Material.guid.label("material_guid"),
    Material.code.label("material_code"),
    Material.name.label("material_name"),
    Material.latin_name.label("latin_name"),
    Material.unity.label("unity"),
    Material.group_guid.label("group_guid"),
    MaterialGroup.name.label("group_name"),
    Material.price_retail.label("retail_price"),
    Material.price_wholesale.label("wholesale_price"),
    Material.price_last.label("last_price"),
)

STORE_MATERIAL_SORTS = {
    "name": Material.name,
    "code": Material.code,
    "qty": store_qty,
    "date": last_production_date,
}

CATALOG_SORTS = {
    "name": Material.name,
    "code": Material.code,
    "unity": Material.unity,
}


# =============================================================================
# 1. 필터 → 절(clause) 변환
# =============================================================================
def search_clause(text: str, *, allow_wildcards: bool = False):
    """`LOWER(name) LIKE :p OR LOWER(code) LIKE :p`"""
    pattern = inv_filters.like_pattern(text, allow_wildcards=allow_wildcards)
    escape = None if allow_wildcards else inv_filters.LIKE_ESCAPE
    return or_(
        func.lower(Material.name).like(pattern, escape=escape),
        func.lower(Material.code).like(pattern, escape=escape),
    )


def date_range_clauses(date_range: inv_filters.DateRange) -> List[Any]:
    """이동 기록의 생산일자에 대한 양 끝 포함 비교. 종료일은 하루 뒤 미만으로 비교합니다."""
    clauses = []
    if date_range.start is not None:
        clauses.append(Movement.production_date >= date_range.start)
    if date_range.end is not None:
        clauses.append(Movement.production_date < date_range.end + timedelta(days=1))
    return clauses


def split_filters(spec: MaterialQuery, *, allow_wildcards: bool = False) -> Tuple[list, list, Any]:
    """
    명세의 각 필터를 들어갈 위치별로 나눕니다.

    Returns:
        (WHERE 조건들, 이동 기록 조인 조건들, HAVING 조건)
    """
    where: list = []
    movement_on: list = []
    having = store_qty > 0

    for item in spec.filters:
        if isinstance(item, StoreCodeFilter):
            where.append(Store.code == item.code)
        elif isinstance(item, SearchFilter):
            where.append(search_clause(item.text, allow_wildcards=allow_wildcards))
        elif isinstance(item, GroupFilter):
            where.append(Material.group_guid == item.group_guid)
        elif isinstance(item, UnityFilter):
            where.append(Material.unity == item.unity)
        elif isinstance(item, DateRangeFilter):
            movement_on.extend(date_range_clauses(item.date_range))
        elif isinstance(item, MinQtyFilter):
            having = store_qty >= item.min_qty
        else:
            raise TypeError(f"Unsupported filter: {item!r}")

    return where, movement_on, having


def known_store_order():
    """KNOWN_STORES 선언 순서(12, 101, 102)의 정렬 키. 문자열 코드 순서와 다릅니다."""
    return case(
        {code: index for index, code in enumerate(KNOWN_STORES)},
        value=Store.code,
        else_=len(KNOWN_STORES),
    )


def order_clause(column, sort_order: str):
    return column.desc() if sort_order == "desc" else column.asc()


# =============================================================================
# 2. 쿼리 빌더
# =============================================================================
def build_store_materials_query(spec: MaterialQuery, *, allow_wildcards: bool = False) -> Select:
    """
    창고 × 자재 교차 조인에 이동 기록을 LEFT JOIN 하여 (창고, 자재)별로 집계합니다.
    결과 행은 HAVING 수량 임계값을 통과한 쌍뿐입니다.
    """
    where, movement_on, having = split_filters(spec, allow_wildcards=allow_wildcards)

    stmt = (
        select(
            *DESCRIPTIVE_COLUMNS,
            store_qty.label("store_qty"),
            avg_price.label("avg_price"),
            first_production_date.label("first_production_date"),
            last_production_date.label("last_production_date"),
            nearest_expire_date.label("nearest_expire_date"),
            transactions_count.label("transactions_count"),
        )
        .select_from(Store)
        .join(Material, true())
        .outerjoin(
            Movement,
            and_(
                Movement.store_guid == Store.guid,
                Movement.material_guid == Material.guid,
                *movement_on,
            ),
        )
        .outerjoin(MaterialGroup, MaterialGroup.guid == Material.group_guid)
        .where(Store.code.in_(list(KNOWN_STORES)), *where)
        .group_by(*(column.element for column in DESCRIPTIVE_COLUMNS))
        .having(having)
    )

    sort_column = STORE_MATERIAL_SORTS.get(spec.sort_by, Material.name)
    # LIMIT은 이 순서로 잘리므로 응답의 창고 순서와 같아야 합니다.
    stmt = stmt.order_by(
        known_store_order(),
        Store.code.asc(),
        order_clause(sort_column, spec.sort_order),
        Material.code.asc(),
        Material.guid.asc(),
    )

    if spec.limit is not None:
        stmt = stmt.limit(spec.limit)
    if spec.offset:
        stmt = stmt.offset(spec.offset)
    return stmt


def build_store_totals_query(today: date) -> Select:
    """
    창고별 요약 통계. (창고, 자재) 집계 결과를 서브쿼리로 두고 창고 단위로 다시 집계합니다.
    """
    per_material = build_store_materials_query(MaterialQuery()).subquery("per_material")
    value = per_material.c.store_qty * func.coalesce(per_material.c.avg_price, 0)

    return (
        select(
            per_material.c.store_code,
            func.count().label("materials_count"),
            func.sum(per_material.c.store_qty).label("total_quantity"),
            func.sum(value).label("total_value"),
            func.sum(per_material.c.transactions_count).label("transactions_count"),
            func.avg(per_material.c.avg_price).label("avg_price"),
            func.count(func.distinct(per_material.c.group_guid)).label("groups_count"),
            func.min(per_material.c.first_production_date).label("first_production_date"),
            func.max(per_material.c.last_production_date).label("last_production_date"),
            func.min(per_material.c.nearest_expire_date).label("nearest_expire_date"),
            func.sum(
                case((per_material.c.nearest_expire_date < today, 1), else_=0)
            ).label("expired_materials_count"),
        )
        .group_by(per_material.c.store_code)
        .order_by(per_material.c.store_code)
    )


def build_catalog_query(spec: MaterialQuery, *, allow_wildcards: bool = False) -> Tuple[Select, Select]:
    """자재 카탈로그 페이지 쿼리와 전체 건수 쿼리를 함께 만듭니다."""
    where, _, _ = split_filters(spec, allow_wildcards=allow_wildcards)

    count_stmt = select(func.count()).select_from(Material).where(*where)

    sort_column = CATALOG_SORTS.get(spec.sort_by, Material.name)
    items_stmt = (
        select(Material, MaterialGroup)
        .outerjoin(MaterialGroup, MaterialGroup.guid == Material.group_guid)
        .where(*where)
        .order_by(order_clause(sort_column, spec.sort_order), Material.code.asc(), Material.guid.asc())
        .offset(spec.offset)
    )
    if spec.limit is not None:
        items_stmt = items_stmt.limit(spec.limit)
    return items_stmt, count_stmt


# =============================================================================
# 3. 실행 함수
# =============================================================================
async def get_store_materials(
    db: AsyncSession, spec: MaterialQuery, *, allow_wildcards: bool = False
) -> Sequence[Any]:
    stmt = build_store_materials_query(spec, allow_wildcards=allow_wildcards)
    result = await db.execute(stmt)
    rows = result.mappings().all()
    logger.debug("store materials query returned %d rows", len(rows))
    return rows


async def get_store_totals(db: AsyncSession, *, today: Optional[date] = None) -> Sequence[Any]:
    result = await db.execute(build_store_totals_query(today or date.today()))
    return result.mappings().all()


async def get_stores(db: AsyncSession, *, codes: Optional[Sequence[str]] = None) -> List[Store]:
    """창고 목록. codes가 주어지면 해당 코드만 조회합니다."""
    stmt = select(Store).order_by(Store.code, Store.guid)
    if codes is not None:
        stmt = stmt.where(Store.code.in_(list(codes)))
    result = await db.execute(stmt)
    return result.scalars().all()


async def get_store_by_code(db: AsyncSession, *, code: str) -> Optional[Store]:
    result = await db.execute(select(Store).where(Store.code == code).order_by(Store.guid).limit(1))
    return result.scalars().first()


async def get_materials_page(
    db: AsyncSession, spec: MaterialQuery, *, allow_wildcards: bool = False
) -> Tuple[List[Tuple[Material, Optional[MaterialGroup]]], int]:
    items_stmt, count_stmt = build_catalog_query(spec, allow_wildcards=allow_wildcards)
    total = (await db.execute(count_stmt)).scalar_one()
    items = (await db.execute(items_stmt)).all()
    return [(row[0], row[1]) for row in items], total


async def get_material_groups(db: AsyncSession) -> Sequence[Any]:
    stmt = (
        select(
            MaterialGroup.guid,
            MaterialGroup.code,
            MaterialGroup.name,
            func.count(Material.guid).label("materials_count"),
        )
        .outerjoin(Material, Material.group_guid == MaterialGroup.guid)
        .group_by(MaterialGroup.guid, MaterialGroup.code, MaterialGroup.name)
        .order_by(MaterialGroup.code, MaterialGroup.guid)
    )
    result = await db.execute(stmt)
    return result.mappings().all()
