# app/domains/inv/routers.py

"""
'inv' 도메인 (창고/자재 재고 조회)의 API 엔드포인트를 정의하는 모듈입니다.
모든 엔드포인트는 읽기 전용이며, 쿼리 파라미터 이름은 기존 클라이언트와의 호환을 위해 camelCase를 유지합니다.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.config import settings
from app.core.responses import envelope
from app.domains.inv import crud as inv_crud
from app.domains.inv import schemas as inv_schemas
from app.domains.inv import services as inv_services
from app.domains.inv.filters import build_material_query, clamp_limit

router = APIRouter(
    tags=["Inventory (창고/자재 재고 조회)"],
    responses={404: {"description": "Not found"}},
)

DEFAULT_PAGE_SIZE = 50


# =============================================================================
# 1. 창고별 자재 집계 엔드포인트
# =============================================================================
@router.get("/materials-by-stores", response_model=inv_schemas.MaterialsByStoresResponse)
async def read_materials_by_stores(
    store_code: Optional[str] = Query(None, alias="storeCode"),
    search: Optional[str] = Query(None),
    min_qty: Optional[float] = Query(None, alias="minQty"),
    period: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    group_guid: Optional[str] = Query(None, alias="groupGuid"),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """
    모든 고정 창고(또는 storeCode로 지정한 창고 하나)의 자재별 재고 집계를 조회합니다.
    알 수 없는 storeCode는 무시됩니다.
    search의 % 와 _ 는 기본적으로 글자 그대로 비교합니다.
    설정 SEARCH_ALLOW_WILDCARDS=true 이면 LIKE 와일드카드로 해석합니다.
    """
    spec = build_material_query(
        store_code=store_code,
        search=search,
        min_qty=min_qty,
        group_guid=group_guid,
        period=period,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        default_limit=settings.DEFAULT_RESULT_LIMIT,
    )
    stores = await inv_services.materials_by_stores(db, spec)
    return envelope(
        "تم جلب المواد حسب المستودعات بنجاح",
        filters=spec.describe(),
        total_stores=len(stores),
        total_materials=sum(store["materials_count"] for store in stores),
        stores=stores,
    )


@router.get("/materials-by-store/{storeCode}", response_model=inv_schemas.MaterialsByStoreResponse)
async def read_materials_by_store(
    store_code: str = Depends(deps.valid_store_code),
    search: Optional[str] = Query(None),
    min_qty: Optional[float] = Query(None, alias="minQty"),
    period: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    group_guid: Optional[str] = Query(None, alias="groupGuid"),
    limit: Optional[int] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """단일 창고의 자재별 재고 집계를 조회합니다. 고정 목록에 없는 창고 코드는 400입니다."""
    spec = build_material_query(
        store_code=store_code,
        search=search,
        min_qty=min_qty,
        group_guid=group_guid,
        period=period,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
        default_limit=settings.DEFAULT_RESULT_LIMIT,
    )
    stores = await inv_services.materials_by_stores(db, spec, scope_code=store_code)
    return envelope(
        f"تم جلب مواد المستودع {store_code} بنجاح",
        filters=spec.describe(),
        **stores[0],
    )


# =============================================================================
# 2. 창고 요약 엔드포인트
# =============================================================================
@router.get("/stores-summary", response_model=inv_schemas.StoresSummaryResponse)
async def read_stores_summary(db: AsyncSession = Depends(deps.get_db_session)):
    """고정 창고별 재고 요약(자재 수, 총 수량, 총 금액, 이동 건수)을 조회합니다."""
    stores = await inv_services.stores_summary(db)
    return envelope(
        "تم جلب ملخص المستودعات بنجاح",
        total_stores=len(stores),
        total_materials=sum(store["materials_count"] for store in stores),
        total_quantity=round(sum(store["total_quantity"] for store in stores), 4),
        total_value=round(sum(store["total_value"] for store in stores), 4),
        stores=stores,
    )


@router.get("/store-summary/{storeCode}", response_model=inv_schemas.StoreSummaryResponse)
async def read_store_summary(
    store_code: str = Depends(deps.valid_store_code),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """특정 창고의 재고 요약을 조회합니다."""
    if await inv_crud.get_store_by_code(db, code=store_code) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"المستودع {store_code} غير موجود",
        )
    stores = await inv_services.stores_summary(db)
    store = next(item for item in stores if item["code"] == store_code)
    return envelope(f"تم جلب ملخص المستودع {store_code} بنجاح", store=store)


@router.get("/stores-list", response_model=inv_schemas.StoresListResponse)
async def read_stores_list(db: AsyncSession = Depends(deps.get_db_session)):
    """stores 테이블의 모든 창고를 조회합니다."""
    stores = await inv_crud.get_stores(db)
    return envelope(
        "تم جلب قائمة المستودعات بنجاح",
        count=len(stores),
        stores=[inv_schemas.StoreRead.model_validate(store) for store in stores],
    )


@router.get("/stores-detailed-stats", response_model=inv_schemas.StoresDetailedStatsResponse)
async def read_stores_detailed_stats(db: AsyncSession = Depends(deps.get_db_session)):
    """고정 창고별 상세 통계(평균 단가, 그룹 수, 생산/유통기한 범위, 만료 자재 수)를 조회합니다."""
    stores = await inv_services.stores_summary(db, detailed=True)
    return envelope("تم جلب إحصائيات المستودعات بنجاح", total_stores=len(stores), stores=stores)


# =============================================================================
# 3. 자재 카탈로그 엔드포인트
# =============================================================================
@router.get("/materials", response_model=inv_schemas.MaterialsPageResponse)
async def read_materials(
    search: Optional[str] = Query(None),
    group_guid: Optional[str] = Query(None, alias="groupGuid"),
    unity: Optional[str] = Query(None),
    page: int = Query(1),
    limit: int = Query(DEFAULT_PAGE_SIZE),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: AsyncSession = Depends(deps.get_db_session),
):
    """자재 카탈로그를 페이지 단위로 조회합니다."""
    page = max(1, page)
    per_page = clamp_limit(limit)
    spec = build_material_query(
        search=search,
        group_guid=group_guid,
        unity=unity,
        limit=per_page,
        offset=(page - 1) * per_page,
        sort_by=sort_by,
        sort_order=sort_order,
        allowed_sorts=inv_crud.CATALOG_SORTS,
    )
    items, total = await inv_crud.get_materials_page(
        db, spec, allow_wildcards=settings.SEARCH_ALLOW_WILDCARDS
    )
    return envelope(
        "تم جلب المواد بنجاح",
        pagination=inv_services.paginate(page, per_page, total),
        data=[inv_services.catalog_entry(material, group) for material, group in items],
    )


@router.get("/material-groups", response_model=inv_schemas.MaterialGroupsResponse)
async def read_material_groups(db: AsyncSession = Depends(deps.get_db_session)):
    """자재 그룹 목록과 그룹별 자재 수를 조회합니다."""
    groups = await inv_crud.get_material_groups(db)
    return envelope(
        "تم جلب مجموعات المواد بنجاح",
        count=len(groups),
        data=[dict(group) for group in groups],
    )
