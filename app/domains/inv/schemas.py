# app/domains/inv/schemas.py

"""
'inv' 도메인 응답의 Pydantic 스키마를 정의하는 모듈입니다.
모든 응답은 `success`, `message`, `timestamp` 봉투 필드를 공유합니다.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    success: bool = Field(True, description="요청 성공 여부")
    message: str = Field(..., description="결과 메시지")
    timestamp: Optional[str] = Field(None, description="응답 생성 시각 (UTC, ISO 8601)")


# =============================================================================
# 1. 창고별 자재 집계
# =============================================================================
class MaterialSummary(BaseModel):
    guid: str
    code: str
    name: str
    latin_name: Optional[str] = None
    unity: Optional[str] = None
    group_guid: Optional[str] = None
    group_name: Optional[str] = None
    quantity: float = Field(..., description="집계 수량 SUM(qty)")
    avg_price: Optional[float] = Field(None, description="평균 단가 AVG(price)")
    total_value: float = Field(..., description="quantity × avg_price")
    retail_price: Optional[float] = None
    wholesale_price: Optional[float] = None
    last_price: Optional[float] = None
    last_production_date: Optional[str] = None
    nearest_expire_date: Optional[str] = None
    transactions_count: int = 0


class StoreMaterials(BaseModel):
    code: str
    name: Optional[str] = None
    guid: Optional[str] = None
    materials_count: int
    total_quantity: float
    total_value: float
    materials: List[MaterialSummary]


class AppliedFilters(BaseModel):
    store_code: Optional[str] = None
    search: Optional[str] = None
    min_qty: Optional[float] = None
    group_guid: Optional[str] = None
    period: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    sort_by: str = "name"
    sort_order: str = "asc"
    limit: Optional[int] = None


class MaterialsByStoresResponse(Envelope):
    filters: AppliedFilters
    total_stores: int
    total_materials: int
    stores: List[StoreMaterials]


class MaterialsByStoreResponse(Envelope, StoreMaterials):
    filters: AppliedFilters


# =============================================================================
# 2. 창고 요약
# =============================================================================
class StoreSummary(BaseModel):
    code: str
    name: Optional[str] = None
    guid: Optional[str] = None
    materials_count: int
    total_quantity: float
    total_value: float
    transactions_count: int


class StoreDetailedStats(StoreSummary):
    is_active: Optional[bool] = None
    keeper: Optional[str] = None
    avg_price: Optional[float] = None
    groups_count: int = 0
    first_production_date: Optional[str] = None
    last_production_date: Optional[str] = None
    nearest_expire_date: Optional[str] = None
    expired_materials_count: int = 0


class StoresSummaryResponse(Envelope):
    total_stores: int
    total_materials: int
    total_quantity: float
    total_value: float
    stores: List[StoreSummary]


class StoreSummaryResponse(Envelope):
    store: StoreSummary


class StoresDetailedStatsResponse(Envelope):
    total_stores: int
    stores: List[StoreDetailedStats]


class StoreRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    name: str
    guid: str
    is_active: bool
    address: Optional[str] = None
    keeper: Optional[str] = None


class StoresListResponse(Envelope):
    count: int
    stores: List[StoreRead]


# =============================================================================
# 3. 자재 카탈로그
# =============================================================================
class MaterialGroupRef(BaseModel):
    guid: str
    code: str
    name: str


class MaterialPrices(BaseModel):
    high: Optional[float] = None
    low: Optional[float] = None
    wholesale: Optional[float] = None
    retail: Optional[float] = None
    last: Optional[float] = None
    avg: Optional[float] = None
    date: Optional[str] = None


class MaterialUnits(BaseModel):
    unity2: Optional[str] = None
    unity2_factor: Optional[float] = None
    unity3: Optional[str] = None
    unity3_factor: Optional[float] = None


class MaterialRead(BaseModel):
    guid: str
    code: str
    name: str
    latin_name: Optional[str] = None
    unity: Optional[str] = None
    group: Optional[MaterialGroupRef] = None
    prices: MaterialPrices
    units: MaterialUnits
    has_expire_date: bool
    has_production_date: bool
    is_hidden: bool


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int
    per_page: int
    total_items: int
    total_pages: int
    from_: int = Field(..., alias="from")
    to: int
    has_previous: bool
    has_next: bool


class MaterialsPageResponse(Envelope):
    pagination: Pagination
    data: List[MaterialRead]


class MaterialGroupRead(MaterialGroupRef):
    materials_count: int


class MaterialGroupsResponse(Envelope):
    count: int
    data: List[MaterialGroupRead]
