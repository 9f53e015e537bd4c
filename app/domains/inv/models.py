# app/domains/inv/models.py

"""
'inv' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

창고(Store), 자재 그룹(MaterialGroup), 자재(Material), 입출고 이동 기록(Movement)은
모두 외부 시스템이 소유한 테이블이며, 이 애플리케이션은 읽기와 집계만 수행합니다.
내부 조인 키는 `guid`, 외부 식별자는 `code`입니다.
"""

from typing import Dict, Optional
from datetime import date

from sqlmodel import Field, SQLModel


# 이 배포 환경에서 사용하는 고정 창고 코드와 표시 이름
KNOWN_STORES: Dict[str, str] = {
    "12": "مستودع المواد الجاهزة",
    "101": "مستودع المواد الاولية المساعدة",
    "102": "مستودع المواد الاولية الفعالة",
}


# =============================================================================
# 1. stores 테이블 모델
# =============================================================================
class Store(SQLModel, table=True):
    __tablename__ = "stores"

    guid: str = Field(primary_key=True, max_length=36, description="창고 내부 식별자")
    code: str = Field(index=True, max_length=20, description="창고 코드 (라우팅/필터링에 사용)")
    name: str = Field(max_length=250, description="창고명")
    is_active: bool = Field(default=True)
    address: Optional[str] = Field(default=None, max_length=250)
    keeper: Optional[str] = Field(default=None, max_length=250, description="창고 관리자")


# =============================================================================
# 2. material_groups 테이블 모델
# =============================================================================
class MaterialGroup(SQLModel, table=True):
    __tablename__ = "material_groups"

    guid: str = Field(primary_key=True, max_length=36)
    code: str = Field(index=True, max_length=50)
    name: str = Field(max_length=250)


# =============================================================================
# 3. materials 테이블 모델
# =============================================================================
class Material(SQLModel, table=True):
    __tablename__ = "materials"

    guid: str = Field(primary_key=True, max_length=36)
    code: str = Field(index=True, max_length=100, description="자재 코드")
    name: str = Field(index=True, max_length=250, description="자재명")
    latin_name: Optional[str] = Field(default=None, max_length=250)
    unity: Optional[str] = Field(default=None, max_length=100, description="기본 측정 단위")
    group_guid: Optional[str] = Field(default=None, foreign_key="material_groups.guid", index=True)

    # 가격 정보
    price_high: Optional[float] = Field(default=None)
    price_low: Optional[float] = Field(default=None)
    price_wholesale: Optional[float] = Field(default=None)
    price_retail: Optional[float] = Field(default=None)
    price_last: Optional[float] = Field(default=None)
    price_avg: Optional[float] = Field(default=None)
    price_date: Optional[date] = Field(default=None)

    # 보조 단위 환산
    unity2: Optional[str] = Field(default=None, max_length=100)
    unity2_factor: Optional[float] = Field(default=None)
    unity3: Optional[str] = Field(default=None, max_length=100)
    unity3_factor: Optional[float] = Field(default=None)

    has_expire_date: bool = Field(default=False, description="유통기한 추적 여부")
    has_production_date: bool = Field(default=False, description="생산일자 추적 여부")
    is_hidden: bool = Field(default=False)


# =============================================================================
# 4. movements 테이블 모델 (재고 원장 라인)
# =============================================================================
class Movement(SQLModel, table=True):
    __tablename__ = "movements"

    guid: str = Field(primary_key=True, max_length=36)
    bill_guid: Optional[str] = Field(default=None, max_length=36, index=True, description="상위 전표 식별자")
    store_guid: str = Field(foreign_key="stores.guid", index=True)
    material_guid: str = Field(foreign_key="materials.guid", index=True)
    qty: float = Field(default=0.0, description="수량 (입고 +, 출고 -)")
    price: float = Field(default=0.0)
    production_date: Optional[date] = Field(default=None, index=True)
    expire_date: Optional[date] = Field(default=None)
