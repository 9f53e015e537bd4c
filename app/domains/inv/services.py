# app/domains/inv/services.py

"""
'inv' 도메인의 결과 집계(응답 형태 변환) 서비스입니다.

쿼리 빌더가 돌려준 (창고, 자재) 평면 행들을 창고 → 자재 목록의 중첩 구조로 바꿉니다.
전체 창고 조회와 단일 창고 조회는 같은 함수를 쓰고, 범위(scope)만 다릅니다.
"""

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.domains.inv import crud
from app.domains.inv.filters import MaterialQuery
from app.domains.inv.models import KNOWN_STORES, Material, MaterialGroup, Store

ROUND_DIGITS = 4


def _number(value: Any) -> float:
    if value is None:
        return 0.0
    return round(float(value), ROUND_DIGITS)


def _optional_number(value: Any) -> Optional[float]:
    return None if value is None else round(float(value), ROUND_DIGITS)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# =============================================================================
# 1. 행 단위 변환
# =============================================================================
def material_entry(row: Mapping[str, Any]) -> Dict[str, Any]:
    """(창고, 자재) 집계 행 하나를 응답의 자재 항목으로 바꿉니다."""
    quantity = _number(row["store_qty"])
    price = _optional_number(row["avg_price"])
    return {
        "guid": row["material_guid"],
        "code": row["material_code"],
        "name": row["material_name"],
        "latin_name": row["latin_name"],
        "unity": row["unity"],
        "group_guid": row["group_guid"],
        "group_name": row["group_name"],
        "quantity": quantity,
        "avg_price": price,
        "total_value": round(quantity * (price or 0.0), ROUND_DIGITS),
        "retail_price": _optional_number(row["retail_price"]),
        "wholesale_price": _optional_number(row["wholesale_price"]),
        "last_price": _optional_number(row["last_price"]),
        "last_production_date": _iso(row["last_production_date"]),
        "nearest_expire_date": _iso(row["nearest_expire_date"]),
        "transactions_count": int(row["transactions_count"] or 0),
    }


def store_entry(code: str, store: Optional[Store], materials: List[Dict[str, Any]]) -> Dict[str, Any]:
    """창고 정보와 자재 목록으로 창고 항목을 만들고 합계를 계산합니다."""
    return {
        "code": code,
        "name": store.name if store is not None else KNOWN_STORES.get(code),
        "guid": store.guid if store is not None else None,
        "materials_count": len(materials),
        "total_quantity": round(sum(item["quantity"] for item in materials), ROUND_DIGITS),
        "total_value": round(sum(item["total_value"] for item in materials), ROUND_DIGITS),
        "materials": materials,
    }


# =============================================================================
# 2. 창고별 묶기
# =============================================================================
def group_rows_by_store(
    rows: Iterable[Mapping[str, Any]],
    stores: Sequence[Store],
    scope_code: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    평면 행들을 창고 코드별로 묶습니다.

    scope_code가 주어지면 해당 창고만, 아니면 고정 창고 목록 전체를 항상 포함합니다.
    일치하는 자재가 없는 창고도 빈 목록(개수 0)으로 나타납니다.
    """
    codes = [scope_code] if scope_code else list(KNOWN_STORES)
    store_by_code = {}
    for store in stores:
        store_by_code.setdefault(store.code, store)

    grouped: Dict[str, List[Dict[str, Any]]] = {code: [] for code in codes}
    for row in rows:
        bucket = grouped.get(row["store_code"])
        if bucket is not None:
            bucket.append(material_entry(row))

    return [store_entry(code, store_by_code.get(code), grouped[code]) for code in codes]


def summary_entry(code: str, store: Optional[Store], totals: Optional[Mapping[str, Any]], detailed: bool = False) -> Dict[str, Any]:
    totals = totals or {}
    entry = {
        "code": code,
        "name": store.name if store is not None else KNOWN_STORES.get(code),
        "guid": store.guid if store is not None else None,
        "materials_count": int(totals.get("materials_count") or 0),
        "total_quantity": _number(totals.get("total_quantity")),
        "total_value": _number(totals.get("total_value")),
        "transactions_count": int(totals.get("transactions_count") or 0),
    }
    if detailed:
        entry.update(
            is_active=store.is_active if store is not None else None,
            keeper=store.keeper if store is not None else None,
            avg_price=_optional_number(totals.get("avg_price")),
            groups_count=int(totals.get("groups_count") or 0),
            first_production_date=_iso(totals.get("first_production_date")),
            last_production_date=_iso(totals.get("last_production_date")),
            nearest_expire_date=_iso(totals.get("nearest_expire_date")),
            expired_materials_count=int(totals.get("expired_materials_count") or 0),
        )
    return entry


def paginate(page: int, per_page: int, total_items: int) -> Dict[str, Any]:
    """
    페이지 메타데이터를 계산합니다.
    `from`은 1부터 시작하고, 반환 건수는 `to - from + 1` (from > total이면 0) 입니다.
    """
    total_pages = math.ceil(total_items / per_page) if per_page else 0
    start = (page - 1) * per_page + 1
    end = min(page * per_page, total_items)
    return {
        "current_page": page,
        "per_page": per_page,
        "total_items": total_items,
        "total_pages": total_pages,
        "from": start,
        "to": end,
        "has_previous": page > 1,
        "has_next": page < total_pages,
    }


def catalog_entry(material: Material, group: Optional[MaterialGroup]) -> Dict[str, Any]:
    return {
        "guid": material.guid,
        "code": material.code,
        "name": material.name,
        "latin_name": material.latin_name,
        "unity": material.unity,
        "group": (
            {"guid": group.guid, "code": group.code, "name": group.name} if group is not None else None
        ),
        "prices": {
            "high": material.price_high,
            "low": material.price_low,
            "wholesale": material.price_wholesale,
            "retail": material.price_retail,
            "last": material.price_last,
            "avg": material.price_avg,
            "date": _iso(material.price_date),
        },
        "units": {
            "unity2": material.unity2,
            "unity2_factor": material.unity2_factor,
            "unity3": material.unity3,
            "unity3_factor": material.unity3_factor,
        },
        "has_expire_date": material.has_expire_date,
        "has_production_date": material.has_production_date,
        "is_hidden": material.is_hidden,
    }


# =============================================================================
# 3. 조회 + 집계 조합
# =============================================================================
async def materials_by_stores(
    db: AsyncSession, spec: MaterialQuery, *, scope_code: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    필터 명세로 집계 쿼리를 실행하고 창고별 응답 구조를 돌려줍니다.
    scope_code는 단일 창고 엔드포인트용이며, 없으면 명세의 storeCode 필터를 범위로 씁니다.
    """
    scope = scope_code or spec.store_code
    rows = await crud.get_store_materials(db, spec, allow_wildcards=settings.SEARCH_ALLOW_WILDCARDS)
    stores = await crud.get_stores(db, codes=[scope] if scope else list(KNOWN_STORES))
    return group_rows_by_store(rows, stores, scope)


async def stores_summary(
    db: AsyncSession, *, detailed: bool = False, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    totals = {row["store_code"]: row for row in await crud.get_store_totals(db, today=today)}
    stores = await crud.get_stores(db, codes=list(KNOWN_STORES))
    store_by_code = {}
    for store in stores:
        store_by_code.setdefault(store.code, store)
    return [
        summary_entry(code, store_by_code.get(code), totals.get(code), detailed=detailed)
        for code in KNOWN_STORES
    ]
