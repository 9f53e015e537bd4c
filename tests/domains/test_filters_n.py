# tests/domains/test_filters_n.py

"""
조회 필터 명세(`app.domains.inv.filters`)와 쿼리 빌더(`app.domains.inv.crud`)의 단위 테스트 모듈입니다.
데이터베이스 없이 명세 정규화 규칙과 SQL 조립 결과(바인드 파라미터)만 검사합니다.
"""

from datetime import date, timedelta

import pytest
from sqlalchemy.dialects import postgresql

from app.domains.inv import crud as inv_crud
from app.domains.inv import filters as inv_filters
from app.domains.inv.filters import (
    DateRange,
    DateRangeFilter,
    MaterialQuery,
    MinQtyFilter,
    SearchFilter,
    StoreCodeFilter,
    build_material_query,
)

TODAY = date(2024, 5, 20)


# =================================================================================
# 1. 기간 토큰
# =================================================================================
@pytest.mark.parametrize(
    "period, expected_start",
    [
        ("today", TODAY),
        ("last_week", TODAY - timedelta(days=7)),
        ("last_month", TODAY - timedelta(days=30)),
        ("last_3_months", TODAY - timedelta(days=90)),
        ("last_6_months", TODAY - timedelta(days=180)),
        ("last_year", TODAY - timedelta(days=365)),
        ("current_month", date(2024, 5, 1)),
        ("current_year", date(2024, 1, 1)),
    ],
)
def test_resolve_period(period, expected_start):
    date_range = inv_filters.resolve_period(period, today=TODAY)

    assert date_range == DateRange(start=expected_start, end=TODAY)


def test_resolve_period_unknown_token_is_ignored():
    assert inv_filters.resolve_period("last_decade", today=TODAY) is None
    assert inv_filters.resolve_period(None, today=TODAY) is None


# =================================================================================
# 2. 명세 정규화
# =================================================================================
def test_unknown_store_code_is_dropped():
    spec = build_material_query(store_code="555")

    assert spec.store_code is None
    assert spec.find(StoreCodeFilter) is None


def test_known_store_code_is_kept():
    spec = build_material_query(store_code="101")

    assert spec.store_code == "101"


@pytest.mark.parametrize("min_qty", [None, 0, -3])
def test_non_positive_min_qty_means_no_threshold(min_qty):
    """minQty가 없거나 0 이하이면 기본 임계값(수량 > 0)이 적용됩니다."""
    spec = build_material_query(min_qty=min_qty)

    assert spec.min_qty is None
    assert build_material_query(min_qty=min_qty) == build_material_query()


def test_positive_min_qty_is_recorded():
    spec = build_material_query(min_qty=50)

    assert spec.find(MinQtyFilter) == MinQtyFilter(50.0)


def test_search_is_trimmed_and_lowercased():
    spec = build_material_query(search="  ParaCetamol ")

    assert spec.find(SearchFilter) == SearchFilter("paracetamol")
    assert build_material_query(search="   ").find(SearchFilter) is None


def test_explicit_dates_take_precedence_over_period():
    spec = build_material_query(
        period="today",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 2, 1),
        today=TODAY,
    )

    assert spec.date_range == DateRange(start=date(2024, 1, 1), end=date(2024, 2, 1))
    # 라벨로는 요청된 기간 토큰이 그대로 남습니다.
    assert spec.period == "today"


def test_single_explicit_date_gives_open_range():
    spec = build_material_query(period="last_year", start_date=date(2024, 3, 1), today=TODAY)

    assert spec.date_range == DateRange(start=date(2024, 3, 1), end=None)


@pytest.mark.parametrize(
    "requested, expected",
    [(0, 1), (-5, 1), (1, 1), (250, 250), (10000, 10000), (20000, 10000)],
)
def test_explicit_limit_is_clamped(requested, expected):
    assert build_material_query(limit=requested, default_limit=1000).limit == expected


def test_default_limit_applies_only_without_date_filter():
    assert build_material_query(default_limit=1000).limit == 1000
    assert build_material_query(period="last_week", default_limit=1000, today=TODAY).limit is None
    assert build_material_query(period="last_week", limit=5, default_limit=1000, today=TODAY).limit == 5


@pytest.mark.parametrize(
    "sort_by, sort_order, expected",
    [
        ("qty", "desc", ("qty", "desc")),
        ("QTY", "DESC", ("qty", "desc")),
        ("price; DROP TABLE stores", "asc", ("name", "asc")),
        ("code", "sideways", ("code", "asc")),
        (None, None, ("name", "asc")),
    ],
)
def test_normalize_sort_falls_back_to_defaults(sort_by, sort_order, expected):
    assert inv_filters.normalize_sort(sort_by, sort_order) == expected


def test_describe_echoes_applied_filters():
    spec = build_material_query(
        store_code="12", search="Box", min_qty=2, period="last_week", sort_by="qty", today=TODAY
    )

    described = spec.describe()

    assert described["store_code"] == "12"
    assert described["search"] == "box"
    assert described["min_qty"] == 2.0
    assert described["period"] == "last_week"
    assert described["start_date"] == "2024-05-13"
    assert described["end_date"] == "2024-05-20"
    assert described["sort_by"] == "qty"
    assert described["limit"] is None


# =================================================================================
# 3. LIKE 이스케이프
# =================================================================================
@pytest.mark.parametrize(
    "raw, escaped",
    [
        ("abc", "abc"),
        ("100%", "100\\%"),
        ("a_b", "a\\_b"),
        ("back\\slash", "back\\\\slash"),
    ],
)
def test_escape_like(raw, escaped):
    assert inv_filters.escape_like(raw) == escaped


def test_like_pattern_keeps_wildcards_when_allowed():
    assert inv_filters.like_pattern("a%b") == "%a\\%b%"
    assert inv_filters.like_pattern("a%b", allow_wildcards=True) == "%a%b%"


# =================================================================================
# 4. 쿼리 빌더
# =================================================================================
def compile_pg(stmt):
    return stmt.compile(dialect=postgresql.dialect())


def test_store_materials_query_binds_user_values():
    """사용자 입력은 SQL 문자열이 아니라 바인드 파라미터로만 전달되어야 합니다."""
    spec = build_material_query(store_code="102", search="o'reilly", min_qty=7)

    compiled = compile_pg(inv_crud.build_store_materials_query(spec))
    sql = str(compiled)

    assert "o'reilly" not in sql
    assert "%o'reilly%" in compiled.params.values()
    assert "102" in compiled.params.values()
    assert 7.0 in compiled.params.values()
    assert "ESCAPE" in sql


def test_store_materials_query_uses_default_threshold():
    compiled = compile_pg(inv_crud.build_store_materials_query(MaterialQuery()))
    sql = str(compiled)

    assert "HAVING" in sql
    assert "LIMIT" not in sql
    assert "LEFT OUTER JOIN movements" in sql


def test_date_range_is_applied_to_movement_join():
    spec = MaterialQuery(filters=(DateRangeFilter(DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31))),))

    compiled = compile_pg(inv_crud.build_store_materials_query(spec))

    assert date(2024, 1, 1) in compiled.params.values()
    # 종료일은 다음 날 미만으로 비교합니다.
    assert date(2024, 2, 1) in compiled.params.values()


def test_store_materials_query_limit_and_sort():
    spec = build_material_query(limit=25, sort_by="qty", sort_order="desc")

    compiled = compile_pg(inv_crud.build_store_materials_query(spec))
    sql = str(compiled)

    assert "LIMIT" in sql
    assert 25 in compiled.params.values()
    assert "DESC" in sql


def test_split_filters_rejects_unknown_filter_kind():
    spec = MaterialQuery(filters=("not-a-filter",))

    with pytest.raises(TypeError):
        inv_crud.split_filters(spec)
