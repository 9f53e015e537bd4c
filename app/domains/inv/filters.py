# app/domains/inv/filters.py

"""
자재/창고 조회 요청의 필터 명세를 정의하는 모듈입니다.

라우터는 원시 쿼리 파라미터를 `build_material_query()`에 넘기고,
여기서 정규화된 `MaterialQuery` 객체가 만들어집니다.
각 필터 종류는 별도의 데이터클래스이며(태그드 유니언), SQL 문 조립은
`crud.py`의 쿼리 빌더 한 곳에서만 이루어집니다. 이 모듈은 데이터베이스에 의존하지 않습니다.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple, Union

from app.domains.inv.models import KNOWN_STORES

MIN_LIMIT = 1
MAX_LIMIT = 10000

SORT_FIELDS = ("name", "code", "qty", "date")
SORT_ORDERS = ("asc", "desc")

# 기간 토큰 → 오늘로부터 거슬러 올라가는 일수
PERIOD_DAYS = {
    "today": 0,
    "last_week": 7,
    "last_month": 30,
    "last_3_months": 90,
    "last_6_months": 180,
    "last_year": 365,
}
PERIODS = tuple(PERIOD_DAYS) + ("current_month", "current_year")

LIKE_ESCAPE = "\\"


# =============================================================================
# 1. 필터 종류 (태그드 유니언)
# =============================================================================
@dataclass(frozen=True)
class DateRange:
    """양 끝을 포함하는 날짜 구간. 한쪽 경계가 None이면 그 방향은 열려 있습니다."""
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class StoreCodeFilter:
    code: str


@dataclass(frozen=True)
class SearchFilter:
    text: str  # 소문자로 정규화된 검색어


@dataclass(frozen=True)
class GroupFilter:
    group_guid: str


@dataclass(frozen=True)
class UnityFilter:
    unity: str


@dataclass(frozen=True)
class DateRangeFilter:
    date_range: DateRange


@dataclass(frozen=True)
class MinQtyFilter:
    min_qty: float


Filter = Union[StoreCodeFilter, SearchFilter, GroupFilter, UnityFilter, DateRangeFilter, MinQtyFilter]


@dataclass(frozen=True)
class MaterialQuery:
    """정규화가 끝난 조회 명세."""
    filters: Tuple[Filter, ...] = ()
    sort_by: str = "name"
    sort_order: str = "asc"
    limit: Optional[int] = None
    offset: int = 0
    period: Optional[str] = field(default=None, compare=False)  # 응답에 라벨로만 되돌려줍니다.

    def find(self, kind: type) -> Optional[Filter]:
        for item in self.filters:
            if isinstance(item, kind):
                return item
        return None

    @property
    def store_code(self) -> Optional[str]:
        found = self.find(StoreCodeFilter)
        return found.code if found else None

    @property
    def date_range(self) -> Optional[DateRange]:
        found = self.find(DateRangeFilter)
        return found.date_range if found else None

    @property
    def min_qty(self) -> Optional[float]:
        found = self.find(MinQtyFilter)
        return found.min_qty if found else None

    def describe(self) -> dict:
        """응답 본문의 `filters` 블록."""
        search = self.find(SearchFilter)
        group = self.find(GroupFilter)
        date_range = self.date_range
        return {
            "store_code": self.store_code,
            "search": search.text if search else None,
            "min_qty": self.min_qty,
            "group_guid": group.group_guid if group else None,
            "period": self.period,
            "start_date": date_range.start.isoformat() if date_range and date_range.start else None,
            "end_date": date_range.end.isoformat() if date_range and date_range.end else None,
            "sort_by": self.sort_by,
            "sort_order": self.sort_order,
            "limit": self.limit,
        }


# =============================================================================
# 2. 정규화 헬퍼
# =============================================================================
def resolve_period(period: Optional[str], today: Optional[date] = None) -> Optional[DateRange]:
    """기간 토큰을 요청 시점 기준의 구체적인 [시작일, 종료일]로 바꿉니다. 모르는 토큰은 None."""
    if not period:
        return None
    today = today or date.today()
    if period in PERIOD_DAYS:
        return DateRange(start=today - timedelta(days=PERIOD_DAYS[period]), end=today)
    if period == "current_month":
        return DateRange(start=today.replace(day=1), end=today)
    if period == "current_year":
        return DateRange(start=today.replace(month=1, day=1), end=today)
    return None


def clamp_limit(limit: Optional[int]) -> Optional[int]:
    if limit is None:
        return None
    return max(MIN_LIMIT, min(MAX_LIMIT, int(limit)))


def escape_like(value: str) -> str:
    """LIKE 메타문자(`%`, `_`)와 이스케이프 문자 자체를 문자 그대로 취급하도록 이스케이프합니다."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_pattern(text: str, *, allow_wildcards: bool = False) -> str:
    """검색어를 `%...%`로 감싼 부분 일치 패턴을 만듭니다."""
    body = text if allow_wildcards else escape_like(text)
    return f"%{body}%"


def normalize_sort(
    sort_by: Optional[str], sort_order: Optional[str], allowed: Iterable[str] = SORT_FIELDS
) -> Tuple[str, str]:
    allowed = tuple(allowed)
    sort_by = (sort_by or "").lower()
    sort_order = (sort_order or "").lower()
    return (
        sort_by if sort_by in allowed else "name",
        sort_order if sort_order in SORT_ORDERS else "asc",
    )


# =============================================================================
# 3. 명세 생성
# =============================================================================
def build_material_query(
    *,
    store_code: Optional[str] = None,
    search: Optional[str] = None,
    min_qty: Optional[float] = None,
    group_guid: Optional[str] = None,
    unity: Optional[str] = None,
    period: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: Optional[int] = None,
    offset: int = 0,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    allowed_sorts: Iterable[str] = SORT_FIELDS,
    default_limit: Optional[int] = None,
    today: Optional[date] = None,
) -> MaterialQuery:
    """
    원시 요청 값을 정규화된 `MaterialQuery`로 바꿉니다.

    - 알 수 없는 창고 코드는 조용히 버립니다 (필터 미적용).
    - `min_qty <= 0`은 지정하지 않은 것과 같습니다.
    - 명시적 날짜(startDate/endDate)가 하나라도 있으면 `period`보다 우선합니다.
    - `limit`이 주어지면 [1, 10000]으로 제한하고, 없으면 날짜 필터가 있을 때만 무제한,
      그렇지 않으면 `default_limit`을 적용합니다.
    """
    filters = []

    if store_code and store_code in KNOWN_STORES:
        filters.append(StoreCodeFilter(store_code))

    search_text = (search or "").strip().lower()
    if search_text:
        filters.append(SearchFilter(search_text))

    if group_guid:
        filters.append(GroupFilter(group_guid))

    if unity:
        filters.append(UnityFilter(unity))

    if start_date is not None or end_date is not None:
        date_range = DateRange(start=start_date, end=end_date)
    else:
        date_range = resolve_period(period, today)
    if date_range is not None:
        filters.append(DateRangeFilter(date_range))

    if min_qty is not None and min_qty > 0:
        filters.append(MinQtyFilter(float(min_qty)))

    if limit is not None:
        bound = clamp_limit(limit)
    elif date_range is not None:
        bound = None
    else:
        bound = default_limit

    sort_by, sort_order = normalize_sort(sort_by, sort_order, allowed_sorts)

    return MaterialQuery(
        filters=tuple(filters),
        sort_by=sort_by,
        sort_order=sort_order,
        limit=bound,
        offset=max(0, offset),
        period=period or None,
    )
