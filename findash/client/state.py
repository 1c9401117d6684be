"""Dashboard state held by the caller and advanced by a pure reducer.

``reduce(state, action)`` never mutates ``state``; it returns a new
``DashboardState``. ``load_dashboard`` is the one place that talks to the API
and feeds the results back through the reducer.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from findash.client.api_client import ApiError, DashboardClient


@dataclass(frozen=True)
class TransactionFilters:
    search: str = ""
    category: str = "all"
    status: str = "all"
    date_from: str = ""
    date_to: str = ""
    sort_by: str = "date"
    sort_order: str = "desc"


_FILTER_PARAMS = {
    "search": "search",
    "category": "category",
    "status": "status",
    "date_from": "dateFrom",
    "date_to": "dateTo",
    "sort_by": "sortBy",
    "sort_order": "sortOrder",
}


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    total_pages: int = 1
    total_items: int = 0
    items_per_page: int = 10
    has_next: bool = False
    has_prev: bool = False


@dataclass(frozen=True)
class Stats:
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    balance: float = 0.0
    savings: float = 0.0
    total_transactions: int = 0


@dataclass(frozen=True)
class DashboardState:
    token: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    filters: TransactionFilters = field(default_factory=TransactionFilters)
    pagination: Pagination = field(default_factory=Pagination)
    transactions: Tuple[dict, ...] = ()
    recent_transactions: Tuple[dict, ...] = ()
    stats: Stats = field(default_factory=Stats)
    chart_data: Tuple[dict, ...] = ()
    chart_period: str = "monthly"
    is_loading: bool = False
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None


# --- actions ---


@dataclass(frozen=True)
class LoginSucceeded:
    token: str
    user: Dict[str, Any]


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class SetFilters:
    changes: Dict[str, Any]


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class ClearError:
    pass


@dataclass(frozen=True)
class SetChartPeriod:
    period: str


@dataclass(frozen=True)
class LoadStarted:
    pass


@dataclass(frozen=True)
class TransactionsLoaded:
    response: Dict[str, Any]


@dataclass(frozen=True)
class StatsLoaded:
    stats: Dict[str, Any]


@dataclass(frozen=True)
class ChartLoaded:
    points: List[dict]
    period: str


@dataclass(frozen=True)
class RecentLoaded:
    transactions: List[dict]


@dataclass(frozen=True)
class RequestFailed:
    message: str
    clears_transactions: bool = False


Action = Union[
    LoginSucceeded,
    LoggedOut,
    SetFilters,
    ClearFilters,
    ClearError,
    SetChartPeriod,
    LoadStarted,
    TransactionsLoaded,
    StatsLoaded,
    ChartLoaded,
    RecentLoaded,
    RequestFailed,
]


def _pagination_from(raw: Dict[str, Any]) -> Pagination:
    return Pagination(
        current_page=raw.get("currentPage") or 1,
        total_pages=raw.get("totalPages") or 1,
        total_items=raw.get("totalItems") or 0,
        items_per_page=raw.get("itemsPerPage") or 10,
        has_next=bool(raw.get("hasNext")),
        has_prev=bool(raw.get("hasPrev")),
    )


def _stats_from(raw: Dict[str, Any]) -> Stats:
    revenue = raw.get("totalRevenue") or 0.0
    expenses = raw.get("totalExpenses") or 0.0
    balance = raw.get("balance", revenue - expenses)
    return Stats(
        total_revenue=revenue,
        total_expenses=expenses,
        balance=balance,
        savings=raw.get("savings", balance * 0.2),
        total_transactions=raw.get("totalTransactions") or 0,
    )


def reduce(state: DashboardState, action: Action) -> DashboardState:
    if isinstance(action, LoginSucceeded):
        return replace(state, token=action.token, user=action.user, error=None)
    if isinstance(action, LoggedOut):
        return DashboardState()
    if isinstance(action, SetFilters):
        known = {f.name for f in fields(TransactionFilters)}
        unknown = set(action.changes) - known
        if unknown:
            raise ValueError(f"Unknown filter(s): {', '.join(sorted(unknown))}")
        return replace(state, filters=replace(state.filters, **action.changes))
    if isinstance(action, ClearFilters):
        return replace(state, filters=TransactionFilters())
    if isinstance(action, ClearError):
        return replace(state, error=None)
    if isinstance(action, SetChartPeriod):
        return replace(state, chart_period=action.period)
    if isinstance(action, LoadStarted):
        return replace(state, is_loading=True, error=None)
    if isinstance(action, TransactionsLoaded):
        data = action.response.get("data") or {}
        pagination = data.get("pagination")
        return replace(
            state,
            is_loading=False,
            error=None,
            transactions=tuple(data.get("transactions") or ()),
            pagination=_pagination_from(pagination) if pagination else state.pagination,
        )
    if isinstance(action, StatsLoaded):
        return replace(state, stats=_stats_from(action.stats))
    if isinstance(action, ChartLoaded):
        return replace(state, chart_data=tuple(action.points), chart_period=action.period)
    if isinstance(action, RecentLoaded):
        return replace(state, recent_transactions=tuple(action.transactions))
    if isinstance(action, RequestFailed):
        state = replace(state, is_loading=False, error=action.message)
        if action.clears_transactions:
            state = replace(state, transactions=())
        return state
    raise TypeError(f"Unknown action: {action!r}")


def filters_to_params(filters: TransactionFilters) -> Dict[str, str]:
    """Query parameters for the listing endpoint; empty and "all" values are dropped."""
    params = {}
    for name, param in _FILTER_PARAMS.items():
        value = getattr(filters, name)
        if value and value != "all":
            params[param] = value
    return params


def load_dashboard(
    client: DashboardClient, state: DashboardState, page: Optional[int] = None
) -> DashboardState:
    state = reduce(state, LoadStarted())
    try:
        response = client.get_transactions(
            page=page or state.pagination.current_page,
            limit=state.pagination.items_per_page,
            filters=filters_to_params(state.filters),
        )
        state = reduce(state, TransactionsLoaded(response))
    except ApiError as e:
        return reduce(state, RequestFailed(e.message, clears_transactions=True))

    try:
        state = reduce(state, StatsLoaded(client.get_stats().get("data") or {}))
        chart = client.get_chart_data(state.chart_period)
        state = reduce(
            state, ChartLoaded(chart.get("data") or [], chart.get("period", state.chart_period))
        )
        recent = client.get_recent_transactions()
        state = reduce(state, RecentLoaded(recent.get("data") or []))
    except ApiError as e:
        state = reduce(state, RequestFailed(e.message))
    return state
