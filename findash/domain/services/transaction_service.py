import json
import logging
from datetime import MAXYEAR, MINYEAR, date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from sqlalchemy.orm import Session

from findash.data.repositories.transaction_repository import (
    add_transaction,
    delete_transaction as repo_delete_transaction,
    get_paid_chart_rows,
    get_recent_transactions,
    get_transaction as repo_get_transaction,
    get_transactions_page,
    replace_all_transactions,
    sum_transactions_by_category_status,
    update_transaction as repo_update_transaction,
)
from findash.domain.errors import NotFoundError, ValidationError
from findash.domain.helpers.aggregation import (
    monthly_series,
    weekly_series,
    weekly_window_start,
    yearly_series,
)
from findash.domain.models import (
    DEFAULT_USER_PROFILE,
    MAX_TRANSACTION_ID,
    Page,
    SortOrder,
    Transaction,
    TransactionCategory,
    TransactionQuery,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

SAVINGS_RATE = 0.2
CHART_PERIODS = ("weekly", "monthly", "yearly")
REQUIRED_CREATE_FIELDS = ("amount", "category", "status", "user_id")
UPDATABLE_FIELDS = ("date", "amount", "category", "status", "user_id", "user_profile")
SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "seed" / "transactions.json"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Any, field: str) -> datetime:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return to_naive_utc(date_parser.parse(str(value)))
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid {field}: {value}")


def parse_day(value: Optional[str], field: str) -> Optional[date]:
    if value is None or not str(value).strip():
        return None
    return parse_datetime(value, field).date()


def parse_category(value: Any) -> TransactionCategory:
    try:
        return TransactionCategory(value)
    except ValueError:
        raise ValidationError(
            f"Invalid category: {value}. Expected Revenue or Expense"
        )


def parse_status(value: Any) -> TransactionStatus:
    try:
        return TransactionStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value}. Expected Paid or Pending")


def parse_amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid amount: {value}")
    if amount != amount or amount < 0:
        raise ValidationError("Amount must be a non-negative number")
    return amount


def build_query(
    page: int = 1,
    limit: int = 10,
    search: str = "",
    category: Optional[str] = None,
    status: Optional[str] = None,
    sort_by: str = "date",
    sort_order: str = "desc",
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> TransactionQuery:
    """
    Translate raw listing parameters into a TransactionQuery.
    "all" or an empty value disables the category/status filter.
    """
    try:
        order = SortOrder(sort_order)
    except ValueError:
        raise ValidationError("sortOrder must be 'asc' or 'desc'")
    return TransactionQuery(
        page=page,
        page_size=limit,
        search=search or "",
        category=parse_category(category) if category and category != "all" else None,
        status=parse_status(status) if status and status != "all" else None,
        date_from=parse_day(date_from, "dateFrom"),
        date_to=parse_day(date_to, "dateTo"),
        sort_by=sort_by or "date",
        sort_order=order,
    )


def _require_storable_id(transaction_id: int) -> None:
    # ids beyond the column range can never exist
    if not 0 < transaction_id <= MAX_TRANSACTION_ID:
        raise NotFoundError("Transaction not found")


def list_transactions(db: Session, query: TransactionQuery) -> Page[Transaction]:
    items, total = get_transactions_page(db, query)
    return Page(items=items, total=total, page=query.page, page_size=query.page_size)


def get_transaction(db: Session, transaction_id: int) -> Transaction:
    _require_storable_id(transaction_id)
    transaction = repo_get_transaction(db, transaction_id)
    if transaction is None:
        raise NotFoundError("Transaction not found")
    return transaction


def recent_transactions(db: Session, limit: int = 5) -> List[Transaction]:
    if limit < 1:
        raise ValidationError("limit must be at least 1")
    return get_recent_transactions(db, limit)


def create_transaction(db: Session, data: Dict[str, Any]) -> Transaction:
    missing = [f for f in REQUIRED_CREATE_FIELDS if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(
            "Missing required fields: amount, category, status, user_id",
            errors=[{"field": f, "message": "Field is required"} for f in missing],
        )
    when = data.get("date")
    transaction = Transaction(
        id=None,
        date=parse_datetime(when, "date") if when else _utcnow(),
        amount=parse_amount(data["amount"]),
        category=parse_category(data["category"]),
        status=parse_status(data["status"]),
        user_id=str(data["user_id"]),
        user_profile=data.get("user_profile") or DEFAULT_USER_PROFILE,
    )
    created = add_transaction(db, transaction)
    logger.info("Created transaction id=%s", created.id)
    return created


def update_transaction(
    db: Session, transaction_id: int, updates: Dict[str, Any]
) -> Transaction:
    """
    Apply a partial update. The identifier is immutable, so only
    UPDATABLE_FIELDS are considered and anything else is ignored.
    """
    _require_storable_id(transaction_id)
    parsers = {
        "date": lambda v: parse_datetime(v, "date"),
        "amount": parse_amount,
        "category": parse_category,
        "status": parse_status,
        "user_id": str,
        "user_profile": lambda v: v or DEFAULT_USER_PROFILE,
    }
    changes = {}
    for field in UPDATABLE_FIELDS:
        if field not in updates:
            continue
        value = updates[field]
        if value is None:
            raise ValidationError(f"{field} cannot be null")
        changes[field] = parsers[field](value)
    if "user_id" in changes and not changes["user_id"]:
        raise ValidationError("user_id must be provided")
    updated = repo_update_transaction(db, transaction_id, changes)
    if updated is None:
        raise NotFoundError("Transaction not found")
    return updated


def delete_transaction(db: Session, transaction_id: int) -> None:
    _require_storable_id(transaction_id)
    if not repo_delete_transaction(db, transaction_id):
        raise NotFoundError("Transaction not found")
    logger.info("Deleted transaction id=%s", transaction_id)


def transaction_stats(db: Session) -> Dict[str, Any]:
    stats = sum_transactions_by_category_status(db)
    balance = stats["totalRevenue"] - stats["totalExpenses"]
    stats["balance"] = balance
    stats["savings"] = balance * SAVINGS_RATE
    return stats


def chart_series(
    db: Session,
    period: str = "monthly",
    now: Optional[datetime] = None,
    year: Optional[int] = None,
) -> List[dict]:
    if period not in CHART_PERIODS:
        raise ValidationError(
            f"Invalid period: {period}. Expected one of {', '.join(CHART_PERIODS)}"
        )
    now = now or _utcnow()
    if period == "weekly":
        rows = get_paid_chart_rows(db, start=weekly_window_start(now))
        return weekly_series(rows, now)
    if period == "yearly":
        return yearly_series(get_paid_chart_rows(db))
    if year is None:
        return monthly_series(get_paid_chart_rows(db))
    if not MINYEAR <= year <= MAXYEAR:
        raise ValidationError(f"Invalid year: {year}")
    end = datetime(year + 1, 1, 1) if year < MAXYEAR else None
    rows = get_paid_chart_rows(db, start=datetime(year, 1, 1), end=end)
    return monthly_series(rows, year)


def load_seed_transactions(path: Path = SEED_FILE) -> List[Transaction]:
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    return [
        Transaction(
            id=int(r["id"]),
            date=parse_datetime(r["date"], "date"),
            amount=parse_amount(r["amount"]),
            category=parse_category(r["category"]),
            status=parse_status(r["status"]),
            user_id=str(r["user_id"]),
            user_profile=r.get("user_profile") or DEFAULT_USER_PROFILE,
        )
        for r in records
    ]


def seed_transactions(db: Session, path: Path = SEED_FILE) -> int:
    transactions = load_seed_transactions(path)
    count = replace_all_transactions(db, transactions)
    logger.info("Seeded %d transactions from %s", count, path.name)
    return count
