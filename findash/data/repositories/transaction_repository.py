# findash/data/repositories/transaction_repository.py
import logging
from datetime import datetime, time, timezone
from typing import List

from sqlalchemy import CheckConstraint, Column, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, Integer, String, Text, and_, case, cast, func, or_, update

from findash.data.base import Base
from findash.domain.models import (
    DEFAULT_USER_PROFILE,
    SortOrder,
    Transaction,
    TransactionCategory,
    TransactionQuery,
    TransactionStatus,
)
from findash.domain.search import (
    AmountEquals,
    AmountRange,
    DateSpan,
    IdEquals,
    SearchClause,
    TextMatch,
    build_search_clauses,
)

logger = logging.getLogger(__name__)

TRANSACTION_COUNTER = "transactions"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _enum_column(enum_cls):
    # Stored by value ("Revenue", "Paid") so text search and sorting see the labels
    return SAEnum(
        enum_cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=16,
    )


class TransactionORM(Base):
    __tablename__ = "transactions"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_transactions_amount"),)
    id = Column(Integer, primary_key=True, autoincrement=False, index=True)
    date = Column(DateTime, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    category = Column(_enum_column(TransactionCategory), nullable=False)
    status = Column(_enum_column(TransactionStatus), nullable=False)
    user_id = Column(String, nullable=False)
    user_profile = Column(String, nullable=False, default=DEFAULT_USER_PROFILE)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class IdCounterORM(Base):
    __tablename__ = "id_counters"
    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False)


def transaction_to_domain(transaction_orm: TransactionORM) -> Transaction:
    return Transaction(
        id=transaction_orm.id,
        date=transaction_orm.date,
        amount=transaction_orm.amount,
        category=transaction_orm.category,
        status=transaction_orm.status,
        user_id=transaction_orm.user_id,
        user_profile=transaction_orm.user_profile,
        created_at=transaction_orm.created_at,
        updated_at=transaction_orm.updated_at,
    )


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_clause_condition(clause: SearchClause):
    if isinstance(clause, TextMatch):
        term = f"%{_escape_like(clause.text)}%"
        return or_(
            cast(TransactionORM.category, Text).ilike(term, escape="\\"),
            cast(TransactionORM.status, Text).ilike(term, escape="\\"),
            TransactionORM.user_id.ilike(term, escape="\\"),
        )
    if isinstance(clause, AmountEquals):
        return TransactionORM.amount == clause.value
    if isinstance(clause, AmountRange):
        return and_(
            TransactionORM.amount >= clause.low, TransactionORM.amount <= clause.high
        )
    if isinstance(clause, IdEquals):
        return TransactionORM.id == clause.value
    if isinstance(clause, DateSpan):
        return and_(TransactionORM.date >= clause.start, TransactionORM.date < clause.end)
    raise TypeError(f"Unsupported search clause: {clause!r}")


def build_transaction_filters(query: TransactionQuery) -> list:
    """
    Build the conjunctive SQLAlchemy filter list for a listing query.
    The search OR-group is one more conjunct, so it never widens the date range.
    """
    filters = []
    if query.category is not None:
        filters.append(TransactionORM.category == query.category)
    if query.status is not None:
        filters.append(TransactionORM.status == query.status)
    if query.date_from is not None:
        filters.append(TransactionORM.date >= datetime.combine(query.date_from, time.min))
    if query.date_to is not None:
        filters.append(TransactionORM.date <= datetime.combine(query.date_to, time.max))
    clauses = build_search_clauses(query.search)
    if clauses:
        filters.append(or_(*(search_clause_condition(c) for c in clauses)))
    return filters


def get_transactions_page(db, query: TransactionQuery) -> tuple[list[Transaction], int]:
    base = db.query(TransactionORM).filter(*build_transaction_filters(query))
    total = base.count()
    column = getattr(TransactionORM, query.sort_by)
    if query.sort_order == SortOrder.DESC:
        ordering = (column.desc(), TransactionORM.id.desc())
    else:
        ordering = (column.asc(), TransactionORM.id.asc())
    rows = base.order_by(*ordering).offset(query.offset).limit(query.page_size).all()
    return [transaction_to_domain(t) for t in rows], total


def get_transaction(db, transaction_id: int) -> Transaction | None:
    transaction = db.query(TransactionORM).filter_by(id=transaction_id).first()
    return transaction_to_domain(transaction) if transaction else None


def get_recent_transactions(db, limit: int) -> list[Transaction]:
    rows = (
        db.query(TransactionORM)
        .order_by(TransactionORM.date.desc(), TransactionORM.id.desc())
        .limit(limit)
        .all()
    )
    return [transaction_to_domain(t) for t in rows]


def next_transaction_id(db) -> int:
    """
    Reserve the next transaction id with a single atomic UPDATE .. RETURNING.
    Must run inside the same session transaction as the insert that uses it.
    """
    stmt = (
        update(IdCounterORM)
        .where(IdCounterORM.name == TRANSACTION_COUNTER)
        .values(value=IdCounterORM.value + 1)
        .returning(IdCounterORM.value)
        .execution_options(synchronize_session=False)
    )
    value = db.execute(stmt).scalar()
    if value is None:
        current = db.query(func.max(TransactionORM.id)).scalar() or 0
        value = current + 1
        db.add(IdCounterORM(name=TRANSACTION_COUNTER, value=value))
        db.flush()
    return value


def add_transaction(db, transaction: Transaction) -> Transaction:
    transaction_orm = TransactionORM(
        id=next_transaction_id(db),
        date=transaction.date,
        amount=transaction.amount,
        category=transaction.category,
        status=transaction.status,
        user_id=transaction.user_id,
        user_profile=transaction.user_profile,
    )
    db.add(transaction_orm)
    db.commit()
    db.refresh(transaction_orm)
    return transaction_to_domain(transaction_orm)


def update_transaction(db, transaction_id: int, updates: dict) -> Transaction | None:
    transaction = db.query(TransactionORM).filter_by(id=transaction_id).first()
    if not transaction:
        return None
    for key, value in updates.items():
        setattr(transaction, key, value)
    db.commit()
    db.refresh(transaction)
    return transaction_to_domain(transaction)


def delete_transaction(db, transaction_id: int) -> bool:
    deleted = (
        db.query(TransactionORM)
        .filter(TransactionORM.id == transaction_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def replace_all_transactions(db, transactions: List[Transaction]) -> int:
    """
    Replace the whole collection and move the id counter to the largest seeded id.
    """
    db.query(TransactionORM).delete()
    for t in transactions:
        db.add(
            TransactionORM(
                id=t.id,
                date=t.date,
                amount=t.amount,
                category=t.category,
                status=t.status,
                user_id=t.user_id,
                user_profile=t.user_profile,
            )
        )
    max_id = max((t.id for t in transactions), default=0)
    db.merge(IdCounterORM(name=TRANSACTION_COUNTER, value=max_id))
    db.commit()
    logger.info("Replaced transactions collection with %d rows", len(transactions))
    return len(transactions)


def sum_transactions_by_category_status(db) -> dict:
    def conditional_sum(category, status):
        return func.coalesce(
            func.sum(
                case(
                    (
                        and_(
                            TransactionORM.category == category,
                            TransactionORM.status == status,
                        ),
                        TransactionORM.amount,
                    ),
                    else_=0.0,
                )
            ),
            0.0,
        )

    row = db.query(
        conditional_sum(TransactionCategory.REVENUE, TransactionStatus.PAID),
        conditional_sum(TransactionCategory.EXPENSE, TransactionStatus.PAID),
        conditional_sum(TransactionCategory.REVENUE, TransactionStatus.PENDING),
        conditional_sum(TransactionCategory.EXPENSE, TransactionStatus.PENDING),
        func.count(TransactionORM.id),
    ).one()
    return {
        "totalRevenue": float(row[0]),
        "totalExpenses": float(row[1]),
        "pendingRevenue": float(row[2]),
        "pendingExpenses": float(row[3]),
        "totalTransactions": int(row[4]),
    }


def get_paid_chart_rows(db, start: datetime | None = None, end: datetime | None = None):
    filters = [TransactionORM.status == TransactionStatus.PAID]
    if start:
        filters.append(TransactionORM.date >= start)
    if end:
        filters.append(TransactionORM.date < end)
    return (
        db.query(TransactionORM.date, TransactionORM.category, TransactionORM.amount)
        .filter(*filters)
        .order_by(TransactionORM.date.asc())
        .all()
    )

