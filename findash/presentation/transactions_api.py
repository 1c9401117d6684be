from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from findash.data.base import get_db
from findash.domain.models import Page, TokenClaims, Transaction
from findash.domain.services.auth_service import get_current_user, require_admin
from findash.domain.services.transaction_service import (
    build_query,
    chart_series,
    create_transaction,
    delete_transaction,
    get_transaction,
    list_transactions,
    recent_transactions,
    seed_transactions,
    transaction_stats,
    update_transaction,
)
from findash.presentation.envelope import success


class TransactionResponse(BaseModel):
    id: int
    date: datetime
    amount: float
    category: str
    status: str
    user_id: str
    user_profile: str
    created_at: Optional[datetime] = Field(None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    @staticmethod
    def from_domain(t: Transaction) -> "TransactionResponse":
        return TransactionResponse(
            id=t.id,
            date=t.date,
            amount=t.amount,
            category=t.category.value,
            status=t.status.value,
            user_id=t.user_id,
            user_profile=t.user_profile,
            created_at=t.created_at,
            updated_at=t.updated_at,
        )


def serialize(t: Transaction) -> dict:
    return TransactionResponse.from_domain(t).model_dump(mode="json", by_alias=True)


def serialize_pagination(page: Page) -> dict:
    return {
        "currentPage": page.page,
        "totalPages": page.total_pages,
        "totalItems": page.total,
        "itemsPerPage": page.page_size,
        "hasNext": page.has_next,
        "hasPrev": page.has_prev,
    }


class CreateTransactionRequest(BaseModel):
    amount: Optional[float] = None
    category: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[str] = None
    user_profile: Optional[str] = None
    date: Optional[datetime] = None


class UpdateTransactionRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: Optional[datetime] = None
    amount: Optional[float] = None
    category: Optional[str] = None
    status: Optional[str] = None
    user_id: Optional[str] = None
    user_profile: Optional[str] = None


router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("/seed", status_code=201)
def seed_transactions_endpoint(
    db: Session = Depends(get_db), admin: TokenClaims = Depends(require_admin)
):
    count = seed_transactions(db)
    return success(
        message=f"Database seeded successfully with {count} transactions", count=count
    )


@router.get("/recent")
def get_recent_transactions_endpoint(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
    limit: int = Query(5, ge=1, le=100),
):
    return success(data=[serialize(t) for t in recent_transactions(db, limit)])


@router.get("/stats")
def get_stats_endpoint(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return success(data=transaction_stats(db))


@router.get("/chart-data")
def get_chart_data_endpoint(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
    period: str = Query("monthly", description="weekly, monthly or yearly"),
    year: Optional[int] = Query(
        None, ge=1, le=9999, description="Calendar year for the monthly series"
    ),
):
    return success(data=chart_series(db, period, year=year), period=period)


@router.get("")
def get_transactions_endpoint(
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=1000),
    search: str = Query("", description="Free-text search term"),
    category: str = Query("all"),
    status: str = Query("all"),
    sort_by: str = Query("date", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    date_from: Optional[str] = Query(None, alias="dateFrom"),
    date_to: Optional[str] = Query(None, alias="dateTo"),
):
    query = build_query(
        page=page,
        limit=limit,
        search=search,
        category=category,
        status=status,
        sort_by=sort_by,
        sort_order=sort_order,
        date_from=date_from,
        date_to=date_to,
    )
    result = list_transactions(db, query)
    return success(
        data={
            "transactions": [serialize(t) for t in result.items],
            "pagination": serialize_pagination(result),
        }
    )


@router.post("", status_code=201)
def create_transaction_endpoint(
    req: CreateTransactionRequest,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    transaction = create_transaction(db, req.model_dump())
    return success(message="Transaction created successfully", data=serialize(transaction))


@router.get("/{transaction_id}")
def get_transaction_endpoint(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    return success(data=serialize(get_transaction(db, transaction_id)))


@router.put("/{transaction_id}")
def update_transaction_endpoint(
    transaction_id: int,
    req: UpdateTransactionRequest,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    transaction = update_transaction(
        db, transaction_id, req.model_dump(exclude_unset=True)
    )
    return success(message="Transaction updated successfully", data=serialize(transaction))


@router.delete("/{transaction_id}")
def delete_transaction_endpoint(
    transaction_id: int,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(get_current_user),
):
    delete_transaction(db, transaction_id)
    return success(message="Transaction deleted successfully")
