# findash/domain/models.py
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar

from findash.domain.errors import ValidationError

DEFAULT_USER_PROFILE = "https://thispersondoesnotexist.com/"


class TransactionCategory(Enum):
    REVENUE = "Revenue"
    EXPENSE = "Expense"


class TransactionStatus(Enum):
    PAID = "Paid"
    PENDING = "Pending"


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


SORTABLE_FIELDS = ("id", "date", "amount", "category", "status", "user_id")
# largest value a signed 64-bit SQL INTEGER can bind
MAX_SQL_INTEGER = 2**63 - 1
MAX_TRANSACTION_ID = MAX_SQL_INTEGER


@dataclass
class Transaction:
    id: Optional[int]
    date: datetime
    amount: float
    category: TransactionCategory
    status: TransactionStatus
    user_id: str
    user_profile: str = DEFAULT_USER_PROFILE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.amount is None or self.amount < 0:
            raise ValidationError("Amount must be a non-negative number")
        if not self.user_id:
            raise ValidationError("user_id must be provided")


@dataclass
class User:
    id: int
    email: str
    name: str
    hashed_password: str = field(repr=False, default="")

    def public(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name}


@dataclass
class TokenClaims:
    user_id: str
    email: str
    name: str

    def as_dict(self) -> dict:
        return {"userId": self.user_id, "email": self.email, "name": self.name}


@dataclass
class AuthResult:
    token: str
    user: User


@dataclass
class TransactionQuery:
    page: int = 1
    page_size: int = 10
    search: str = ""
    category: Optional[TransactionCategory] = None
    status: Optional[TransactionStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: str = "date"
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self):
        if self.page < 1:
            raise ValidationError("page must be at least 1")
        if self.page_size < 1:
            raise ValidationError("limit must be at least 1")
        if self.offset > MAX_SQL_INTEGER:
            raise ValidationError("page is out of range")
        if self.sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort by '{self.sort_by}'; expected one of "
                f"{', '.join(SORTABLE_FIELDS)}"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: List[T]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1
