from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.exc import IntegrityError

from findash.data.base import Base
from findash.domain.errors import ConflictError
from findash.domain.models import User


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserORM(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)


def user_to_domain(user_orm: UserORM) -> User:
    return User(
        id=user_orm.id,
        email=user_orm.email,
        name=user_orm.name,
        hashed_password=user_orm.hashed_password,
    )


def get_user_by_email(db, email: str) -> User | None:
    user = db.query(UserORM).filter(UserORM.email == email.lower()).first()
    return user_to_domain(user) if user else None


def create_user(db, email: str, hashed_password: str, name: str) -> User:
    db_user = UserORM(email=email.lower(), hashed_password=hashed_password, name=name)
    db.add(db_user)
    try:
        db.commit()
    except IntegrityError:
        # unique index on email: a concurrent registration won the race
        db.rollback()
        raise ConflictError("User with this email already exists")
    db.refresh(db_user)
    return user_to_domain(db_user)
