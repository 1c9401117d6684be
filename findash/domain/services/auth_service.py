import logging
import re
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from findash import config
from findash.data.repositories.user_repository import create_user, get_user_by_email
from findash.domain.errors import (
    AuthError,
    ConflictError,
    InvalidCredentials,
    InvalidToken,
    ValidationError,
)
from findash.domain.models import AuthResult, TokenClaims, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS
)

# dot-free labels keep matching linear
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@.]+(?:\.[^\s@.]+)*\.[A-Za-z]{2,}$")
MAX_EMAIL_LENGTH = 254
MIN_PASSWORD_LENGTH = 6
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50

bearer_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password, hashed_password):
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password):
    return pwd_context.hash(password)


def normalize_email(email: str) -> str:
    email = (email or "").strip().lower()
    if len(email) > MAX_EMAIL_LENGTH or not EMAIL_RE.fullmatch(email):
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "email", "message": "Please provide a valid email"}],
        )
    return email


def _validate_registration(email: str, password: str, name: str) -> tuple[str, str]:
    errors = []
    try:
        email = normalize_email(email)
    except ValidationError as e:
        errors.extend(e.errors)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        errors.append(
            {
                "field": "password",
                "message": "Password must be at least 6 characters long",
            }
        )
    name = (name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        errors.append(
            {"field": "name", "message": "Name must be at least 2 characters long"}
        )
    elif len(name) > MAX_NAME_LENGTH:
        errors.append({"field": "name", "message": "Name cannot exceed 50 characters"})
    if errors:
        raise ValidationError("Validation failed", errors=errors)
    return email, name


def create_access_token(claims: TokenClaims, expires_delta: timedelta | None = None):
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (
        expires_delta or timedelta(days=config.ACCESS_TOKEN_EXPIRE_DAYS)
    )
    to_encode = claims.as_dict()
    to_encode.update({"iat": issued_at, "exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def _issue(user: User) -> AuthResult:
    claims = TokenClaims(user_id=str(user.id), email=user.email, name=user.name)
    return AuthResult(token=create_access_token(claims), user=user)


def register(db: Session, email: str, password: str, name: str) -> AuthResult:
    email, name = _validate_registration(email, password, name)
    if get_user_by_email(db, email):
        raise ConflictError("User with this email already exists")
    user = create_user(db, email, get_password_hash(password), name)
    logger.info("Registered user id=%s", user.id)
    return _issue(user)


def login(db: Session, email: str, password: str) -> AuthResult:
    email = normalize_email(email)
    if not password:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "password", "message": "Password is required"}],
        )
    user = get_user_by_email(db, email)
    # unknown email and wrong password must be indistinguishable to the caller
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Rejected login attempt")
        raise InvalidCredentials()
    return _issue(user)


def verify(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        raise InvalidToken()
    user_id = payload.get("userId")
    email = payload.get("email")
    if user_id is None or email is None:
        raise InvalidToken()
    return TokenClaims(user_id=str(user_id), email=email, name=payload.get("name", ""))


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenClaims:
    if credentials is None or not credentials.credentials:
        raise AuthError("Access token required")
    return verify(credentials.credentials)


def require_admin(current_user: TokenClaims = Depends(get_current_user)) -> TokenClaims:
    if current_user.email.lower() not in config.admin_emails():
        raise AuthError("Administrator privileges required", status_code=403)
    return current_user
