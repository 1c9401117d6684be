from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from findash.data.base import get_db
from findash.domain.models import AuthResult, TokenClaims
from findash.domain.services.auth_service import get_current_user, login, register
from findash.presentation.envelope import success

router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    email: str
    password: str


def _auth_payload(result: AuthResult, message: str) -> dict:
    return success(message=message, token=result.token, user=result.user.public())


@router.post("/register", status_code=201)
def register_user_endpoint(req: RegisterRequest, db: Session = Depends(get_db)):
    result = register(db, req.email, req.password, req.name)
    return _auth_payload(result, "User registered successfully")


@router.post("/login")
def login_endpoint(req: LoginRequest, db: Session = Depends(get_db)):
    result = login(db, req.email, req.password)
    return _auth_payload(result, "Login successful")


@router.get("/verify")
def verify_token_endpoint(current_user: TokenClaims = Depends(get_current_user)):
    return success(valid=True, user=current_user.as_dict())


@router.post("/logout")
def logout_endpoint(current_user: TokenClaims = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    return success(message="Logged out successfully")
