from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ems.core.errors import classify_integrity_error
from ems.core.logging import get_logger
from ems.core.security import hash_password, issue_token, verify_password
from ems.db.session import get_session, transaction
from ems.models.user import User

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str
    password: str = Field(..., min_length=6)
    role: str = "Employee"

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        email = value.strip()
        if "@" not in email:
            raise ValueError("Invalid email format")
        return email


class LoginRequest(BaseModel):
    username: str = Field(..., description="Username or email")
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    email: str
    role: str


class LoginResponse(BaseModel):
    message: str = "Login successful"
    token: str
    token_type: str = "bearer"
    user: UserOut


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_session)) -> UserOut:
    user = User(
        username=payload.username.strip(),
        email=payload.email,
        hashed_password=hash_password(payload.password),
        role=payload.role,
    )
    try:
        with transaction(db):
            db.add(user)
    except IntegrityError as exc:
        raise classify_integrity_error(exc, duplicate="Username or email already exists") from exc

    db.refresh(user)
    logger.info("user_registered", email=user.email, role=user.role)
    return UserOut(id=user.id, username=user.username, email=user.email, role=user.role)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_session)) -> LoginResponse:
    identifier = payload.username.strip()
    logger.info("login_attempt", identifier=identifier)
    user = (
        db.query(User)
        .filter(or_(User.username == identifier, func.lower(User.email) == identifier.lower()))
        .order_by(User.id.asc())
        .first()
    )

    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    logger.info("login_success", email=user.email, role=user.role)
    return LoginResponse(
        token=issue_token(),
        user=UserOut(id=user.id, username=user.username, email=user.email, role=user.role),
    )
