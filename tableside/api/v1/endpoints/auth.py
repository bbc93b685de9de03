"""Authentication endpoints (API JWT)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from tableside.core.security import create_access_token, get_current_user, verify_password
from tableside.db.session import get_db
from tableside.models.user import User
from tableside.schemas.auth import AuthUserResponse, LoginRequest, TokenResponse
from tableside.services.user_service import get_user_by_username, record_login

router: APIRouter = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    user: User | None = get_user_by_username(db=db, username=payload.username.strip())
    if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
        logger.info("[AUTH] Rejected login for username=%s", payload.username)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect username or password")
    record_login(db, user)
    return TokenResponse(access_token=create_access_token(data={"sub": str(user.id), "role": user.role}))


@router.get("/me", response_model=AuthUserResponse)
def me(current_user: User = Depends(get_current_user)) -> AuthUserResponse:
    return AuthUserResponse.model_validate(current_user)
