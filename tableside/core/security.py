"""Security utilities for password hashing, JWT auth and restaurant scoping."""

from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from tableside.auth import OWNER_ROLES, RestaurantContext, ensure_role
from tableside.core.config import settings
from tableside.db.session import get_db
from tableside.models.user import User
from tableside.services.user_service import get_user_by_id

pwd_context: CryptContext = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
bearer_scheme: HTTPBearer = HTTPBearer(auto_error=True)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict[str, Any]) -> str:
    """Create a signed JWT access token from payload data."""
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(
        minutes=settings.jwt_expire_minutes
    )
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def verify_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token payload."""
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
        ) from exc

    return payload


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated user from the Authorization header."""
    payload: dict[str, Any] = verify_token(credentials.credentials)
    user_id: str | None = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        )

    try:
        parsed_user_id: int = int(user_id)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
        ) from exc

    user: User | None = get_user_by_id(db=db, user_id=parsed_user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return user


def get_restaurant_context(
    current_user: User = Depends(get_current_user),
    x_restaurant_id: int | None = Header(default=None),
) -> RestaurantContext:
    """Build the explicit restaurant scope for the request.

    Restaurant and kitchen staff act on their own restaurant only. Admins
    choose a restaurant per request with the ``X-Restaurant-Id`` header.
    """
    if current_user.role == "ADMIN":
        restaurant_id = x_restaurant_id
        if restaurant_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="X-Restaurant-Id header is required for admin requests",
            )
    else:
        restaurant_id = current_user.restaurant_id
        if restaurant_id is None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is not linked to a restaurant")
        if x_restaurant_id is not None and x_restaurant_id != restaurant_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    return RestaurantContext(restaurant_id=restaurant_id, user_id=current_user.id, role=current_user.role)


def get_owner_context(ctx: RestaurantContext = Depends(get_restaurant_context)) -> RestaurantContext:
    """Restaurant context for owner-only routes (menu, discounts, inventory)."""
    ensure_role(ctx, OWNER_ROLES)
    return ctx
