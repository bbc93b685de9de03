"""User service operations."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from tableside.models.user import User, normalize_user_role


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username).limit(1))


def get_user_by_id(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def create_user(
    db: Session,
    username: str,
    hashed_password: str,
    role: str,
    restaurant_id: int | None = None,
    email: str | None = None,
) -> User:
    """Create a staff account; restaurant roles must be bound to a restaurant."""
    canonical_role = normalize_user_role(role)
    if canonical_role != "ADMIN" and restaurant_id is None:
        raise ValueError(f"{canonical_role} accounts require a restaurant")
    user = User(
        username=username.strip(),
        password_hash=hashed_password,
        role=canonical_role,
        restaurant_id=restaurant_id,
        email=email,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def record_login(db: Session, user: User) -> None:
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()
