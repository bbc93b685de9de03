"""Staff user ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from tableside.db.base import Base

USER_ROLES = ("ADMIN", "RESTAURANT", "KITCHEN")


def normalize_user_role(role: str | None) -> str:
    """Return canonical upper-case role or raise for unknown values."""
    canonical = str(role or "").strip().upper()
    if canonical == "OWNER":
        canonical = "RESTAURANT"
    if canonical not in USER_ROLES:
        raise ValueError(f"Unsupported role: {role}")
    return canonical


class User(Base):
    """Staff account acting on behalf of one restaurant (or any, for admins)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False)
    restaurant_id: Mapped[int | None] = mapped_column(ForeignKey("restaurants.id"), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
