"""Application configuration."""

from decimal import Decimal
from os import getenv

from pydantic import BaseModel

CONSUMPTION_POLICIES: tuple[str, ...] = ("on_place", "on_preparing", "on_completed")


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "tableside API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    log_level: str = getenv("LOG_LEVEL", "INFO")
    database_url: str = getenv("DATABASE_URL", "sqlite:///./tableside.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    vat_rate: Decimal = Decimal(getenv("VAT_RATE", "0.10"))
    tip_rate: Decimal = Decimal(getenv("TIP_RATE", "0.03"))
    commission_rate: Decimal = Decimal(getenv("COMMISSION_RATE", "0.05"))
    inventory_consumption_policy: str = getenv("INVENTORY_CONSUMPTION_POLICY", "on_place")


settings: Settings = Settings()
