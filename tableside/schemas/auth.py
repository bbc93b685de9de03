"""Authentication-related request and response schemas."""

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Payload for staff login."""

    username: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class AuthUserResponse(BaseModel):
    """User response for auth endpoints."""

    id: int
    username: str
    role: str
    restaurant_id: int | None = None

    model_config = ConfigDict(from_attributes=True)
