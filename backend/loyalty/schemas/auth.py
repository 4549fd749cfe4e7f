"""Auth Schemas — request/response models for login-or-register.

Invariants:
    - phone_number/password default to "" so blank input reaches the service and is
      reported with the service's own message instead of a generic 422
"""

from uuid import UUID

from pydantic import BaseModel, Field


class LoginOrRegisterRequest(BaseModel):
    phone_number: str = Field("", max_length=40)
    password: str = Field("", max_length=200)
    name: str | None = Field(None, max_length=200)
    mall_id: UUID | None = None


class AuthResponse(BaseModel):
    message: str
    user_id: UUID
    phone_number: str
    name: str | None = None
