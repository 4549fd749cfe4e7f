"""Auth Routes — login-or-register for mall members.

Invariants:
    - Both outcomes (Registered, LoggedIn) return 200; the message field tells them apart
    - Wrong password is a 401 via InvalidCredentialsError (error_handlers.py)
"""

from fastapi import APIRouter, Depends

from loyalty.api.dependencies import get_auth_service
from loyalty.core.domain_types import MallId
from loyalty.schemas.auth import AuthResponse, LoginOrRegisterRequest
from loyalty.services.auth_upsert import AuthUpsertService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login-or-register", response_model=AuthResponse)
async def login_or_register(
    body: LoginOrRegisterRequest,
    service: AuthUpsertService = Depends(get_auth_service),
):
    """Log in an existing member or register a new one."""
    result = await service.login_or_register(
        body.phone_number,
        body.password,
        body.name,
        MallId(body.mall_id) if body.mall_id else None,
    )
    return AuthResponse(
        message=result.status.value,
        user_id=result.user_id,
        phone_number=result.phone_number,
        name=result.name,
    )
