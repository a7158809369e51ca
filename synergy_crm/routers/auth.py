import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Body

from synergy_crm.exceptions import AuthenticationError
from synergy_crm.models.user_models import LoginRequest, LogoutRequest, TokenResponse, UserResponse
from synergy_crm.routers.dependencies import get_current_profile
from synergy_crm.services.jwt_service import jwt_service
from synergy_crm.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(credentials: LoginRequest):
    """Exchange email and password for a bearer token."""
    try:
        user = await user_service.authenticate(credentials.email, credentials.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))

    logger.info(f"User {user.id} signed in")
    return TokenResponse(
        access_token=jwt_service.create_user_token(user),
        user=UserResponse.model_validate(user)
    )


@router.post("/logout")
async def logout(
    request: Optional[LogoutRequest] = Body(default=None),
    user=Depends(get_current_profile)
):
    """
    End the caller's session.

    Tokens are stateless, so a local sign-out only means the client forgets
    its token; the scope is recorded for the audit trail.
    """
    scope = request.scope if request else "local"
    logger.info(f"User {user.id} signed out (scope={scope})")
    return {"success": True}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(user=Depends(get_current_profile)):
    """Get current user information."""
    return UserResponse.model_validate(user)
