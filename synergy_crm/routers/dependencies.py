from typing import Optional

from fastapi import HTTPException, Depends

from synergy_crm.models.user_models import UserStatus
from synergy_crm.services.jwt_service import jwt_service
from synergy_crm.services.user_service import user_service


async def get_current_profile(token: dict = Depends(jwt_service.get_current_user)):
    """Resolve the bearer token to an active user row."""
    user_id = token.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")

    user = await user_service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token: user not found")
    if user.status == UserStatus.SUSPENDED.value:
        raise HTTPException(status_code=401, detail="This account has been suspended")

    return user


async def get_user_id(user=Depends(get_current_profile)) -> str:
    """Helper function to get the caller's ID from the JWT token."""
    return user.id


async def get_optional_user_id(token: Optional[dict] = Depends(jwt_service.get_optional_user)) -> Optional[str]:
    if not token:
        return None
    return token.get("sub")
