from typing import Optional

from fastapi import HTTPException, Depends

from synergy_crm.exceptions import PersistenceError
from synergy_crm.routers.base import build_entity_router
from synergy_crm.routers.dependencies import get_user_id
from synergy_crm.services.client_service import client_service

router = build_entity_router(client_service, path="clients", payload_key="client", tag="Clients", public_list=True)


@router.get("/follow-ups")
async def get_follow_ups(user_id: Optional[str] = Depends(get_user_id)):
    """Clients with a scheduled follow-up, soonest first."""
    try:
        return await client_service.get_follow_ups(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
