from typing import Optional

from fastapi import HTTPException, Depends, Query

from synergy_crm.exceptions import ValidationError, PersistenceError
from synergy_crm.routers.base import build_entity_router
from synergy_crm.routers.dependencies import get_user_id
from synergy_crm.services.requirement_service import requirement_service

router = build_entity_router(
    requirement_service,
    path="requirements",
    payload_key="requirement",
    tag="Requirements",
    extra_body_keys=("items",)
)


@router.get("/items")
async def get_requirement_items(
    requirement_id: Optional[str] = Query(default=None, description="Requirement ID"),
    user_id: str = Depends(get_user_id)
):
    """Line items of one requirement."""
    try:
        return await requirement_service.list_items(requirement_id, user_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
