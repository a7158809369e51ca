from typing import Any, Dict, Optional, Sequence

from fastapi import APIRouter, HTTPException, Depends, Query, Body
from fastapi.responses import JSONResponse

from synergy_crm.config import settings
from synergy_crm.exceptions import ValidationError, PersistenceError
from synergy_crm.routers.dependencies import get_user_id, get_optional_user_id
from synergy_crm.services.entity_service import EntityService


def list_cache_control() -> str:
    ttl = int(settings.list_cache_seconds)
    return f"public, s-maxage={ttl}, stale-while-revalidate={ttl * 2}"


def build_entity_router(
    service: EntityService,
    path: str,
    payload_key: str,
    tag: str,
    extra_body_keys: Sequence[str] = (),
    public_list: bool = False
) -> APIRouter:
    """
    GET/POST/PUT/DELETE on /api/<path> for one entity service.

    Write bodies wrap the record under `payload_key`; any `extra_body_keys`
    found next to it (requirement items, a user's password) are handed to the
    service as keyword arguments.
    """
    router = APIRouter(prefix=f"/api/{path}", tags=[tag])
    list_caller = get_optional_user_id if public_list else get_user_id
    noun = service.label.lower()

    def extras(body: Dict[str, Any]) -> Dict[str, Any]:
        return {key: body[key] for key in extra_body_keys if key in body}

    @router.get("")
    async def list_entities(user_id: Optional[str] = Depends(list_caller)):
        try:
            rows = await service.list_entities(user_id)
        except PersistenceError as e:
            raise HTTPException(status_code=500, detail=str(e))
        return JSONResponse(content=rows, headers={"Cache-Control": list_cache_control()})

    @router.post("")
    async def create_entity(
        body: Optional[Dict[str, Any]] = Body(default=None),
        user_id: str = Depends(get_user_id)
    ):
        body = body or {}
        try:
            return await service.create(body.get(payload_key), user_id, **extras(body))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            raise HTTPException(status_code=500, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create {noun}: {str(e)}")

    @router.put("")
    async def update_entity(
        body: Optional[Dict[str, Any]] = Body(default=None),
        user_id: str = Depends(get_user_id)
    ):
        body = body or {}
        try:
            return await service.update(body.get(payload_key), user_id, **extras(body))
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            raise HTTPException(status_code=500, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update {noun}: {str(e)}")

    @router.delete("")
    async def delete_entity(
        id: Optional[str] = Query(default=None, description=f"{service.label} ID"),
        user_id: str = Depends(get_user_id)
    ):
        try:
            await service.delete(id, user_id)
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except PersistenceError as e:
            raise HTTPException(status_code=500, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete {noun}: {str(e)}")
        return {"success": True}

    return router
