from typing import Any, Dict, List, Optional
import uuid

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError

from synergy_crm.database import get_session, utc_now
from synergy_crm.exceptions import ValidationError, PersistenceError
from synergy_crm.models.requirement_models import (
    Requirement, RequirementItem, RequirementCreateRequest, RequirementUpdateRequest,
    RequirementResponse, RequirementItemPayload, RequirementItemResponse, RequirementItemsPayload
)
from synergy_crm.services.entity_service import EntityService


class RequirementService(EntityService):
    """
    Requirements and their line items.

    Items travel with the parent: they are written in the same transaction on
    create, replaced wholesale when an update carries an ``items`` list and
    removed together with the requirement.
    """

    model = Requirement
    create_schema = RequirementCreateRequest
    update_schema = RequirementUpdateRequest
    response_schema = RequirementResponse
    label = "Requirement"

    def _parse_items(self, items: Any) -> Optional[List[RequirementItemPayload]]:
        if items is None:
            return None
        return self._validate(RequirementItemsPayload, {"items": items}).items

    async def create(self, payload: Any, user_id: Optional[str] = None, items: Any = None) -> Dict[str, Any]:
        return await super().create(payload, user_id, items=self._parse_items(items))

    async def update(self, payload: Any, user_id: Optional[str] = None, items: Any = None) -> Dict[str, Any]:
        return await super().update(payload, user_id, items=self._parse_items(items))

    async def _insert_items(self, session, requirement_id: str, items: List[RequirementItemPayload]):
        now = utc_now()
        for item in items:
            session.add(RequirementItem(
                id=item.id or str(uuid.uuid4()),
                requirement_id=requirement_id,
                item_name=item.item_name,
                item_description=item.item_description,
                quantity=item.quantity,
                unit_of_measure=item.unit_of_measure,
                category=item.category,
                created_at=now,
                updated_at=now
            ))

    async def _on_create(self, session, record, extra):
        if extra.get("items"):
            await self._insert_items(session, record.id, extra["items"])

    async def _on_update(self, session, record, extra):
        if extra.get("items") is not None:
            await session.execute(
                delete(RequirementItem).where(RequirementItem.requirement_id == record.id)
            )
            await self._insert_items(session, record.id, extra["items"])

    async def _on_delete(self, session, entity_id):
        await session.execute(
            delete(RequirementItem).where(RequirementItem.requirement_id == entity_id)
        )

    async def list_items(self, requirement_id: Optional[str], user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Line items of one requirement in the order they were entered."""
        if not requirement_id:
            raise ValidationError("Requirement ID is required")

        async with get_session(self._session_user(user_id)) as session:
            try:
                result = await session.execute(
                    select(RequirementItem)
                    .where(RequirementItem.requirement_id == requirement_id)
                    .order_by(RequirementItem.created_at.asc(), RequirementItem.item_name.asc())
                )
                items = result.scalars().all()
            except SQLAlchemyError as e:
                raise PersistenceError(f"Failed to fetch requirement items: {str(e)}")

        return [RequirementItemResponse.model_validate(item).model_dump(mode="json") for item in items]


requirement_service = RequirementService()
