from enum import Enum
from typing import Any, Dict, List, Optional, Type
import logging
import time
import uuid

from pydantic import BaseModel, ValidationError as SchemaError
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from synergy_crm.config import settings
from synergy_crm.database import get_session, utc_now
from synergy_crm.exceptions import ValidationError, PersistenceError
from synergy_crm.services.code_generator import EntityCodeGenerator
from synergy_crm.services.response_cache import ResponseCache

logger = logging.getLogger(__name__)


def describe_schema_error(error: SchemaError) -> str:
    """Flatten a pydantic error into a single readable message."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)


class EntityService:
    """
    List/create/update/delete for one entity table.

    Subclasses name the table, its pydantic shapes and, where the entity has
    one, the sequential code column. Lists are served from a per-service
    ResponseCache which every successful write invalidates.

    Caller-scoped sessions carry the caller's id to the database so row-level
    security applies; services flagged `elevated` use the service credential.
    """

    model = None
    create_schema: Type[BaseModel] = None
    update_schema: Type[BaseModel] = None
    response_schema: Type[BaseModel] = None
    label = "Record"
    code_field: Optional[str] = None
    code_prefix: Optional[str] = None
    creator_field: Optional[str] = "created_by"
    elevated = False

    def __init__(self, cache: Optional[ResponseCache] = None):
        self.name = self.model.__tablename__
        self.cache = cache or ResponseCache(settings.list_cache_seconds)
        self.code_generator = None
        if self.code_field:
            self.code_generator = EntityCodeGenerator(self.model, self.code_field, self.code_prefix)

    # =====================================================
    # HELPERS
    # =====================================================

    def _session_user(self, user_id: Optional[str]) -> Optional[str]:
        return None if self.elevated else user_id

    def _validate(self, schema: Type[BaseModel], payload: Any) -> BaseModel:
        try:
            return schema.model_validate(payload)
        except SchemaError as e:
            raise ValidationError(describe_schema_error(e))

    @staticmethod
    def _column_values(data: BaseModel, exclude: set) -> Dict[str, Any]:
        values = data.model_dump(exclude={field for field in exclude if field})
        return {
            field: (value.value if isinstance(value, Enum) else value)
            for field, value in values.items()
        }

    def _integrity_message(self, error: IntegrityError) -> str:
        return f"Database constraint violation: {error.orig}"

    def to_response(self, record) -> Dict[str, Any]:
        """Serialize a row into its JSON-ready response shape."""
        return self.response_schema.model_validate(record).model_dump(mode="json")

    # Hooks for entities that write more than one table per request
    async def _on_create(self, session, record, extra: Dict[str, Any]) -> None:
        pass

    async def _on_update(self, session, record, extra: Dict[str, Any]) -> None:
        pass

    async def _on_delete(self, session, entity_id: str) -> None:
        pass

    # =====================================================
    # LIST
    # =====================================================

    async def list_entities(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """All rows, newest first."""
        cached = self.cache.get()
        if cached is not None:
            logger.debug(f"[{self.name}] serving {len(cached)} cached records")
            return cached

        generation = self.cache.generation
        started = time.perf_counter()
        async with get_session(self._session_user(user_id)) as session:
            try:
                result = await session.execute(
                    select(self.model).order_by(self.model.created_at.desc())
                )
                rows = result.scalars().all()
            except SQLAlchemyError as e:
                logger.error(f"[{self.name}] list query failed: {str(e)}")
                raise PersistenceError(f"Failed to fetch {self.name}: {str(e)}")

        payload = [self.to_response(row) for row in rows]
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"[{self.name}] query took {elapsed_ms:.0f}ms, returned {len(payload)} records")

        self.cache.set(payload, generation)
        return payload

    # =====================================================
    # CREATE
    # =====================================================

    async def create(self, payload: Any, user_id: Optional[str] = None, **extra) -> Dict[str, Any]:
        if not isinstance(payload, dict) or not payload:
            raise ValidationError(f"{self.label} data is required")

        data = self._validate(self.create_schema, payload)
        supplied_code = getattr(data, self.code_field) if self.code_field else None

        # Only generated codes are worth retrying; a supplied duplicate is the caller's error
        attempts = 1
        if self.code_generator and not supplied_code:
            attempts = max(1, settings.code_retry_attempts)

        for attempt in range(1, attempts + 1):
            code = supplied_code
            if self.code_generator and not code:
                code = await self.code_generator.generate(self._session_user(user_id))
            try:
                created = await self._insert(data, code, user_id, extra)
            except IntegrityError as e:
                if attempt < attempts:
                    logger.warning(
                        f"[{self.name}] {self.code_field} {code} already taken, "
                        f"regenerating (attempt {attempt}/{attempts})"
                    )
                    continue
                raise ValidationError(self._integrity_message(e))

            self.cache.invalidate()
            return created

    async def _insert(self, data: BaseModel, code: Optional[str], user_id: Optional[str], extra: Dict[str, Any]):
        values = self._column_values(
            data,
            exclude={"id", "created_at", "updated_at", self.creator_field, self.code_field}
        )
        now = utc_now()

        record = self.model(**values)
        record.id = data.id or str(uuid.uuid4())
        if self.code_field:
            setattr(record, self.code_field, code)
        if self.creator_field:
            setattr(record, self.creator_field, getattr(data, self.creator_field) or user_id)
        record.created_at = data.created_at or now
        record.updated_at = data.updated_at or now

        async with get_session(self._session_user(user_id)) as session:
            try:
                session.add(record)
                await self._on_create(session, record, extra)
                await session.flush()
                response = self.to_response(record)
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(f"Failed to create {self.label.lower()}: {str(e)}")

        return response

    # =====================================================
    # UPDATE
    # =====================================================

    async def update(self, payload: Any, user_id: Optional[str] = None, **extra) -> Dict[str, Any]:
        """Full replacement of the mutable fields; id, code and created_* never change."""
        if not isinstance(payload, dict) or not payload.get("id"):
            raise ValidationError(f"{self.label} ID is required")

        data = self._validate(self.update_schema, payload)
        values = self._column_values(data, exclude={"id"})

        async with get_session(self._session_user(user_id)) as session:
            try:
                record = await session.get(self.model, data.id)
                if record is None:
                    raise ValidationError(f"{self.label} not found")

                for field, value in values.items():
                    setattr(record, field, value)
                record.updated_at = utc_now()

                await self._on_update(session, record, extra)
                await session.flush()
                response = self.to_response(record)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ValidationError(self._integrity_message(e))
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(f"Failed to update {self.label.lower()}: {str(e)}")

        self.cache.invalidate()
        return response

    # =====================================================
    # DELETE
    # =====================================================

    async def delete(self, entity_id: Optional[str], user_id: Optional[str] = None) -> None:
        if not entity_id:
            raise ValidationError(f"{self.label} ID is required")

        async with get_session(self._session_user(user_id)) as session:
            try:
                await self._on_delete(session, entity_id)
                await session.execute(delete(self.model).where(self.model.id == entity_id))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ValidationError(self._integrity_message(e))
            except SQLAlchemyError as e:
                await session.rollback()
                raise PersistenceError(f"Failed to delete {self.label.lower()}: {str(e)}")

        self.cache.invalidate()
