from typing import Any, Dict, Optional
import logging

from passlib.context import CryptContext
from sqlalchemy import select, func

from synergy_crm.database import get_session_direct
from synergy_crm.exceptions import ValidationError, AuthenticationError
from synergy_crm.models.user_models import (
    User, UserCreateRequest, UserUpdateRequest, UserResponse, UserPermission, UserStatus
)
from synergy_crm.services.entity_service import EntityService

logger = logging.getLogger(__name__)

password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class UserService(EntityService):
    """Service class for user (profile) operations."""

    model = User
    create_schema = UserCreateRequest
    update_schema = UserUpdateRequest
    response_schema = UserResponse
    label = "User"
    creator_field = None
    elevated = True

    def hash_password(self, password: str) -> str:
        return password_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        return password_context.verify(password, password_hash)

    def _integrity_message(self, error) -> str:
        return "A user with this email already exists"

    async def create(self, payload: Any, user_id: Optional[str] = None, password: Optional[str] = None) -> Dict[str, Any]:
        if not isinstance(payload, dict) or not payload or not password:
            raise ValidationError("User data and password are required")
        return await super().create(payload, user_id, password=password)

    async def update(self, payload: Any, user_id: Optional[str] = None, password: Optional[str] = None) -> Dict[str, Any]:
        return await super().update(payload, user_id, password=password)

    async def _on_create(self, session, record, extra):
        record.password_hash = self.hash_password(extra["password"])

    async def _on_update(self, session, record, extra):
        if extra.get("password"):
            record.password_hash = self.hash_password(extra["password"])

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        async with get_session_direct() as session:
            return await session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email (case-insensitive)."""
        async with get_session_direct() as session:
            result = await session.execute(
                select(User).where(func.lower(User.email) == email.strip().lower())
            )
            return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> User:
        """Check credentials and return the active user they belong to."""
        user = await self.get_user_by_email(email)
        if user is None or not self.verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid login credentials")
        if user.status == UserStatus.SUSPENDED.value:
            logger.warning(f"Suspended user {user.id} attempted to sign in")
            raise AuthenticationError("This account has been suspended")
        return user

    async def ensure_super_admin(self, email: str, password: str, full_name: str = "Administrator") -> Dict[str, Any]:
        """Create the first super admin unless an account with that email exists."""
        existing = await self.get_user_by_email(email)
        if existing is not None:
            return self.to_response(existing)
        return await self.create(
            {"full_name": full_name, "email": email, "permission": UserPermission.SUPER_ADMIN.value},
            password=password
        )


user_service = UserService()
