from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from pydantic import BaseModel, field_validator
from sqlalchemy import Column, String, DateTime

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# USER PYDANTIC MODELS
# =====================================================

class UserPermission(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    READ = "read"
    WRITE = "write"
    FULL_ACCESS = "full_access"

class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"

class UserBase(EntityPayload):
    full_name: str
    email: str
    permission: UserPermission = UserPermission.READ
    status: UserStatus = UserStatus.ACTIVE

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

class UserCreateRequest(UserBase):
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserUpdateRequest(UserBase):
    id: str

class UserResponse(EntityResponse):
    """Public profile; the password hash is never part of it."""
    id: str
    full_name: str
    email: str
    permission: UserPermission
    status: UserStatus
    created_at: datetime
    updated_at: datetime

class LoginRequest(BaseModel):
    email: str
    password: str

class LogoutRequest(BaseModel):
    scope: str = "local"

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse

# =====================================================
# USER SQLALCHEMY MODEL
# =====================================================

class User(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    permission = Column(String(20), nullable=False, default=UserPermission.READ.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
