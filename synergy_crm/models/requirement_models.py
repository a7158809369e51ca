from datetime import date, datetime
from typing import List, Optional
from enum import Enum
import uuid

from pydantic import Field
from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# REQUIREMENT ENUMS
# =====================================================

class RequirementStatus(str, Enum):
    NEW = "new"
    IN_DISCUSSION = "in_discussion"
    QUOTED = "quoted"
    ON_HOLD = "on_hold"
    CLOSED = "closed"

class RequirementPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

# =====================================================
# REQUIREMENT ITEM PYDANTIC MODELS
# =====================================================

class RequirementItemPayload(EntityPayload):
    """One line of a requirement, as sent alongside the parent."""
    id: Optional[str] = None
    item_name: str
    item_description: Optional[str] = None
    quantity: float = Field(default=1, gt=0)
    unit_of_measure: Optional[str] = None
    category: Optional[str] = None

class RequirementItemResponse(EntityResponse):
    id: str
    requirement_id: str
    item_name: str
    item_description: Optional[str] = None
    quantity: float
    unit_of_measure: Optional[str] = None
    category: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# REQUIREMENT PYDANTIC MODELS
# =====================================================

class RequirementBase(EntityPayload):
    client_id: str
    title: str
    description: Optional[str] = None
    status: RequirementStatus = RequirementStatus.NEW
    priority: Optional[RequirementPriority] = None
    required_by_date: Optional[date] = None
    estimated_budget: Optional[float] = None
    assigned_to: Optional[str] = None

class RequirementCreateRequest(RequirementBase):
    id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class RequirementUpdateRequest(RequirementBase):
    id: str

class RequirementResponse(EntityResponse):
    id: str
    client_id: str
    title: str
    description: Optional[str] = None
    status: RequirementStatus
    priority: Optional[RequirementPriority] = None
    required_by_date: Optional[date] = None
    estimated_budget: Optional[float] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class RequirementItemsPayload(EntityPayload):
    items: List[RequirementItemPayload] = Field(default_factory=list)

# =====================================================
# REQUIREMENT SQLALCHEMY MODELS
# =====================================================

class Requirement(Base):
    __tablename__ = "requirements"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    status = Column(String(30), nullable=False, default=RequirementStatus.NEW.value)
    priority = Column(String(20))
    required_by_date = Column(Date)
    estimated_budget = Column(Numeric(15, 2, asdecimal=False))
    assigned_to = Column(String(36), index=True)

    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)


class RequirementItem(Base):
    __tablename__ = "requirement_items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requirement_id = Column(String(36), ForeignKey("requirements.id", ondelete="CASCADE"), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    item_description = Column(Text)
    quantity = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=1)
    unit_of_measure = Column(String(50))
    category = Column(String(100))

    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
