from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from sqlalchemy import Column, String, Text, Date, DateTime

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# LEAD ENUMS
# =====================================================

class LeadSource(str, Enum):
    """Channel a lead (or client) came in through."""
    WEBSITE = "website"
    REFERRAL = "referral"
    EMAIL = "email"
    PHONE = "phone"
    EVENT = "event"
    WHATSAPP = "whatsapp"

class LeadStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    INCOMPATIBLE = "incompatible"
    NOT_SERVICED = "not_serviced"
    CONVERTED = "converted"

# =====================================================
# LEAD PYDANTIC MODELS
# =====================================================

class LeadBase(EntityPayload):
    client_code: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    source: LeadSource
    status: LeadStatus = LeadStatus.NEW
    assigned_to: Optional[str] = None
    follow_up_at: Optional[date] = None
    notes: Optional[str] = None

class LeadCreateRequest(LeadBase):
    id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class LeadUpdateRequest(LeadBase):
    id: str

class LeadResponse(EntityResponse):
    id: str
    client_code: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    source: LeadSource
    status: LeadStatus
    assigned_to: Optional[str] = None
    follow_up_at: Optional[date] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# LEAD SQLALCHEMY MODEL
# =====================================================

class Lead(Base):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_code = Column(String(20))
    company_name = Column(String(255))
    contact_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(50))
    source = Column(String(50), nullable=False)
    status = Column(String(50), nullable=False, default=LeadStatus.NEW.value)
    assigned_to = Column(String(36), index=True)
    follow_up_at = Column(Date)
    notes = Column(Text)

    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
