from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

# SQLAlchemy imports
from sqlalchemy import Column, String, Text, Date, DateTime

# Shared database base
from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse
from synergy_crm.models.lead_models import LeadSource

# =====================================================
# CLIENT ENUMS
# =====================================================

class ClientIndustry(str, Enum):
    """Industries a client can be filed under."""
    TECHNOLOGY = "technology"
    FINANCE = "finance"
    HEALTHCARE = "healthcare"
    MANUFACTURING = "manufacturing"
    RETAIL = "retail"
    EDUCATION = "education"
    REAL_ESTATE = "real_estate"
    HOSPITALITY = "hospitality"
    OTHER = "other"

# =====================================================
# CLIENT PYDANTIC MODELS
# =====================================================

class ClientBase(EntityPayload):
    """Mutable client fields."""
    company_name: Optional[str] = None
    contact_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    industry: Optional[ClientIndustry] = None
    website: Optional[str] = None
    source: Optional[LeadSource] = None
    next_follow_up_at: Optional[date] = None
    last_interaction_at: Optional[datetime] = None
    notes: Optional[str] = None

class ClientCreateRequest(ClientBase):
    """Request model for creating a client; server fills whatever is absent."""
    id: Optional[str] = None
    client_code: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ClientUpdateRequest(ClientBase):
    """Request model for updating a client."""
    id: str

class ClientResponse(EntityResponse):
    """Response model for client data."""
    id: str
    client_code: str
    company_name: Optional[str] = None
    contact_name: str
    contact_email: str
    contact_phone: Optional[str] = None
    industry: Optional[ClientIndustry] = None
    website: Optional[str] = None
    source: Optional[LeadSource] = None
    next_follow_up_at: Optional[date] = None
    last_interaction_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# CLIENT SQLALCHEMY MODEL
# =====================================================

class Client(Base):
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    client_code = Column(String(20), nullable=False, unique=True)
    company_name = Column(String(255))
    contact_name = Column(String(255), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(50))
    industry = Column(String(50))
    website = Column(String(500))
    source = Column(String(50))
    next_follow_up_at = Column(Date)
    last_interaction_at = Column(DateTime(timezone=True))
    notes = Column(Text)

    # Audit fields
    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
