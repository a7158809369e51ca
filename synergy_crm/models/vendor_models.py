from datetime import datetime
from typing import Optional
from enum import Enum
import uuid

from sqlalchemy import Column, String, Text, DateTime

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# VENDOR PYDANTIC MODELS
# =====================================================

class VendorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"

class VendorBase(EntityPayload):
    """Mutable vendor fields."""
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    status: VendorStatus = VendorStatus.ACTIVE
    notes: Optional[str] = None

class VendorCreateRequest(VendorBase):
    """Request model for creating vendor."""
    id: Optional[str] = None
    vendor_code: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class VendorUpdateRequest(VendorBase):
    """Request model for updating vendor."""
    id: str

class VendorResponse(EntityResponse):
    """Response model for vendor data."""
    id: str
    vendor_code: str
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    status: VendorStatus
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# VENDOR SQLALCHEMY MODEL
# =====================================================

class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vendor_code = Column(String(20), nullable=False, unique=True)
    company_name = Column(String(255), nullable=False)
    contact_name = Column(String(255))
    contact_email = Column(String(255))
    contact_phone = Column(String(50))
    gst_number = Column(String(15))
    address = Column(Text)
    payment_terms = Column(String(100))
    status = Column(String(20), nullable=False, default=VendorStatus.ACTIVE.value)
    notes = Column(Text)

    # Audit fields
    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
