from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from pydantic import Field, model_validator
from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# QUOTE PYDANTIC MODELS
# =====================================================

class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"

class QuoteBase(EntityPayload):
    """Mutable quote fields. Tax and total are derived when left out."""
    requirement_id: str
    client_id: str
    currency_code: str = "INR"
    default_margin_pct: float = 0
    tax_pct: Optional[float] = Field(default=None, ge=0)
    subtotal_cost: float = 0
    subtotal_price: float = 0
    tax_amount: Optional[float] = None
    total_price: Optional[float] = None
    status: QuoteStatus = QuoteStatus.DRAFT
    valid_till: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def derive_totals(self):
        if self.tax_amount is None:
            self.tax_amount = round(self.subtotal_price * (self.tax_pct or 0) / 100, 2)
        if self.total_price is None:
            self.total_price = round(self.subtotal_price + self.tax_amount, 2)
        return self

class QuoteCreateRequest(QuoteBase):
    id: Optional[str] = None
    quote_number: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class QuoteUpdateRequest(QuoteBase):
    id: str

class QuoteResponse(EntityResponse):
    id: str
    quote_number: str
    requirement_id: str
    client_id: str
    currency_code: str
    default_margin_pct: float
    tax_pct: Optional[float] = None
    subtotal_cost: float
    subtotal_price: float
    tax_amount: float
    total_price: float
    status: QuoteStatus
    valid_till: Optional[date] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# QUOTE SQLALCHEMY MODEL
# =====================================================

class Quote(Base):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    quote_number = Column(String(20), nullable=False, unique=True)
    requirement_id = Column(String(36), ForeignKey("requirements.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    currency_code = Column(String(3), nullable=False, default="INR")
    default_margin_pct = Column(Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    tax_pct = Column(Numeric(5, 2, asdecimal=False))
    subtotal_cost = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    subtotal_price = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    tax_amount = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    total_price = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    status = Column(String(20), nullable=False, default=QuoteStatus.DRAFT.value)
    valid_till = Column(Date)
    notes = Column(Text)

    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
