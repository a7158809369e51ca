from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from pydantic import Field
from sqlalchemy import Column, String, Text, Date, DateTime, Numeric, ForeignKey

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# SALES ORDER PYDANTIC MODELS
# =====================================================

class SalesOrderStatus(str, Enum):
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

class SalesOrderBase(EntityPayload):
    client_id: str
    requirement_id: Optional[str] = None
    quote_id: Optional[str] = None
    status: SalesOrderStatus = SalesOrderStatus.DRAFT
    order_date: date = Field(default_factory=date.today)
    currency_code: str = "INR"
    total_cost: float = 0
    total_price: float = 0
    notes: Optional[str] = None

class SalesOrderCreateRequest(SalesOrderBase):
    id: Optional[str] = None
    order_number: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class SalesOrderUpdateRequest(SalesOrderBase):
    id: str

class SalesOrderResponse(EntityResponse):
    id: str
    order_number: str
    client_id: str
    requirement_id: Optional[str] = None
    quote_id: Optional[str] = None
    status: SalesOrderStatus
    order_date: date
    currency_code: str
    total_cost: float
    total_price: float
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# SALES ORDER SQLALCHEMY MODEL
# =====================================================

class SalesOrder(Base):
    __tablename__ = "sales_orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    order_number = Column(String(20), nullable=False, unique=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    requirement_id = Column(String(36), ForeignKey("requirements.id"))
    quote_id = Column(String(36), ForeignKey("quotes.id"))
    status = Column(String(20), nullable=False, default=SalesOrderStatus.DRAFT.value)
    order_date = Column(Date, nullable=False)
    currency_code = Column(String(3), nullable=False, default="INR")
    total_cost = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    total_price = Column(Numeric(15, 2, asdecimal=False), nullable=False, default=0)
    notes = Column(Text)

    created_by = Column(String(36))
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
