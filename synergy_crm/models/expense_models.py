from datetime import date, datetime
from typing import Optional
from enum import Enum
import uuid

from pydantic import Field
from sqlalchemy import Column, String, Text, Date, DateTime, Numeric

from synergy_crm.database import Base, utc_now
from synergy_crm.models.common import EntityPayload, EntityResponse

# =====================================================
# EXPENSE PYDANTIC MODELS
# =====================================================

class ExpenseCategory(str, Enum):
    FOOD = "food"
    CAB = "cab"
    CLIENT_GIFT = "client_gift"
    LAUNDRY = "laundry"
    ACCOMMODATION = "accommodation"
    OTHER = "other"

class ExpenseStatus(str, Enum):
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"

class ExpenseBase(EntityPayload):
    """Mutable expense fields. executive_id is fixed at creation."""
    client_id: Optional[str] = None
    requirement_id: Optional[str] = None
    category_code: ExpenseCategory
    category_id: Optional[str] = None
    amount: float = Field(gt=0)
    currency_code: str = "INR"
    expense_date: date
    merchant_name: Optional[str] = None
    bill_number: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    status: ExpenseStatus = ExpenseStatus.SUBMITTED
    approved_by: Optional[str] = None

class ExpenseCreateRequest(ExpenseBase):
    id: Optional[str] = None
    executive_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ExpenseUpdateRequest(ExpenseBase):
    id: str

class ExpenseResponse(EntityResponse):
    id: str
    executive_id: Optional[str] = None
    client_id: Optional[str] = None
    requirement_id: Optional[str] = None
    category_code: ExpenseCategory
    category_id: Optional[str] = None
    amount: float
    currency_code: str
    expense_date: date
    merchant_name: Optional[str] = None
    bill_number: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    status: ExpenseStatus
    approved_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

# =====================================================
# EXPENSE SQLALCHEMY MODEL
# =====================================================

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    executive_id = Column(String(36), index=True)
    client_id = Column(String(36))
    requirement_id = Column(String(36))
    category_code = Column(String(30), nullable=False)
    category_id = Column(String(36))
    amount = Column(Numeric(15, 2, asdecimal=False), nullable=False)
    currency_code = Column(String(3), nullable=False, default="INR")
    expense_date = Column(Date, nullable=False)
    merchant_name = Column(String(255))
    bill_number = Column(String(100))
    notes = Column(Text)
    receipt_url = Column(String(500))
    status = Column(String(20), nullable=False, default=ExpenseStatus.SUBMITTED.value)
    approved_by = Column(String(36))

    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now)
