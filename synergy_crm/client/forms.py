"""
Add/Edit dialogs for every entity.

Each dialog validates raw form values against a pydantic form schema,
composes the full record the API expects (keeping the immutable fields of
the row being edited) and hands it to the entity's store.
"""
import re
from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Set

from pydantic import (
    AfterValidator, BaseModel, ConfigDict, EmailStr, Field, HttpUrl, TypeAdapter,
    ValidationError as SchemaError, model_validator
)

from synergy_crm.client.session import SessionStore
from synergy_crm.client.stores import EntityStore

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

LeadSourceOption = Literal["website", "referral", "email", "phone", "event", "whatsapp"]
IndustryOption = Literal[
    "technology", "finance", "healthcare", "manufacturing", "retail",
    "education", "real_estate", "hospitality", "other"
]
PermissionOption = Literal["super_admin", "admin", "read", "write", "full_access"]


def check_date(value: str) -> str:
    if not DATE_PATTERN.match(value):
        raise ValueError("Invalid date format. Use YYYY-MM-DD.")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValueError("Invalid date.")
    return value


DateString = Annotated[str, AfterValidator(check_date)]

_http_url = TypeAdapter(HttpUrl)


def check_url(value: str) -> str:
    """Validate as an http(s) URL but keep the text as typed."""
    try:
        _http_url.validate_python(value)
    except SchemaError:
        raise ValueError("Invalid URL.")
    return value


UrlString = Annotated[str, AfterValidator(check_url)]


class FormValidationError(Exception):
    """Form values failed validation; `errors` maps field name to message."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{field}: {message}" for field, message in errors.items()))
        self.errors = errors


# =====================================================
# FORM SCHEMAS
# =====================================================

class EntityForm(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    # Field -> message shown instead of the library's wording
    error_messages: ClassVar[Dict[str, str]] = {}

    @model_validator(mode="before")
    @classmethod
    def drop_blank_strings(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value for key, value in data.items()
                if not (isinstance(value, str) and not value.strip())
            }
        return data

    def cross_field_errors(self) -> Dict[str, str]:
        return {}

    @classmethod
    def parse(cls, values: Dict[str, Any]) -> "EntityForm":
        try:
            form = cls.model_validate(values)
        except SchemaError as e:
            raise FormValidationError(cls._field_messages(e))
        errors = form.cross_field_errors()
        if errors:
            raise FormValidationError(errors)
        return form

    @classmethod
    def _field_messages(cls, error: SchemaError) -> Dict[str, str]:
        messages: Dict[str, str] = {}
        for item in error.errors():
            field = str(item["loc"][0]) if item["loc"] else "form"
            if field in messages:
                continue
            message = cls.error_messages.get(field) or item["msg"]
            messages[field] = message.removeprefix("Value error, ")
        return messages


class ClientForm(EntityForm):
    error_messages = {
        "contact_name": "Contact Name is required.",
        "contact_email": "Invalid email address.",
        "website": "Invalid URL.",
        "industry": "Select a valid industry.",
        "source": "Select a valid source.",
    }

    client_code: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: str
    contact_email: EmailStr
    contact_phone: Optional[str] = None
    industry: Optional[IndustryOption] = None
    website: Optional[UrlString] = None
    source: Optional[LeadSourceOption] = None
    next_follow_up_at: Optional[DateString] = None
    last_interaction_at: Optional[datetime] = None
    notes: Optional[str] = None


class LeadForm(EntityForm):
    error_messages = {
        "contact_name": "Contact Name is required.",
        "contact_email": "Invalid email address.",
        "source": "Select a valid source.",
        "status": "Select a valid status.",
    }

    client_code: Optional[str] = None
    company_name: Optional[str] = None
    contact_name: str
    contact_email: EmailStr
    contact_phone: Optional[str] = None
    source: LeadSourceOption
    status: Literal["new", "in_progress", "incompatible", "not_serviced", "converted"] = "new"
    assigned_to: Optional[str] = None
    follow_up_at: Optional[DateString] = None
    notes: Optional[str] = None


class VendorForm(EntityForm):
    error_messages = {
        "company_name": "Company Name is required.",
        "contact_email": "Invalid email address.",
    }

    vendor_code: Optional[str] = None
    company_name: str
    contact_name: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    gst_number: Optional[str] = Field(default=None, max_length=15)
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    status: Literal["active", "inactive"] = "active"
    notes: Optional[str] = None


class RequirementItemForm(EntityForm):
    error_messages = {
        "item_name": "Item Name is required.",
        "quantity": "Quantity must be greater than 0.",
    }

    item_name: str
    item_description: Optional[str] = None
    quantity: float = Field(default=1, gt=0)
    unit_of_measure: Optional[str] = None
    category: Optional[str] = None


class RequirementForm(EntityForm):
    error_messages = {
        "client_id": "Client is required.",
        "title": "Title is required.",
        "estimated_budget": "Budget cannot be negative.",
    }

    client_id: str
    title: str
    description: Optional[str] = None
    status: Literal["new", "in_discussion", "quoted", "on_hold", "closed"] = "new"
    priority: Optional[Literal["low", "medium", "high"]] = None
    required_by_date: Optional[DateString] = None
    estimated_budget: Optional[float] = Field(default=None, ge=0)
    assigned_to: Optional[str] = None
    items: List[RequirementItemForm] = Field(default_factory=list)


class QuoteForm(EntityForm):
    error_messages = {
        "requirement_id": "Requirement is required.",
        "client_id": "Client is required.",
        "currency_code": "Use a 3-letter currency code.",
        "tax_pct": "Tax must be between 0 and 100.",
    }

    quote_number: Optional[str] = None
    requirement_id: str
    client_id: str
    currency_code: str = Field(default="INR", pattern=r"^[A-Z]{3}$")
    default_margin_pct: float = Field(default=0, ge=0)
    tax_pct: Optional[float] = Field(default=None, ge=0, le=100)
    subtotal_cost: float = Field(default=0, ge=0)
    subtotal_price: float = Field(default=0, ge=0)
    status: Literal["draft", "sent", "accepted", "rejected", "expired"] = "draft"
    valid_till: Optional[DateString] = None
    notes: Optional[str] = None


class SalesOrderForm(EntityForm):
    error_messages = {
        "client_id": "Client is required.",
        "currency_code": "Use a 3-letter currency code.",
    }

    order_number: Optional[str] = None
    client_id: str
    requirement_id: Optional[str] = None
    quote_id: Optional[str] = None
    status: Literal["draft", "confirmed", "in_progress", "delivered", "cancelled"] = "draft"
    order_date: DateString
    currency_code: str = Field(default="INR", pattern=r"^[A-Z]{3}$")
    total_cost: float = Field(default=0, ge=0)
    total_price: float = Field(default=0, ge=0)
    notes: Optional[str] = None


class ExpenseForm(EntityForm):
    error_messages = {
        "category_code": "Select a valid category.",
        "amount": "Amount must be greater than 0.",
        "currency_code": "Use a 3-letter currency code.",
        "receipt_url": "Invalid URL.",
    }

    client_id: Optional[str] = None
    requirement_id: Optional[str] = None
    category_code: Literal["food", "cab", "client_gift", "laundry", "accommodation", "other"]
    category_id: Optional[str] = None
    amount: float = Field(gt=0)
    currency_code: str = Field(default="INR", pattern=r"^[A-Z]{3}$")
    expense_date: DateString
    merchant_name: Optional[str] = None
    bill_number: Optional[str] = None
    notes: Optional[str] = None
    receipt_url: Optional[UrlString] = None
    status: Literal["submitted", "approved", "rejected"] = "submitted"


class UserForm(EntityForm):
    error_messages = {
        "full_name": "Full Name is required.",
        "email": "Email is required.",
        "permission": "Permission is required.",
    }

    full_name: str
    email: EmailStr
    permission: PermissionOption
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    is_edit: bool = False
    agree_to_logout: bool = False

    def cross_field_errors(self) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        password = self.password or ""
        if self.is_edit and not password:
            return errors

        if not password:
            errors["password"] = "Password is required."
        elif len(password) < 8:
            errors["password"] = "Password must be at least 8 characters long."
        elif not re.search(r"[a-z]", password):
            errors["password"] = "Password must contain at least one lowercase letter."
        elif not re.search(r"\d", password):
            errors["password"] = "Password must contain at least one number."

        if password != (self.confirm_password or ""):
            errors["confirm_password"] = "Passwords don't match."
        return errors


# =====================================================
# DIALOGS
# =====================================================

class EntityFormDialog:
    """Add dialog when opened without a row, Edit dialog when opened with one."""

    form_class = EntityForm
    code_field: Optional[str] = None
    creator_field: Optional[str] = "created_by"
    form_only_fields: Set[str] = set()

    def __init__(self, store: EntityStore, session: SessionStore, current_row: Optional[Dict[str, Any]] = None):
        self.store = store
        self.session = session
        self.current_row = current_row

    @property
    def is_edit(self) -> bool:
        return self.current_row is not None

    def validate(self, values: Dict[str, Any]) -> EntityForm:
        return self.form_class.parse(values)

    def compose(self, form: EntityForm) -> Dict[str, Any]:
        """Full record for the API; identity and audit fields come from the edited row."""
        record = form.model_dump(mode="json", exclude=self.form_only_fields)
        row = self.current_row or {}
        now = datetime.now(timezone.utc).isoformat()

        record["id"] = row.get("id")
        if self.code_field and self.is_edit:
            record[self.code_field] = row.get(self.code_field)
        if self.creator_field:
            record[self.creator_field] = row.get(self.creator_field) if self.is_edit else self.session.user_id
        record["created_at"] = row.get("created_at") or now
        record["updated_at"] = now
        return record

    async def submit(self, values: Dict[str, Any]) -> Dict[str, Any]:
        record = self.compose(self.validate(values))
        if self.is_edit:
            return await self.store.update(record)
        return await self.store.add(record)


class ClientFormDialog(EntityFormDialog):
    form_class = ClientForm
    code_field = "client_code"


class LeadFormDialog(EntityFormDialog):
    form_class = LeadForm


class VendorFormDialog(EntityFormDialog):
    form_class = VendorForm
    code_field = "vendor_code"


class RequirementFormDialog(EntityFormDialog):
    form_class = RequirementForm

    async def submit(self, values: Dict[str, Any]) -> Dict[str, Any]:
        record = self.compose(self.validate(values))
        items = record.pop("items", [])
        if self.is_edit:
            return await self.store.update(record, items=items)
        return await self.store.add(record, items=items)


class QuoteFormDialog(EntityFormDialog):
    form_class = QuoteForm
    code_field = "quote_number"


class SalesOrderFormDialog(EntityFormDialog):
    form_class = SalesOrderForm
    code_field = "order_number"


class ExpenseFormDialog(EntityFormDialog):
    form_class = ExpenseForm
    creator_field = "executive_id"


class UserFormDialog(EntityFormDialog):
    """
    Add/Edit a user account.

    Editing your own email or password ends your session, so the dialog
    insists on `agree_to_logout` first. After a self-edit the session is
    signed out locally if the password changed, otherwise the identity is
    reloaded to pick up the new profile.

    Only a super admin can grant super admin access. A super admin's
    permission never changes here, and neither does your own.
    """

    form_class = UserForm
    creator_field = None
    form_only_fields = {"password", "confirm_password", "is_edit", "agree_to_logout"}

    @property
    def is_self(self) -> bool:
        return self.is_edit and self.session.user_id is not None and self.current_row.get("id") == self.session.user_id

    def validate(self, values: Dict[str, Any]) -> UserForm:
        form = self.form_class.parse({**values, "is_edit": self.is_edit})
        current = (self.current_row or {}).get("permission")

        if self.is_self:
            # Your own permission is not editable here
            form.permission = current or form.permission
        elif current == "super_admin" and form.permission != current:
            raise FormValidationError({"permission": "A super admin's permission cannot be changed."})
        elif form.permission == "super_admin" and current != "super_admin" and self.session.permission != "super_admin":
            raise FormValidationError({"permission": "Only a super admin can grant super admin access."})
        return form

    async def submit(self, values: Dict[str, Any]) -> Dict[str, Any]:
        form = self.validate(values)
        row = self.current_row or {}
        email_changed = self.is_edit and form.email.lower() != (row.get("email") or "").lower()
        password_changed = bool(form.password)

        if self.is_self and (email_changed or password_changed) and not form.agree_to_logout:
            raise FormValidationError({
                "agree_to_logout": "Confirm that you will be signed out after changing your email or password."
            })

        record = self.compose(form)
        record["status"] = row.get("status") or "active"

        if self.is_edit:
            result = await self.store.update(record, password=form.password)
        else:
            result = await self.store.add(record, form.password)

        if self.is_self:
            if password_changed:
                await self.session.sign_out("local")
            else:
                await self.session.refresh_user()
        return result
