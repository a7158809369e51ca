from synergy_crm.models.expense_models import (
    Expense, ExpenseCreateRequest, ExpenseUpdateRequest, ExpenseResponse
)
from synergy_crm.services.entity_service import EntityService


class ExpenseService(EntityService):
    """Expense claims. The submitting executive plays the part of the creator."""

    model = Expense
    create_schema = ExpenseCreateRequest
    update_schema = ExpenseUpdateRequest
    response_schema = ExpenseResponse
    label = "Expense"
    creator_field = "executive_id"


expense_service = ExpenseService()
