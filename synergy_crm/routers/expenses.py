from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.expense_service import expense_service

router = build_entity_router(expense_service, path="expenses", payload_key="expense", tag="Expenses")
