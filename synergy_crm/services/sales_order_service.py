from synergy_crm.models.sales_order_models import (
    SalesOrder, SalesOrderCreateRequest, SalesOrderUpdateRequest, SalesOrderResponse
)
from synergy_crm.services.entity_service import EntityService


class SalesOrderService(EntityService):
    model = SalesOrder
    create_schema = SalesOrderCreateRequest
    update_schema = SalesOrderUpdateRequest
    response_schema = SalesOrderResponse
    label = "Sales Order"
    code_field = "order_number"
    code_prefix = "SO"


sales_order_service = SalesOrderService()
