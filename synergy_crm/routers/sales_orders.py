from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.sales_order_service import sales_order_service

router = build_entity_router(sales_order_service, path="sales-orders", payload_key="sales_order", tag="Sales Orders")
