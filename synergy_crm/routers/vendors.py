from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.vendor_service import vendor_service

router = build_entity_router(vendor_service, path="vendors", payload_key="vendor", tag="Vendors")
