from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.lead_service import lead_service

router = build_entity_router(lead_service, path="leads", payload_key="lead", tag="Leads")
