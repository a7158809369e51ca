from synergy_crm.routers.base import build_entity_router
from synergy_crm.services.quote_service import quote_service

router = build_entity_router(quote_service, path="quotes", payload_key="quote", tag="Quotes")
