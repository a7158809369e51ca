from synergy_crm.models.lead_models import Lead, LeadCreateRequest, LeadUpdateRequest, LeadResponse
from synergy_crm.services.entity_service import EntityService


class LeadService(EntityService):
    model = Lead
    create_schema = LeadCreateRequest
    update_schema = LeadUpdateRequest
    response_schema = LeadResponse
    label = "Lead"


lead_service = LeadService()
