from synergy_crm.models.quote_models import Quote, QuoteCreateRequest, QuoteUpdateRequest, QuoteResponse
from synergy_crm.services.entity_service import EntityService


class QuoteService(EntityService):
    model = Quote
    create_schema = QuoteCreateRequest
    update_schema = QuoteUpdateRequest
    response_schema = QuoteResponse
    label = "Quote"
    code_field = "quote_number"
    code_prefix = "Q"


quote_service = QuoteService()
