from synergy_crm.models.vendor_models import (
    Vendor, VendorCreateRequest, VendorUpdateRequest, VendorResponse
)
from synergy_crm.services.entity_service import EntityService


class VendorService(EntityService):
    """Service class for vendor management operations."""

    model = Vendor
    create_schema = VendorCreateRequest
    update_schema = VendorUpdateRequest
    response_schema = VendorResponse
    label = "Vendor"
    code_field = "vendor_code"
    code_prefix = "V"


vendor_service = VendorService()
