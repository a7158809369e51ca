from typing import Any, Dict, List, Optional

from synergy_crm.models.client_models import (
    Client, ClientCreateRequest, ClientUpdateRequest, ClientResponse
)
from synergy_crm.services.entity_service import EntityService


class ClientService(EntityService):
    """Client records. Read with the service credential so every caller sees the full book."""

    model = Client
    create_schema = ClientCreateRequest
    update_schema = ClientUpdateRequest
    response_schema = ClientResponse
    label = "Client"
    code_field = "client_code"
    code_prefix = "C"
    elevated = True

    async def get_follow_ups(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Clients with a scheduled follow-up, soonest first."""
        clients = await self.list_entities(user_id)
        scheduled = [client for client in clients if client.get("next_follow_up_at")]
        return sorted(scheduled, key=lambda client: client["next_follow_up_at"])


client_service = ClientService()
