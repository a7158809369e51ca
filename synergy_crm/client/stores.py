import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from synergy_crm.client.api import ApiClient
from synergy_crm.client.notifications import Notifier

logger = logging.getLogger(__name__)

STALE_LOAD_RETRIES = 2


class EntityStore:
    """
    Client-side cache of one entity list.

    ``items`` stays None until the first successful load. Writes go to the
    server and then patch ``items`` with the row the server returned, so the
    list never needs a re-fetch after a mutation; a forced load is the way to
    pick up changes made elsewhere.
    """

    resource: str = None
    payload_key: str = None
    label: str = None

    def __init__(self, api: ApiClient, notifier: Notifier, dependencies: Sequence["EntityStore"] = ()):
        self.api = api
        self.notifier = notifier
        self.dependencies = list(dependencies)
        self.items: Optional[List[Dict[str, Any]]] = None
        self.loading = False
        self.has_loaded = False
        self._pending: Optional[asyncio.Future] = None
        # Bumped by every write and every list fetch
        self._version = 0

    @property
    def path(self) -> str:
        return f"/api/{self.resource}"

    @property
    def in_flight(self) -> bool:
        return self._pending is not None

    def set_items(self, items: Optional[List[Dict[str, Any]]]):
        self._version += 1
        self.items = items

    def find(self, entity_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not entity_id:
            return None
        for item in self.items or []:
            if item.get("id") == entity_id:
                return item
        return None

    # =====================================================
    # LOADING
    # =====================================================

    async def load(self, force: bool = False):
        """Fetch the list unless it is already held or being fetched."""
        if not force:
            if self._pending is not None:
                # Another caller is fetching; wait for its result instead of fetching twice
                await asyncio.shield(self._pending)
                return
            if self.items is not None and self.has_loaded:
                return

        if not self.items:
            self.loading = True
        pending = asyncio.get_running_loop().create_future()
        self._pending = pending

        params = {"t": int(time.time() * 1000)} if force else None
        try:
            for _ in range(STALE_LOAD_RETRIES + 1):
                self._version += 1
                version = self._version
                rows = await self._enrich_rows(await self.api.get(self.path, params=params))
                if self._version == version:
                    self.items = rows
                    break
                if self._pending is not pending:
                    # A newer load owns the list now
                    break
                logger.info(f"{self.resource} changed while loading, fetching again")
        except Exception as e:
            logger.error(f"Error loading {self.resource}: {str(e)}")
        finally:
            self.has_loaded = True
            self.loading = False
            if self._pending is pending:
                self._pending = None
            pending.set_result(None)

    # =====================================================
    # ENRICHMENT
    # =====================================================

    def enrich(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Add display-only fields derived from other stores."""
        return record

    async def _prepare_dependencies(self):
        for store in self.dependencies:
            await store.load()

    async def _enrich_rows(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        if self.dependencies:
            await self._prepare_dependencies()
        return [self.enrich(row) for row in rows]

    async def _enrich_one(self, record: Dict[str, Any]) -> Dict[str, Any]:
        return (await self._enrich_rows([record]))[0]

    # =====================================================
    # MUTATIONS
    # =====================================================

    def _body(self, record: Dict[str, Any], **extra) -> Dict[str, Any]:
        body = {self.payload_key: record}
        body.update({key: value for key, value in extra.items() if value is not None})
        return body

    async def _mutate(self, action: str, progress: str, past: str, method: str, **kwargs):
        toast_id = self.notifier.loading(f"{progress} {self.label}...")
        fallback = f"Failed to {action} {self.label}"
        try:
            result = await self.api.request(method, self.path, fallback_error=fallback, **kwargs)
        except Exception as e:
            message = str(e) or fallback
            logger.error(f"Error while trying to {action} {self.label.lower()}: {message}")
            self.notifier.error(message, toast_id)
            raise
        self.notifier.success(f"{self.label} {past} successfully", toast_id)
        return result

    async def add(self, record: Dict[str, Any], **extra) -> Dict[str, Any]:
        created = await self._mutate("add", "Adding", "added", "POST", json=self._body(record, **extra))
        created = await self._enrich_one(created)
        self.set_items([created] + (self.items or []))
        return created

    async def update(self, record: Dict[str, Any], **extra) -> Dict[str, Any]:
        updated = await self._mutate("update", "Updating", "updated", "PUT", json=self._body(record, **extra))
        updated = await self._enrich_one(updated)
        self.set_items([updated if item.get("id") == updated.get("id") else item for item in self.items or []])
        return updated

    async def delete(self, entity_id: str):
        await self._mutate("delete", "Deleting", "deleted", "DELETE", params={"id": entity_id})
        self.set_items([item for item in self.items or [] if item.get("id") != entity_id])


# =====================================================
# PER-ENTITY STORES
# =====================================================

class AuthUsersStore(EntityStore):
    resource = "auth-users"
    payload_key = "user"
    label = "User"

    def display_name(self, user_id: Optional[str]) -> Optional[str]:
        user = self.find(user_id)
        return user.get("full_name") if user else None

    async def add(self, user: Dict[str, Any], password: str) -> Dict[str, Any]:
        return await super().add(user, password=password)

    async def update(self, user: Dict[str, Any], password: Optional[str] = None) -> Dict[str, Any]:
        return await super().update(user, password=password)


class ClientsStore(EntityStore):
    resource = "clients"
    payload_key = "client"
    label = "Client"

    def code_for(self, client_id: Optional[str]) -> Optional[str]:
        client = self.find(client_id)
        return client.get("client_code") if client else None

    def follow_ups(self) -> List[Dict[str, Any]]:
        """Clients with a scheduled follow-up, soonest first."""
        scheduled = [client for client in self.items or [] if client.get("next_follow_up_at")]
        return sorted(scheduled, key=lambda client: client["next_follow_up_at"])


class LeadsStore(EntityStore):
    resource = "leads"
    payload_key = "lead"
    label = "Lead"

    def __init__(self, api: ApiClient, notifier: Notifier, users: AuthUsersStore):
        super().__init__(api, notifier, dependencies=[users])
        self.users = users

    def enrich(self, record):
        return {**record, "assigned_to_name": self.users.display_name(record.get("assigned_to"))}


class VendorsStore(EntityStore):
    resource = "vendors"
    payload_key = "vendor"
    label = "Vendor"


class RequirementsStore(EntityStore):
    resource = "requirements"
    payload_key = "requirement"
    label = "Requirement"

    def __init__(self, api: ApiClient, notifier: Notifier, users: AuthUsersStore, clients: ClientsStore):
        super().__init__(api, notifier, dependencies=[users, clients])
        self.users = users
        self.clients = clients

    def enrich(self, record):
        return {
            **record,
            "client_code": self.clients.code_for(record.get("client_id")),
            "assigned_to_name": self.users.display_name(record.get("assigned_to")),
        }

    async def add(self, requirement: Dict[str, Any], items: Optional[List[Dict[str, Any]]] = None):
        return await super().add(requirement, items=items)

    async def update(self, requirement: Dict[str, Any], items: Optional[List[Dict[str, Any]]] = None):
        return await super().update(requirement, items=items)

    async def fetch_items(self, requirement_id: str) -> List[Dict[str, Any]]:
        return await self.api.get(f"{self.path}/items", params={"requirement_id": requirement_id})


class QuotesStore(EntityStore):
    resource = "quotes"
    payload_key = "quote"
    label = "Quote"


class SalesOrdersStore(EntityStore):
    resource = "sales-orders"
    payload_key = "sales_order"
    label = "Sales Order"


class ExpensesStore(EntityStore):
    resource = "expenses"
    payload_key = "expense"
    label = "Expense"
