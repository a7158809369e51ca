import asyncio
import logging
from typing import Dict, Optional

import httpx

from synergy_crm.client.api import ApiClient
from synergy_crm.client.dialogs import DialogRegistry
from synergy_crm.client.notifications import Notifier
from synergy_crm.client.session import SessionStore
from synergy_crm.client.stores import (
    AuthUsersStore, ClientsStore, EntityStore, ExpensesStore, LeadsStore,
    QuotesStore, RequirementsStore, SalesOrdersStore, VendorsStore
)

logger = logging.getLogger(__name__)


class AppState:
    """
    Everything one signed-in client holds: the API connection, the session,
    every entity store and the dialog state of every entity page.
    """

    def __init__(self, base_url: str = "http://localhost:8000",
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 notifier: Optional[Notifier] = None):
        self.api = ApiClient(base_url, transport=transport)
        self.notifier = notifier or Notifier()
        self.session = SessionStore(self.api)

        self.auth_users = AuthUsersStore(self.api, self.notifier)
        self.clients = ClientsStore(self.api, self.notifier)
        self.leads = LeadsStore(self.api, self.notifier, users=self.auth_users)
        self.vendors = VendorsStore(self.api, self.notifier)
        self.requirements = RequirementsStore(self.api, self.notifier, users=self.auth_users, clients=self.clients)
        self.quotes = QuotesStore(self.api, self.notifier)
        self.sales_orders = SalesOrdersStore(self.api, self.notifier)
        self.expenses = ExpensesStore(self.api, self.notifier)

        self.dialogs = DialogRegistry(self.stores.keys())

    @property
    def stores(self) -> Dict[str, EntityStore]:
        return {
            "auth_users": self.auth_users,
            "clients": self.clients,
            "leads": self.leads,
            "vendors": self.vendors,
            "requirements": self.requirements,
            "quotes": self.quotes,
            "sales_orders": self.sales_orders,
            "expenses": self.expenses,
        }

    async def sign_in(self, email: str, password: str, role: str):
        user = await self.session.sign_in_with_email(email, password, role)
        await self.load_all()
        return user

    async def initialize(self):
        """Restore the session and, when signed in, load every store."""
        user = await self.session.fetch_user()
        if user is None:
            return
        await self.load_all()

    async def load_all(self, force: bool = False):
        await asyncio.gather(*(store.load(force=force) for store in self.stores.values()))
        logger.info(f"Loaded {len(self.stores)} stores (force={force})")

    async def sign_out(self, scope: str = "local"):
        await self.session.sign_out(scope)
        self.dialogs.close_all()
        for store in self.stores.values():
            store.set_items(None)
            store.has_loaded = False

    async def aclose(self):
        await self.api.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
