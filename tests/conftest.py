import os
import tempfile

# Point the app at a throwaway SQLite database before anything reads settings
_DB_DIR = tempfile.mkdtemp(prefix="synergy-crm-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'crm.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["AUTO_CREATE_TABLES"] = "false"

import httpx
import pytest

from synergy_crm.database import create_tables, drop_tables
from synergy_crm.main import app
from synergy_crm.services.client_service import client_service
from synergy_crm.services.expense_service import expense_service
from synergy_crm.services.jwt_service import jwt_service
from synergy_crm.services.lead_service import lead_service
from synergy_crm.services.quote_service import quote_service
from synergy_crm.services.requirement_service import requirement_service
from synergy_crm.services.sales_order_service import sales_order_service
from synergy_crm.services.user_service import user_service
from synergy_crm.services.vendor_service import vendor_service

ENTITY_SERVICES = [
    client_service, lead_service, vendor_service, requirement_service,
    quote_service, sales_order_service, expense_service, user_service,
]

BASE_URL = "http://testserver"


@pytest.fixture
async def db():
    """Fresh schema and empty list caches for every test."""
    await drop_tables()
    await create_tables()
    for service in ENTITY_SERVICES:
        service.cache.invalidate()
    yield


@pytest.fixture
def transport():
    return httpx.ASGITransport(app=app)


@pytest.fixture
async def api(db, transport):
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest.fixture
def make_user(db):
    async def _make_user(email="admin@acme.io", permission="admin", password="secret123",
                         full_name="Ada Admin", status="active"):
        return await user_service.create(
            {"full_name": full_name, "email": email, "permission": permission, "status": status},
            password=password
        )
    return _make_user


def auth_headers(user):
    token = jwt_service.create_access_token({"sub": user["id"]})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def admin(make_user):
    user = await make_user()
    return {"user": user, "headers": auth_headers(user)}


@pytest.fixture
def headers_for():
    return auth_headers
