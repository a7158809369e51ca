from datetime import datetime, timedelta, timezone
from contextlib import asynccontextmanager

import pytest
from sqlalchemy.exc import SQLAlchemyError

from synergy_crm.database import get_session
from synergy_crm.models.client_models import Client
from synergy_crm.models.sales_order_models import SalesOrder
from synergy_crm.services.code_generator import EntityCodeGenerator


@pytest.fixture
def client_codes():
    return EntityCodeGenerator(Client, "client_code", "C")


@pytest.mark.parametrize("last_code, expected", [
    ("C001", "C002"),
    ("C009", "C010"),
    ("C099", "C100"),
    ("C999", "C1000"),
    ("C1000", "C1001"),
])
def test_next_code_increments_and_pads(client_codes, last_code, expected):
    assert client_codes.next_after(last_code) == expected


@pytest.mark.parametrize("last_code", [None, "", "X007", "C", "C12a", "c005", "VC001"])
def test_malformed_or_missing_code_restarts_sequence(client_codes, last_code):
    assert client_codes.next_after(last_code) == "C001"


def test_multi_letter_prefix():
    orders = EntityCodeGenerator(SalesOrder, "order_number", "SO")
    assert orders.next_after("SO041") == "SO042"
    assert orders.next_after("S041") == "SO001"


async def test_generate_on_empty_table(db, client_codes):
    assert await client_codes.generate() == "C001"


async def test_generate_uses_most_recently_created_row(db, client_codes):
    now = datetime.now(timezone.utc)
    async with get_session() as session:
        session.add(Client(client_code="C050", contact_name="Old", contact_email="old@acme.io",
                           created_at=now - timedelta(days=2), updated_at=now))
        session.add(Client(client_code="C007", contact_name="New", contact_email="new@acme.io",
                           created_at=now, updated_at=now))
        await session.commit()

    assert await client_codes.generate() == "C008"


async def test_read_error_falls_back_to_first_code():
    @asynccontextmanager
    async def broken_session(user_id=None):
        raise SQLAlchemyError("database unavailable")
        yield

    generator = EntityCodeGenerator(Client, "client_code", "C", session_factory=broken_session)
    assert await generator.generate() == "C001"
