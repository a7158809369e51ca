from datetime import datetime, timezone

from synergy_crm.database import get_session
from synergy_crm.models.client_models import Client


def client_payload(**overrides):
    payload = {
        "company_name": "Acme Corp",
        "contact_name": "Jane Doe",
        "contact_email": "jane@acme.io",
        "industry": "technology",
        "source": "referral",
    }
    payload.update(overrides)
    return payload


async def test_root_and_health(api):
    assert (await api.get("/")).json()["message"] == "Welcome to Synergy CRM API"
    assert (await api.get("/health")).json()["status"] == "healthy"


async def test_create_client_assigns_code_id_and_creator(api, admin):
    response = await api.post("/api/clients", json={"client": client_payload()}, headers=admin["headers"])

    assert response.status_code == 200
    client = response.json()
    assert client["client_code"] == "C001"
    assert client["id"]
    assert client["created_by"] == admin["user"]["id"]
    assert client["industry"] == "technology"


async def test_next_client_after_c007_gets_c008(api, admin):
    first = await api.post(
        "/api/clients",
        json={"client": client_payload(client_code="C007", created_at="2024-01-01T09:00:00+00:00")},
        headers=admin["headers"]
    )
    assert first.json()["client_code"] == "C007"

    second = await api.post("/api/clients", json={"client": client_payload(contact_email="b@acme.io")},
                            headers=admin["headers"])
    assert second.json()["client_code"] == "C008"


async def test_supplied_duplicate_code_is_rejected(api, admin):
    await api.post("/api/clients", json={"client": client_payload(client_code="C001")}, headers=admin["headers"])
    response = await api.post("/api/clients", json={"client": client_payload(client_code="C001")},
                              headers=admin["headers"])

    assert response.status_code == 400
    assert "error" in response.json()


async def test_generated_code_collision_is_retried(api, admin, monkeypatch):
    from synergy_crm.services.client_service import client_service

    await api.post("/api/clients", json={"client": client_payload(client_code="C001")}, headers=admin["headers"])

    # First attempt proposes a taken code, the retry gets a fresh one
    proposals = iter(["C001", "C002"])

    async def racing_generate(user_id=None):
        return next(proposals)

    monkeypatch.setattr(client_service.code_generator, "generate", racing_generate)
    response = await api.post("/api/clients", json={"client": client_payload(contact_email="x@acme.io")},
                              headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["client_code"] == "C002"


async def test_list_is_cached_until_a_write(api, admin):
    await api.post("/api/clients", json={"client": client_payload()}, headers=admin["headers"])

    first = await api.get("/api/clients")
    assert first.headers["cache-control"] == "public, s-maxage=30, stale-while-revalidate=60"

    # Rows written behind the service's back stay invisible while the cache is warm
    now = datetime.now(timezone.utc)
    async with get_session() as session:
        session.add(Client(client_code="C900", contact_name="Ghost", contact_email="ghost@acme.io",
                           created_at=now, updated_at=now))
        await session.commit()

    second = await api.get("/api/clients")
    assert second.content == first.content

    await api.post("/api/clients", json={"client": client_payload(contact_email="c@acme.io")},
                   headers=admin["headers"])
    third = await api.get("/api/clients")
    assert len(third.json()) == 3


async def test_list_is_newest_first(api, admin):
    await api.post("/api/vendors", json={"vendor": {"company_name": "Old", "created_at": "2023-01-01T00:00:00Z"}},
                   headers=admin["headers"])
    await api.post("/api/vendors", json={"vendor": {"company_name": "New"}}, headers=admin["headers"])

    names = [vendor["company_name"] for vendor in (await api.get("/api/vendors", headers=admin["headers"])).json()]
    assert names == ["New", "Old"]


async def test_edit_round_trip_keeps_immutable_fields(api, admin, make_user, headers_for):
    created = (await api.post(
        "/api/clients",
        json={"client": client_payload(created_at="2024-01-01T00:00:00Z", updated_at="2024-01-01T00:00:00Z")},
        headers=admin["headers"]
    )).json()

    other = await make_user(email="other@acme.io", permission="write")
    edited = {
        **created,
        "contact_name": "Janet Doe",
        "client_code": "C999",
        "created_by": other["id"],
        "created_at": "2030-01-01T00:00:00Z",
    }
    response = await api.put("/api/clients", json={"client": edited}, headers=headers_for(other))

    assert response.status_code == 200
    updated = response.json()
    assert updated["contact_name"] == "Janet Doe"
    assert updated["client_code"] == created["client_code"]
    assert updated["created_by"] == created["created_by"]
    assert updated["created_at"][:19] == created["created_at"][:19]
    assert updated["updated_at"][:19] > created["updated_at"][:19]


async def test_update_is_full_replacement(api, admin):
    created = (await api.post("/api/clients", json={"client": client_payload(notes="call back")},
                              headers=admin["headers"])).json()
    payload = {key: value for key, value in created.items() if key != "notes"}

    updated = (await api.put("/api/clients", json={"client": payload}, headers=admin["headers"])).json()
    assert updated["notes"] is None


async def test_update_requires_id_and_known_row(api, admin):
    missing_id = await api.put("/api/clients", json={"client": client_payload()}, headers=admin["headers"])
    assert missing_id.status_code == 400
    assert missing_id.json() == {"error": "Client ID is required"}

    unknown = await api.put("/api/clients", json={"client": client_payload(id="nope")}, headers=admin["headers"])
    assert unknown.status_code == 400
    assert unknown.json() == {"error": "Client not found"}


async def test_create_validation_errors(api, admin):
    missing = await api.post("/api/clients", json={}, headers=admin["headers"])
    assert missing.status_code == 400
    assert missing.json() == {"error": "Client data is required"}

    bad_enum = await api.post("/api/clients", json={"client": client_payload(industry="farming")},
                              headers=admin["headers"])
    assert bad_enum.status_code == 400
    assert "industry" in bad_enum.json()["error"]

    not_json_object = await api.post("/api/clients", json=["client"], headers=admin["headers"])
    assert not_json_object.status_code == 400


async def test_writes_require_a_token(api, db):
    assert (await api.post("/api/clients", json={"client": client_payload()})).status_code == 401
    assert (await api.put("/api/clients", json={"client": client_payload(id="x")})).status_code == 401
    assert (await api.delete("/api/clients", params={"id": "x"})).status_code == 401

    bad_token = await api.post("/api/clients", json={"client": client_payload()},
                               headers={"Authorization": "Bearer not-a-token"})
    assert bad_token.status_code == 401
    assert "error" in bad_token.json()


async def test_list_auth_rules(api, db):
    assert (await api.get("/api/clients")).status_code == 200
    for path in ["/api/leads", "/api/vendors", "/api/requirements", "/api/quotes",
                 "/api/sales-orders", "/api/expenses", "/api/auth-users"]:
        assert (await api.get(path)).status_code == 401, path


async def test_vendor_delete_is_reflected_in_next_list(api, admin):
    vendor = (await api.post("/api/vendors", json={"vendor": {"company_name": "Bolt Supplies"}},
                             headers=admin["headers"])).json()
    assert vendor["vendor_code"] == "V001"
    assert vendor["status"] == "active"
    assert len((await api.get("/api/vendors", headers=admin["headers"])).json()) == 1

    response = await api.delete("/api/vendors", params={"id": vendor["id"]}, headers=admin["headers"])
    assert response.json() == {"success": True}
    assert (await api.get("/api/vendors", headers=admin["headers"])).json() == []


async def test_delete_requires_id_and_tolerates_unknown(api, admin):
    missing = await api.delete("/api/vendors", headers=admin["headers"])
    assert missing.status_code == 400
    assert missing.json() == {"error": "Vendor ID is required"}

    unknown = await api.delete("/api/vendors", params={"id": "ghost"}, headers=admin["headers"])
    assert unknown.json() == {"success": True}


async def test_lead_defaults(api, admin):
    response = await api.post("/api/leads", json={"lead": {
        "contact_name": "Raj", "contact_email": "raj@acme.io", "source": "whatsapp", "notes": ""
    }}, headers=admin["headers"])

    lead = response.json()
    assert lead["status"] == "new"
    assert lead["notes"] is None
    assert lead["created_by"] == admin["user"]["id"]


async def test_quote_totals_and_number(api, admin):
    client = (await api.post("/api/clients", json={"client": client_payload()}, headers=admin["headers"])).json()
    requirement = (await api.post("/api/requirements", json={"requirement": {
        "client_id": client["id"], "title": "Laptops"
    }}, headers=admin["headers"])).json()

    quote = (await api.post("/api/quotes", json={"quote": {
        "requirement_id": requirement["id"], "client_id": client["id"],
        "subtotal_cost": 800, "subtotal_price": 1000, "tax_pct": 18
    }}, headers=admin["headers"])).json()

    assert quote["quote_number"] == "Q001"
    assert quote["tax_amount"] == 180
    assert quote["total_price"] == 1180


async def test_sales_order_route_and_number(api, admin):
    client = (await api.post("/api/clients", json={"client": client_payload()}, headers=admin["headers"])).json()
    response = await api.post("/api/sales-orders", json={"sales_order": {
        "client_id": client["id"], "order_date": "2024-05-01", "total_price": 500
    }}, headers=admin["headers"])

    order = response.json()
    assert order["order_number"] == "SO001"
    assert order["status"] == "draft"


async def test_expense_defaults_to_caller(api, admin):
    response = await api.post("/api/expenses", json={"expense": {
        "category_code": "cab", "amount": 450, "expense_date": "2024-05-02"
    }}, headers=admin["headers"])

    expense = response.json()
    assert expense["executive_id"] == admin["user"]["id"]
    assert expense["status"] == "submitted"

    negative = await api.post("/api/expenses", json={"expense": {
        "category_code": "cab", "amount": -1, "expense_date": "2024-05-02"
    }}, headers=admin["headers"])
    assert negative.status_code == 400


async def test_client_follow_ups(api, admin):
    await api.post("/api/clients", json={"client": client_payload(next_follow_up_at="2024-06-10")},
                   headers=admin["headers"])
    await api.post("/api/clients", json={"client": client_payload(contact_email="b@acme.io",
                                                                   next_follow_up_at="2024-06-01")},
                   headers=admin["headers"])
    await api.post("/api/clients", json={"client": client_payload(contact_email="c@acme.io")},
                   headers=admin["headers"])

    follow_ups = (await api.get("/api/clients/follow-ups", headers=admin["headers"])).json()
    assert [client["next_follow_up_at"] for client in follow_ups] == ["2024-06-01", "2024-06-10"]
