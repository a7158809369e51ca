import pytest

from synergy_crm.client.app_state import AppState
from synergy_crm.client.forms import (
    ClientForm, ClientFormDialog, ExpenseForm, FormValidationError, RequirementFormDialog,
    UserForm, UserFormDialog, VendorFormDialog
)

from conftest import BASE_URL


def test_client_form_reports_every_bad_field():
    with pytest.raises(FormValidationError) as excinfo:
        ClientForm.parse({
            "contact_name": "  ",
            "contact_email": "not-an-email",
            "website": "nope",
            "next_follow_up_at": "01/02/2024",
        })

    errors = excinfo.value.errors
    assert errors["contact_name"] == "Contact Name is required."
    assert errors["contact_email"] == "Invalid email address."
    assert errors["website"] == "Invalid URL."
    assert errors["next_follow_up_at"] == "Invalid date format. Use YYYY-MM-DD."


def test_client_form_accepts_blank_optionals():
    form = ClientForm.parse({
        "contact_name": "Jane", "contact_email": "jane@acme.io", "website": "", "industry": "", "notes": ""
    })
    assert form.website is None
    assert form.industry is None


def test_impossible_date_is_rejected():
    with pytest.raises(FormValidationError) as excinfo:
        ExpenseForm.parse({"category_code": "food", "amount": 10, "expense_date": "2024-02-30"})
    assert excinfo.value.errors["expense_date"] == "Invalid date."


def test_expense_enum_and_amount():
    with pytest.raises(FormValidationError) as excinfo:
        ExpenseForm.parse({"category_code": "yacht", "amount": 0, "expense_date": "2024-02-03"})
    assert excinfo.value.errors == {
        "category_code": "Select a valid category.",
        "amount": "Amount must be greater than 0.",
    }


@pytest.mark.parametrize("password, message", [
    ("", "Password is required."),
    ("short1", "Password must be at least 8 characters long."),
    ("NOLOWERCASE1", "Password must contain at least one lowercase letter."),
    ("nodigitshere", "Password must contain at least one number."),
])
def test_user_password_rules_on_add(password, message):
    with pytest.raises(FormValidationError) as excinfo:
        UserForm.parse({
            "full_name": "Sam", "email": "sam@acme.io", "permission": "write",
            "password": password, "confirm_password": password,
        })
    assert excinfo.value.errors["password"] == message


def test_user_password_confirmation_must_match():
    with pytest.raises(FormValidationError) as excinfo:
        UserForm.parse({
            "full_name": "Sam", "email": "sam@acme.io", "permission": "write",
            "password": "goodpass1", "confirm_password": "goodpass2",
        })
    assert excinfo.value.errors == {"confirm_password": "Passwords don't match."}


def test_user_password_optional_on_edit():
    form = UserForm.parse({"full_name": "Sam", "email": "sam@acme.io", "permission": "read", "is_edit": True})
    assert form.password is None


# =====================================================
# DIALOG SUBMISSION
# =====================================================

@pytest.fixture
async def state(db, transport, make_user):
    await make_user(email="admin@acme.io", permission="admin", password="secret123", full_name="Ada Admin")
    app_state = AppState(BASE_URL, transport=transport)
    await app_state.session.sign_in_with_email("admin@acme.io", "secret123", "admin")
    yield app_state
    await app_state.aclose()


async def test_add_dialog_composes_record(state):
    dialog = ClientFormDialog(state.clients, state.session)
    client = await dialog.submit({"contact_name": "Jane", "contact_email": "jane@acme.io", "industry": "retail"})

    assert client["client_code"] == "C001"
    assert client["created_by"] == state.session.user_id
    assert state.clients.items[0]["id"] == client["id"]


async def test_edit_dialog_preserves_identity_fields(state):
    vendor = await VendorFormDialog(state.vendors, state.session).submit({"company_name": "Bolt"})

    dialog = VendorFormDialog(state.vendors, state.session, current_row=vendor)
    edited = await dialog.submit({**vendor, "company_name": "Bolt Ltd", "vendor_code": "V999"})

    assert edited["company_name"] == "Bolt Ltd"
    assert edited["vendor_code"] == vendor["vendor_code"]
    assert edited["created_by"] == vendor["created_by"]
    assert edited["created_at"][:19] == vendor["created_at"][:19]


async def test_invalid_submission_never_reaches_the_store(state):
    dialog = ClientFormDialog(state.clients, state.session)
    with pytest.raises(FormValidationError):
        await dialog.submit({"contact_name": "Jane", "contact_email": "bad"})
    assert state.clients.items is None


async def test_requirement_dialog_sends_items(state):
    client = await ClientFormDialog(state.clients, state.session).submit(
        {"contact_name": "Jane", "contact_email": "jane@acme.io"}
    )
    requirement = await RequirementFormDialog(state.requirements, state.session).submit({
        "client_id": client["id"], "title": "Chairs",
        "items": [{"item_name": "Chair", "quantity": "6"}],
    })

    items = await state.requirements.fetch_items(requirement["id"])
    assert [(item["item_name"], item["quantity"]) for item in items] == [("Chair", 6)]


async def test_user_dialog_add_then_login(state):
    dialog = UserFormDialog(state.auth_users, state.session)
    user = await dialog.submit({
        "full_name": "Sam", "email": "sam@acme.io", "permission": "write",
        "password": "goodpass1", "confirm_password": "goodpass1",
    })
    assert user["status"] == "active"

    login = await state.api.post("/api/auth/login", json={"email": "sam@acme.io", "password": "goodpass1"})
    assert login["user"]["id"] == user["id"]


async def test_self_password_change_needs_consent_then_signs_out(state):
    await state.auth_users.load()
    me = state.auth_users.find(state.session.user_id)
    dialog = UserFormDialog(state.auth_users, state.session, current_row=me)
    values = {**me, "password": "newpass123", "confirm_password": "newpass123"}

    with pytest.raises(FormValidationError) as excinfo:
        await dialog.submit(values)
    assert "agree_to_logout" in excinfo.value.errors

    await dialog.submit({**values, "agree_to_logout": True})
    assert state.session.user is None
    assert state.api.token is None


async def test_self_name_change_reloads_session(state):
    await state.auth_users.load()
    me = state.auth_users.find(state.session.user_id)

    await UserFormDialog(state.auth_users, state.session, current_row=me).submit({**me, "full_name": "Ada Lovelace"})

    assert state.session.user["full_name"] == "Ada Lovelace"


async def test_admin_cannot_grant_super_admin(state, make_user):
    sam = await make_user(email="sam@acme.io", permission="write", full_name="Sam Seller")
    await state.auth_users.load()
    row = state.auth_users.find(sam["id"])

    dialog = UserFormDialog(state.auth_users, state.session, current_row=row)
    with pytest.raises(FormValidationError) as excinfo:
        await dialog.submit({**row, "permission": "super_admin"})
    assert excinfo.value.errors == {"permission": "Only a super admin can grant super admin access."}

    await state.auth_users.load(force=True)
    assert state.auth_users.find(sam["id"])["permission"] == "write"

    with pytest.raises(FormValidationError):
        await UserFormDialog(state.auth_users, state.session).submit({
            "full_name": "Root", "email": "root@acme.io", "permission": "super_admin",
            "password": "goodpass1", "confirm_password": "goodpass1",
        })


async def test_super_admin_permission_is_locked_for_others(state, make_user):
    root = await make_user(email="root@acme.io", permission="super_admin", full_name="Root")
    await state.auth_users.load()
    row = state.auth_users.find(root["id"])

    with pytest.raises(FormValidationError) as excinfo:
        await UserFormDialog(state.auth_users, state.session, current_row=row).submit({**row, "permission": "read"})
    assert "permission" in excinfo.value.errors


async def test_super_admin_can_grant_super_admin(db, transport, make_user):
    await make_user(email="root@acme.io", permission="super_admin", password="secret123", full_name="Root")
    sam = await make_user(email="sam@acme.io", permission="admin", full_name="Sam")

    async with AppState(BASE_URL, transport=transport) as app_state:
        await app_state.session.sign_in_with_email("root@acme.io", "secret123", "admin")
        await app_state.auth_users.load()
        row = app_state.auth_users.find(sam["id"])

        promoted = await UserFormDialog(app_state.auth_users, app_state.session, current_row=row).submit(
            {**row, "permission": "super_admin"}
        )
    assert promoted["permission"] == "super_admin"


async def test_own_permission_stays_on_self_edit(state):
    await state.auth_users.load()
    me = state.auth_users.find(state.session.user_id)

    saved = await UserFormDialog(state.auth_users, state.session, current_row=me).submit(
        {**me, "full_name": "Ada L", "permission": "read"}
    )
    assert saved["permission"] == "admin"
    assert state.session.permission == "admin"


async def test_urls_are_sent_as_typed(state):
    form = ClientForm.parse({"contact_name": "Jane", "contact_email": "jane@acme.io", "website": "https://acme.io"})
    assert form.website == "https://acme.io"

    client = await ClientFormDialog(state.clients, state.session).submit(
        {"contact_name": "Jane", "contact_email": "jane@acme.io", "website": "https://acme.io"}
    )
    assert client["website"] == "https://acme.io"
