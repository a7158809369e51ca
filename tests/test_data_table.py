from datetime import date, datetime, time, timedelta

import pytest

from synergy_crm.client.data_table import ColumnDef, DataTable, row_actions
from synergy_crm.client.dialogs import DialogKind, DialogRegistry, DialogState

ROWS = [
    {"id": "1", "company_name": "Acme", "status": "new", "source": "email", "created_at": "2024-03-01T00:00:00"},
    {"id": "2", "company_name": "bolt", "status": "converted", "source": "event", "created_at": "2024-03-05T23:59:59"},
    {"id": "3", "company_name": None, "status": "new", "source": "email", "created_at": "2024-03-06T00:00:00"},
    {"id": "4", "company_name": "Zeta", "status": "in_progress", "source": "phone", "created_at": "2024-02-28T12:00:00"},
]


@pytest.fixture
def table():
    columns = [ColumnDef("company_name", "Company"), ColumnDef("status", "Status"),
               ColumnDef("id", "ID", hideable=False)]
    return DataTable(columns=columns, rows=list(ROWS), search_fields=("company_name", "status"),
                     facet_fields=("status", "source"), page_size=2)


def ids(rows):
    return [row["id"] for row in rows]


def test_sort_keeps_nulls_last_both_ways(table):
    table.set_sort("company_name")
    assert ids(table.filtered_rows) == ["1", "2", "4", "3"]

    table.set_sort("company_name", desc=True)
    assert ids(table.filtered_rows) == ["4", "2", "1", "3"]


def test_toggle_sort_cycles(table):
    table.toggle_sort("status")
    assert (table.sort_key, table.sort_desc) == ("status", False)
    table.toggle_sort("status")
    assert table.sort_desc
    table.toggle_sort("status")
    assert table.sort_key is None


def test_search_on_selected_field(table):
    table.set_search("BOL")
    assert ids(table.filtered_rows) == ["2"]

    table.set_search("prog", field_name="status")
    assert ids(table.filtered_rows) == ["4"]

    with pytest.raises(ValueError):
        table.set_search("x", field_name="source")


def test_facets_and_counts(table):
    table.set_facet("status", {"new"})
    assert ids(table.filtered_rows) == ["1", "3"]

    # A facet's own selection does not shrink its counts
    assert table.facet_counts("status") == {"new": 2, "converted": 1, "in_progress": 1}
    assert table.facet_counts("source") == {"email": 2}

    table.set_facet("status", set())
    assert len(table.filtered_rows) == 4


def test_date_range_is_inclusive_of_whole_days(table):
    table.set_date_range(date(2024, 3, 1), date(2024, 3, 5))
    assert ids(table.filtered_rows) == ["1", "2"]


def test_date_range_without_end_runs_to_end_of_today(table):
    table.set_date_range(date(2024, 3, 6))
    assert ids(table.filtered_rows) == ["3"]
    assert table.date_to is None

    table.set_date_range(None)
    assert len(table.filtered_rows) == 4


def test_open_range_keeps_rows_added_after_filtering(table):
    table.set_date_range(date.today())

    later_today = datetime.combine(date.today(), time(23, 59, 59))
    table.set_rows([{"id": "new", "created_at": later_today.isoformat()}])
    assert ids(table.filtered_rows) == ["new"]

    tomorrow = datetime.combine(date.today() + timedelta(days=1), time(0, 0, 1))
    table.set_rows([{"id": "future", "created_at": tomorrow.isoformat()}])
    assert table.filtered_rows == []


def test_reset_filters(table):
    assert not table.is_filtered
    table.set_search("acme")
    table.set_facet("status", {"new"})
    table.set_date_range(date(2024, 3, 1))
    assert table.is_filtered

    table.reset_filters()
    assert not table.is_filtered
    assert len(table.filtered_rows) == 4


def test_pagination(table):
    assert table.page_count == 2
    assert ids(table.page_rows) == ["1", "2"]
    table.next_page()
    assert ids(table.page_rows) == ["3", "4"]
    table.next_page()
    assert table.page_index == 1
    table.previous_page()
    table.previous_page()
    assert table.page_index == 0

    table.set_page_size(3)
    assert table.page_index == 0
    assert table.page_count == 2


def test_column_visibility(table):
    table.toggle_column("status")
    assert [c.key for c in table.visible_columns] == ["company_name", "id"]
    table.toggle_column("id")
    assert [c.key for c in table.visible_columns] == ["company_name", "id"]
    table.toggle_column("status")
    assert len(table.visible_columns) == 3


def test_selection(table):
    table.toggle_all()
    assert table.selected_ids == {"1", "2"}
    table.toggle_row("2")
    assert ids(table.selected_rows) == ["1"]

    table.set_rows([row for row in ROWS if row["id"] != "1"])
    assert table.selected_ids == set()

    table.toggle_all()
    table.clear_selection()
    assert table.selected_rows == []


@pytest.mark.parametrize("permission, visible, can_edit, can_delete", [
    ("read", False, False, False),
    ("write", True, True, False),
    ("full_access", True, True, True),
    ("admin", True, True, True),
    ("super_admin", True, True, True),
    (None, False, False, False),
])
def test_row_actions_by_permission(permission, visible, can_edit, can_delete):
    actions = row_actions({"id": "x"}, permission)
    assert (actions.visible, actions.can_edit, actions.can_delete) == (visible, can_edit, can_delete)


def test_super_admin_rows_are_locked_to_their_owner():
    owner = {"id": "root", "permission": "super_admin"}

    other = row_actions(owner, "admin", actor_id="someone", is_user_table=True)
    assert (other.can_edit, other.can_delete) == (False, False)

    self_edit = row_actions(owner, "super_admin", actor_id="root", is_user_table=True)
    assert (self_edit.can_edit, self_edit.can_delete) == (True, True)


# =====================================================
# DIALOG STATE
# =====================================================

def test_dialog_state_open_and_close():
    state = DialogState()
    state.open("edit", {"id": "1"})
    assert state.is_open(DialogKind.EDIT)
    assert state.current_row == {"id": "1"}

    state.close()
    assert state.open_dialog is None
    assert state.current_row is None


def test_add_dialog_has_no_row_and_edit_needs_one():
    state = DialogState()
    state.open(DialogKind.ADD, {"id": "ignored"})
    assert state.current_row is None

    with pytest.raises(ValueError):
        state.open(DialogKind.DELETE)


def test_registry_keeps_pages_apart():
    registry = DialogRegistry(["clients", "leads"])
    registry["clients"].open("delete", {"id": "c1"})

    assert registry["leads"].open_dialog is None
    registry.close_all()
    assert registry["clients"].open_dialog is None
