import math
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Callable, Dict, List, Optional, Sequence, Set

EDIT_PERMISSIONS = {"write", "full_access", "admin", "super_admin"}
DELETE_PERMISSIONS = {"full_access", "admin", "super_admin"}
END_OF_DAY = time(23, 59, 59, 999000)


@dataclass
class ColumnDef:
    key: str
    title: str
    sortable: bool = True
    hideable: bool = True
    accessor: Optional[Callable[[Dict[str, Any]], Any]] = None

    def value(self, row: Dict[str, Any]) -> Any:
        return self.accessor(row) if self.accessor else row.get(self.key)


@dataclass
class RowActions:
    visible: bool
    can_edit: bool
    can_delete: bool


def _sort_key(value: Any):
    if isinstance(value, str):
        return value.casefold()
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """ISO string or datetime as a naive local datetime."""
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    elif isinstance(value, date) and not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def row_actions(row: Dict[str, Any], permission: Optional[str], actor_id: Optional[str] = None,
                is_user_table: bool = False) -> RowActions:
    """What the acting user may do with one row."""
    if permission not in EDIT_PERMISSIONS:
        return RowActions(visible=False, can_edit=False, can_delete=False)

    can_edit = True
    can_delete = permission in DELETE_PERMISSIONS
    # A super admin account can only be touched by its owner
    if is_user_table and row.get("permission") == "super_admin" and row.get("id") != actor_id:
        can_edit = False
        can_delete = False
    return RowActions(visible=True, can_edit=can_edit, can_delete=can_delete)


@dataclass
class DataTable:
    """
    Sorting, filtering and pagination over one entity's rows.

    `rows` is the store's list; every derived view is computed on demand so
    the table never holds stale copies.
    """

    columns: List[ColumnDef]
    rows: List[Dict[str, Any]] = field(default_factory=list)
    search_fields: Sequence[str] = ()
    facet_fields: Sequence[str] = ()
    date_field: str = "created_at"
    is_user_table: bool = False
    page_size: int = 10

    search_field: Optional[str] = None
    search_text: str = ""
    sort_key: Optional[str] = None
    sort_desc: bool = False
    hidden_columns: Set[str] = field(default_factory=set)
    selected_ids: Set[str] = field(default_factory=set)
    facet_filters: Dict[str, Set[Any]] = field(default_factory=dict)
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    page_index: int = 0

    def __post_init__(self):
        if self.search_field is None and self.search_fields:
            self.search_field = self.search_fields[0]

    # =====================================================
    # STATE CHANGES
    # =====================================================

    def set_rows(self, rows: Optional[List[Dict[str, Any]]]):
        self.rows = list(rows or [])
        self.selected_ids &= {row.get("id") for row in self.rows}
        self._clamp_page()

    def set_sort(self, key: Optional[str], desc: bool = False):
        self.sort_key = key
        self.sort_desc = desc

    def toggle_sort(self, key: str):
        if self.sort_key != key:
            self.set_sort(key, desc=False)
        elif not self.sort_desc:
            self.sort_desc = True
        else:
            self.set_sort(None)

    def toggle_column(self, key: str):
        column = self._column(key)
        if column is None or not column.hideable:
            return
        self.hidden_columns ^= {key}

    def set_search(self, text: str, field_name: Optional[str] = None):
        if field_name is not None:
            if field_name not in self.search_fields:
                raise ValueError(f"'{field_name}' is not searchable")
            self.search_field = field_name
        self.search_text = text or ""
        self.page_index = 0

    def set_facet(self, field_name: str, values: Optional[Set[Any]]):
        if values:
            self.facet_filters[field_name] = set(values)
        else:
            self.facet_filters.pop(field_name, None)
        self.page_index = 0

    def set_date_range(self, start: Optional[date], end: Optional[date] = None):
        """
        Limit rows to creation dates between two days, both inclusive.

        A range without an end runs to the end of the current day, worked out
        each time rows are filtered. Passing no start clears it.
        """
        if start is None:
            self.date_from = None
            self.date_to = None
        else:
            self.date_from = datetime.combine(start, time.min)
            self.date_to = datetime.combine(end, END_OF_DAY) if end else None
        self.page_index = 0

    def reset_filters(self):
        self.search_text = ""
        self.facet_filters.clear()
        self.date_from = None
        self.date_to = None
        self.page_index = 0

    def toggle_row(self, row_id: str):
        self.selected_ids ^= {row_id}

    def toggle_all(self):
        page_ids = {row.get("id") for row in self.page_rows}
        if page_ids and page_ids <= self.selected_ids:
            self.selected_ids -= page_ids
        else:
            self.selected_ids |= page_ids

    def clear_selection(self):
        self.selected_ids.clear()

    def set_page_size(self, size: int):
        if size < 1:
            raise ValueError("Page size must be at least 1")
        self.page_size = size
        self.page_index = 0

    def go_to_page(self, index: int):
        self.page_index = max(0, min(index, self.page_count - 1))

    def next_page(self):
        self.go_to_page(self.page_index + 1)

    def previous_page(self):
        self.go_to_page(self.page_index - 1)

    # =====================================================
    # DERIVED VIEWS
    # =====================================================

    def _column(self, key: str) -> Optional[ColumnDef]:
        for column in self.columns:
            if column.key == key:
                return column
        return None

    def _clamp_page(self):
        self.page_index = max(0, min(self.page_index, self.page_count - 1))

    @property
    def visible_columns(self) -> List[ColumnDef]:
        return [column for column in self.columns if column.key not in self.hidden_columns]

    def _matches(self, row: Dict[str, Any], skip_facet: Optional[str] = None) -> bool:
        if self.search_text and self.search_field:
            value = row.get(self.search_field)
            if value is None or self.search_text.casefold() not in str(value).casefold():
                return False

        for field_name, allowed in self.facet_filters.items():
            if field_name != skip_facet and row.get(field_name) not in allowed:
                return False

        if self.date_from is not None:
            stamp = parse_timestamp(row.get(self.date_field))
            date_to = self.date_to or datetime.combine(date.today(), END_OF_DAY)
            if stamp is None or stamp < self.date_from or stamp > date_to:
                return False
        return True

    @property
    def filtered_rows(self) -> List[Dict[str, Any]]:
        rows = [row for row in self.rows if self._matches(row)]
        if self.sort_key:
            column = self._column(self.sort_key)
            getter = column.value if column else (lambda row: row.get(self.sort_key))
            present = [row for row in rows if getter(row) is not None]
            missing = [row for row in rows if getter(row) is None]
            present.sort(key=lambda row: _sort_key(getter(row)), reverse=self.sort_desc)
            # Nulls stay at the bottom in both directions
            rows = present + missing
        return rows

    def facet_counts(self, field_name: str) -> Dict[Any, int]:
        """Per-value counts under every filter except this facet's own."""
        counts: Dict[Any, int] = {}
        for row in self.rows:
            if self._matches(row, skip_facet=field_name):
                value = row.get(field_name)
                counts[value] = counts.get(value, 0) + 1
        return counts

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(len(self.filtered_rows) / self.page_size))

    @property
    def page_rows(self) -> List[Dict[str, Any]]:
        start = self.page_index * self.page_size
        return self.filtered_rows[start:start + self.page_size]

    @property
    def selected_rows(self) -> List[Dict[str, Any]]:
        return [row for row in self.rows if row.get("id") in self.selected_ids]

    @property
    def is_filtered(self) -> bool:
        return bool(self.search_text or self.facet_filters or self.date_from)

    def actions_for(self, row: Dict[str, Any], permission: Optional[str], actor_id: Optional[str] = None) -> RowActions:
        return row_actions(row, permission, actor_id, is_user_table=self.is_user_table)
