from enum import Enum
from typing import Any, Dict, Iterable, Optional


class DialogKind(str, Enum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"


class DialogState:
    """Which dialog an entity page has open, and the row it is about."""

    def __init__(self):
        self.open_dialog: Optional[DialogKind] = None
        self.current_row: Optional[Dict[str, Any]] = None

    def open(self, kind, row: Optional[Dict[str, Any]] = None):
        kind = DialogKind(kind)
        if kind in (DialogKind.EDIT, DialogKind.DELETE) and row is None:
            raise ValueError(f"A row is required to open the {kind.value} dialog")
        self.open_dialog = kind
        self.current_row = row if kind != DialogKind.ADD else None

    def close(self):
        self.open_dialog = None
        self.current_row = None

    def is_open(self, kind) -> bool:
        return self.open_dialog == DialogKind(kind)


class DialogRegistry:
    """One DialogState per entity page."""

    def __init__(self, entities: Iterable[str]):
        self._states = {entity: DialogState() for entity in entities}

    def __getitem__(self, entity: str) -> DialogState:
        return self._states[entity]

    def close_all(self):
        for state in self._states.values():
            state.close()
