from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rental_console.app.query_state import QueryState, Section


class ModalMode(str, Enum):
    NONE = "none"
    VIEW = "view"
    EDIT = "edit"
    ADD = "add"
    DELETE = "delete"


@dataclass
class ConsoleState:
    section: Section = Section.ACCOUNTS
    default_limit: int = 10
    queries: dict[Section, QueryState] = field(default_factory=dict)
    rows: list[dict[str, Any]] = field(default_factory=list)
    page_loading: bool = False
    inline_loading: bool = False
    last_error: str | None = None
    selected_item: dict[str, Any] | None = None
    modal_mode: ModalMode = ModalMode.NONE
    media_open: bool = False
    action_in_progress: bool = False

    def query(self, section: Section | None = None) -> QueryState:
        target = section or self.section
        if target not in self.queries:
            self.queries[target] = QueryState.fresh(limit=self.default_limit)
        return self.queries[target]

    def activate(self, section: Section) -> QueryState:
        """Makes `section` current with a fresh query; other sections keep whatever they had."""
        self.section = section
        self.queries[section] = QueryState.fresh(limit=self.default_limit)
        self.rows = []
        self.last_error = None
        self.page_loading = False
        self.inline_loading = False
        self.close_modals()
        return self.queries[section]

    def close_modals(self) -> None:
        self.modal_mode = ModalMode.NONE
        self.media_open = False
        self.selected_item = None

    def clear(self) -> None:
        self.queries = {}
        self.rows = []
        self.last_error = None
        self.page_loading = False
        self.inline_loading = False
        self.action_in_progress = False
        self.close_modals()
