from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from clients.rental_api_sdk.accounts_client import AccountsClient
from clients.rental_api_sdk.complexes_client import ComplexesClient
from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.listings_client import ListingsClient
from clients.rental_api_sdk.preferences_client import PreferencesClient

from rental_console.app.config import AppConfig
from rental_console.app.crud_controller import CrudModalController
from rental_console.app.fetch_orchestrator import FetchMode, FetchResult, ResourceFetchOrchestrator
from rental_console.app.infrastructure.logging.logger import get_logger
from rental_console.app.notifications import Notification, NotificationQueue
from rental_console.app.preferences_controller import PreferencesController, PreferencesMode
from rental_console.app.query_state import QueryState, Section, SortState
from rental_console.app.state import ConsoleState, ModalMode
from rental_console.app.ui.components.confirm_dialog import Confirmer
from rental_console.app.ui.listing_view import ColumnDef, columns_for
from rental_console.app.ui.pagination import goto_page, next_page, prev_page, set_limit


@dataclass(frozen=True)
class ConsoleViewModel:
    section: Section
    columns: list[ColumnDef]
    rows: list[dict[str, Any]]
    search: str
    sort: SortState
    filters: dict[str, Any]
    page: int
    limit: int
    total: int
    total_pages: int
    page_loading: bool
    inline_loading: bool
    error: str | None
    modal_mode: ModalMode
    media_open: bool
    selected_item: dict[str, Any] | None
    preferences_mode: PreferencesMode
    notifications: list[Notification]


class AdminConsole:
    """Composition root: one active section, its query, the modals and the toasts."""

    def __init__(
        self,
        accounts: Any,
        listings: Any,
        complexes: Any,
        preferences: Any,
        config: AppConfig | None = None,
        confirm: Confirmer | None = None,
        on_unauthorized: Callable[[ApiError], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self._logger = logger or get_logger("rental_console", self.config.log_level)
        self.state = ConsoleState(default_limit=self.config.page_limit)
        self.notifications = NotificationQueue(ttl_seconds=self.config.notification_ttl_seconds)
        self.fetcher = ResourceFetchOrchestrator(
            state=self.state,
            accounts=accounts,
            listings=listings,
            complexes=complexes,
            notifications=self.notifications,
            debounce_ms=self.config.debounce_ms,
            on_unauthorized=on_unauthorized,
            logger=self._logger,
        )
        self.preferences = PreferencesController(preferences, self.notifications, confirm=confirm, logger=self._logger)
        self.crud = CrudModalController(
            state=self.state,
            fetcher=self.fetcher,
            notifications=self.notifications,
            accounts=accounts,
            listings=listings,
            complexes=complexes,
            preferences=self.preferences,
            confirm=confirm,
            refresh_strategy=self.config.refresh_strategy,
            logger=self._logger,
        )

    @classmethod
    def from_http_client(
        cls,
        http_client: HttpClient,
        config: AppConfig | None = None,
        confirm: Confirmer | None = None,
        on_unauthorized: Callable[[ApiError], None] | None = None,
    ) -> "AdminConsole":
        if on_unauthorized is not None:
            http_client.register_auth_error_handler(on_unauthorized)
        return cls(
            accounts=AccountsClient(http_client),
            listings=ListingsClient(http_client),
            complexes=ComplexesClient(http_client),
            preferences=PreferencesClient(http_client),
            config=config,
            confirm=confirm,
        )

    @property
    def query(self) -> QueryState:
        return self.state.query()

    async def start(self, section: Section = Section.ACCOUNTS) -> FetchResult:
        return await self.fetcher.activate(section)

    async def switch_section(self, section: Section) -> FetchResult:
        self.preferences.reset()
        return await self.fetcher.activate(section)

    def set_search(self, term: str) -> None:
        self.query.search = term
        self.query.pagination.page = 1
        self.fetcher.schedule_refine()

    def toggle_sort(self, field_name: str) -> None:
        self.query.sort.toggle(field_name)
        self.fetcher.schedule_refine()

    def set_filter(self, key: str, value: Any) -> None:
        if value in (None, ""):
            self.query.filters.pop(key, None)
        else:
            self.query.filters[key] = value
        self.query.pagination.page = 1
        self.fetcher.schedule_refine()

    def clear_filters(self) -> None:
        self.query.filters.clear()
        self.query.pagination.page = 1
        self.fetcher.schedule_refine()

    def goto_page(self, page: int) -> None:
        goto_page(self.query.pagination, page)
        self.fetcher.schedule_refine()

    def next_page(self) -> None:
        next_page(self.query.pagination)
        self.fetcher.schedule_refine()

    def prev_page(self) -> None:
        prev_page(self.query.pagination)
        self.fetcher.schedule_refine()

    def set_limit(self, limit: int) -> None:
        set_limit(self.query.pagination, limit)
        self.fetcher.schedule_refine()

    async def retry(self) -> FetchResult:
        return await self.fetcher.fetch(FetchMode.INITIAL)

    async def wait_idle(self) -> None:
        await self.fetcher.wait_idle()

    def view_model(self) -> ConsoleViewModel:
        query = self.query
        return ConsoleViewModel(
            section=self.state.section,
            columns=columns_for(self.state.section),
            rows=list(self.state.rows),
            search=query.search,
            sort=SortState(field=query.sort.field, direction=query.sort.direction),
            filters=dict(query.filters),
            page=query.pagination.page,
            limit=query.pagination.limit,
            total=query.pagination.total,
            total_pages=query.pagination.total_pages,
            page_loading=self.state.page_loading,
            inline_loading=self.state.inline_loading,
            error=self.state.last_error,
            modal_mode=self.state.modal_mode,
            media_open=self.state.media_open,
            selected_item=self.state.selected_item,
            preferences_mode=self.preferences.mode,
            notifications=self.notifications.items,
        )

    def close(self) -> None:
        self.fetcher.close()
        self.notifications.clear()
        self.state.clear()
