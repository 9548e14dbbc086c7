from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from clients.rental_api_sdk.errors import ApiError, UnauthorizedError
from clients.rental_api_sdk.normalizers import (
    BareListEnvelope,
    NormalizedPage,
    normalize_bare_list,
    normalize_envelope,
)

from rental_console.app.infrastructure.errors.error_mapper import ErrorMapper
from rental_console.app.infrastructure.logging.logger import get_logger, log_action
from rental_console.app.notifications import NotificationQueue
from rental_console.app.query_state import QuerySnapshot, Section, SortState
from rental_console.app.state import ConsoleState
from rental_console.app.ui.debounce import Debouncer
from rental_console.app.ui.filters import build_list_params
from rental_console.app.ui.listing_view import SEARCH_FIELDS, filter_rows, sort_rows
from rental_console.app.ui.pagination import apply_totals, clamp_page

LOAD_FAILED_MESSAGE = "Failed to load data"


class FetchMode(str, Enum):
    INITIAL = "initial"
    REFINE = "refine"


@dataclass(frozen=True)
class FetchError:
    code: str
    message: str
    status_code: int | None = None


@dataclass(frozen=True)
class FetchResult:
    snapshot: QuerySnapshot | None
    page: NormalizedPage | None = None
    error: FetchError | None = None
    applied: bool = False

    @property
    def ok(self) -> bool:
        return self.page is not None and self.error is None


class ResourceFetchOrchestrator:
    """Issues list requests for the active section and reconciles their results.

    Each request is tagged with the query snapshot it was built from. A result is
    only applied when that snapshot still matches the live query and no newer
    request has already been applied.
    """

    def __init__(
        self,
        state: ConsoleState,
        accounts: Any,
        listings: Any,
        complexes: Any,
        notifications: NotificationQueue,
        debounce_ms: int = 150,
        on_unauthorized: Callable[[ApiError], None] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.state = state
        self.accounts = accounts
        self.listings = listings
        self.complexes = complexes
        self.notifications = notifications
        self.on_unauthorized = on_unauthorized
        self._logger = logger or get_logger("rental_console.fetch")
        self._sequence = itertools.count(1)
        self._latest_issued: dict[FetchMode, int] = {}
        self._latest_applied = 0
        self._alive = True
        self._debouncer: Debouncer[QuerySnapshot] = Debouncer(debounce_ms, self._on_debounced)
        self.last_result: FetchResult | None = None

    @property
    def alive(self) -> bool:
        return self._alive

    async def activate(self, section: Section) -> FetchResult:
        self._debouncer.cancel()
        self.state.activate(section)
        return await self.fetch(FetchMode.INITIAL)

    def schedule_refine(self) -> None:
        if not self._alive:
            return
        self._debouncer.push(self.state.query().snapshot(self.state.section))

    async def refresh_silently(self) -> FetchResult:
        self._debouncer.cancel()
        return await self.fetch(FetchMode.REFINE)

    async def wait_idle(self) -> None:
        await self._debouncer.join()

    def close(self) -> None:
        self._alive = False
        self._debouncer.cancel()

    async def fetch(self, mode: FetchMode = FetchMode.REFINE) -> FetchResult:
        if not self._alive:
            return FetchResult(snapshot=None)

        section = self.state.section
        snapshot = self.state.query(section).snapshot(section)
        sequence = next(self._sequence)
        self._latest_issued[mode] = sequence
        self._set_loading(mode, True)

        try:
            page = await self._load(snapshot)
        except ApiError as error:
            return self._apply_failure(mode, snapshot, sequence, error)
        finally:
            if sequence == self._latest_issued.get(mode):
                self._set_loading(mode, False)

        if not self._is_current(snapshot, sequence):
            log_action(self._logger, "fetch", "list", section.value, None, "ignored", page=snapshot.page)
            return FetchResult(snapshot=snapshot, page=page, applied=False)

        self._latest_applied = sequence
        query = self.state.query(section)
        apply_totals(query.pagination, page.total)
        self.state.rows = list(page.items)
        self.state.last_error = None
        log_action(self._logger, "fetch", "list", section.value, None, "success", page=snapshot.page, total=page.total)

        if clamp_page(query.pagination):
            return await self.fetch(FetchMode.REFINE)

        result = FetchResult(snapshot=snapshot, page=page, applied=True)
        self.last_result = result
        return result

    async def _load(self, snapshot: QuerySnapshot) -> NormalizedPage:
        params = build_list_params(snapshot)
        section = snapshot.section
        if section == Section.ACCOUNTS:
            envelope = await self.accounts.list_accounts(**params)
        elif section == Section.OPERATOR_ACCOUNTS:
            envelope = await self.accounts.list_accounts(**{**params, "role": "operator"})
        elif section == Section.LISTINGS:
            envelope = await self.listings.list_listings(**params)
        elif section == Section.LINKED_LISTINGS:
            return await self._load_linked_listings(snapshot)
        else:
            envelope = await self.complexes.list_complexes(**dict(snapshot.filters))

        if isinstance(envelope, BareListEnvelope):
            return self._window_locally(list(envelope.items), snapshot)
        return normalize_envelope(envelope, page=snapshot.page, limit=snapshot.limit)

    async def _load_linked_listings(self, snapshot: QuerySnapshot) -> NormalizedPage:
        """Listings attached to a complex, joined with complex and operator names.

        Unlinked rows only disappear after the whole collection is fetched, so
        search, sort and the page window run locally on the linked rows.
        """
        listings_envelope, complexes_envelope, operators = await asyncio.gather(
            self.listings.list_listings(**dict(snapshot.filters)),
            self.complexes.list_complexes(),
            self.complexes.list_operators(),
        )
        complexes_by_id = {str(row.get("id")): row for row in complexes_envelope.items}
        operator_names = {str(row.get("id")): row.get("full_name") or row.get("email") for row in operators}

        linked: list[dict[str, Any]] = []
        for row in listings_envelope.items:
            complex_id = row.get("building_id")
            if not complex_id:
                continue
            complex_row = complexes_by_id.get(str(complex_id), {})
            operator_id = row.get("operator_id") or complex_row.get("operator_id")
            linked.append(
                {
                    **row,
                    "complex_name": complex_row.get("name"),
                    "operator_name": operator_names.get(str(operator_id)) if operator_id else None,
                }
            )
        return self._window_locally(linked, snapshot)

    @staticmethod
    def _window_locally(rows: list[dict[str, Any]], snapshot: QuerySnapshot) -> NormalizedPage:
        rows = filter_rows(rows, snapshot.search, SEARCH_FIELDS[snapshot.section])
        rows = sort_rows(rows, SortState(field=snapshot.sort_field, direction=snapshot.sort_direction))
        return normalize_bare_list(BareListEnvelope(items=rows), snapshot.page, snapshot.limit)

    def _apply_failure(self, mode: FetchMode, snapshot: QuerySnapshot, sequence: int, error: ApiError) -> FetchResult:
        failure = FetchError(
            code=error.code,
            message=ErrorMapper.to_display_message(error, fallback=LOAD_FAILED_MESSAGE),
            status_code=error.status_code,
        )
        result = FetchResult(snapshot=snapshot, error=failure)
        if not self._is_current(snapshot, sequence):
            log_action(self._logger, "fetch", "list", snapshot.section.value, error.trace_id, "ignored")
            return result

        log_action(self._logger, "fetch", "list", snapshot.section.value, error.trace_id, "error", code=error.code)
        if isinstance(error, UnauthorizedError):
            if self.on_unauthorized:
                self.on_unauthorized(error)
            return result

        self.state.last_error = failure.message
        if mode == FetchMode.INITIAL:
            self.notifications.error(failure.message)
        self.last_result = result
        return result

    def _is_current(self, snapshot: QuerySnapshot, sequence: int) -> bool:
        if not self._alive or sequence <= self._latest_applied:
            return False
        section = self.state.section
        return snapshot == self.state.query(section).snapshot(section)

    def _set_loading(self, mode: FetchMode, value: bool) -> None:
        if mode == FetchMode.INITIAL:
            self.state.page_loading = value
        else:
            self.state.inline_loading = value

    def _on_debounced(self, snapshot: QuerySnapshot) -> Any:
        if not self._alive:
            return None
        return self.fetch(FetchMode.REFINE)
