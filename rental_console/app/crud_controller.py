from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from clients.rental_api_sdk.errors import ApiError, UnauthorizedError

from rental_console.app.fetch_orchestrator import ResourceFetchOrchestrator
from rental_console.app.infrastructure.errors.error_mapper import ErrorMapper
from rental_console.app.infrastructure.logging.logger import get_logger, log_action
from rental_console.app.notifications import NotificationQueue
from rental_console.app.preferences_controller import PreferencesController
from rental_console.app.query_state import Section
from rental_console.app.state import ConsoleState, ModalMode
from rental_console.app.ui.components.confirm_dialog import Confirmer, ask
from rental_console.app.ui.forms import map_api_validation_errors, validate_section_form
from rental_console.app.ui.pagination import apply_totals
from rental_console.app.upload_coordinator import (
    PARTIAL_UPLOAD_PROMPT,
    FileUploadCoordinator,
    MediaSlot,
    PendingUpload,
    UploadSummary,
    carry_uploads,
    merge_media,
)

ACCOUNT_SECTIONS = (Section.ACCOUNTS, Section.OPERATOR_ACCOUNTS)
LISTING_SECTIONS = (Section.LISTINGS, Section.LINKED_LISTINGS)
MEDIA_SECTIONS = (Section.LISTINGS, Section.LINKED_LISTINGS, Section.COMPLEXES)
MEDIA_FIELDS = tuple(slot.value for slot in MediaSlot)
READ_ONLY_FIELDS = {"id", "created_at", "updated_at", "complex_name", "operator_name"}

NOUNS = {
    Section.ACCOUNTS: "User",
    Section.OPERATOR_ACCOUNTS: "Operator",
    Section.LISTINGS: "Listing",
    Section.LINKED_LISTINGS: "Listing",
    Section.COMPLEXES: "Complex",
}

ROLE_CHANGE_CONSEQUENCES = {
    ("tenant", "operator"): "The tenant profile and saved preferences will be removed and an operator profile will be created.",
    ("operator", "tenant"): "The operator profile will be removed and a tenant profile will be created.",
}


@dataclass(frozen=True)
class MutationResult:
    ok: bool
    message: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)
    cancelled: bool = False
    record: dict[str, Any] | None = None
    focus_field: str | None = None


def describe_role_change(previous: str, new: str) -> str:
    consequence = ROLE_CHANGE_CONSEQUENCES.get(
        (previous, new),
        "Permissions attached to the previous role will no longer apply.",
    )
    return f"Change role from {previous} to {new}? {consequence}"


def record_label(section: Section, item: dict[str, Any]) -> str:
    if section in ACCOUNT_SECTIONS:
        keys = ("full_name", "email")
    elif section in LISTING_SECTIONS:
        keys = ("title", "apartment_number")
    else:
        keys = ("name",)
    for key in keys:
        if item.get(key):
            return str(item[key])
    return str(item.get("id") or NOUNS[section])


class CrudModalController:
    """Modal lifecycle for view/edit/add/delete plus the media modal.

    Mutations close the modal and refresh the list silently on success; on
    failure the modal stays open with the server's message.
    """

    def __init__(
        self,
        state: ConsoleState,
        fetcher: ResourceFetchOrchestrator,
        notifications: NotificationQueue,
        accounts: Any,
        listings: Any,
        complexes: Any,
        preferences: PreferencesController | None = None,
        confirm: Confirmer | None = None,
        refresh_strategy: str = "refetch",
        logger: logging.Logger | None = None,
    ) -> None:
        self.state = state
        self.fetcher = fetcher
        self.notifications = notifications
        self.accounts = accounts
        self.listings = listings
        self.complexes = complexes
        self.preferences = preferences
        self.confirm = confirm
        self.refresh_strategy = refresh_strategy
        self._logger = logger or get_logger("rental_console.crud")
        self._carried_uploads: dict[MediaSlot, list[str]] = {}

    @property
    def section(self) -> Section:
        return self.state.section

    async def open_view(self, item: dict[str, Any]) -> None:
        self._open(ModalMode.VIEW, item)
        if (
            self.preferences is not None
            and self.section == Section.ACCOUNTS
            and str(item.get("role") or "").lower() == "tenant"
            and item.get("id")
        ):
            await self.preferences.load(str(item["id"]))

    def open_edit(self, item: dict[str, Any]) -> None:
        self._open(ModalMode.EDIT, item)

    def open_add(self) -> None:
        self._open(ModalMode.ADD, None)

    def open_delete(self, item: dict[str, Any]) -> None:
        self._open(ModalMode.DELETE, item)

    def close(self) -> None:
        self.state.modal_mode = ModalMode.NONE
        self.state.selected_item = None
        self._carried_uploads = {}
        if self.preferences is not None:
            self.preferences.reset()

    def open_media(self, item: dict[str, Any]) -> bool:
        if self.section not in MEDIA_SECTIONS:
            return False
        self._carried_uploads = {}
        self.state.selected_item = item
        self.state.media_open = True
        return True

    def close_media(self) -> None:
        self.state.media_open = False
        self._carried_uploads = {}
        if self.state.modal_mode == ModalMode.NONE:
            self.state.selected_item = None

    async def submit(
        self,
        values: dict[str, Any],
        pending: PendingUpload | None = None,
        cleared: frozenset[MediaSlot] = frozenset(),
    ) -> MutationResult:
        mode = self.state.modal_mode
        if mode not in (ModalMode.ADD, ModalMode.EDIT):
            return MutationResult(ok=False, message="No form is open.")
        creating = mode == ModalMode.ADD
        section = self.section
        selected = self.state.selected_item or {}

        form = validate_section_form(section, values, creating=creating)
        if not form.is_valid:
            message = form.summary()
            self.notifications.error(message)
            return MutationResult(
                ok=False,
                message=message,
                field_errors=form.field_errors,
                focus_field=form.first_invalid_field,
            )
        payload = {key: value for key, value in form.values.items() if key not in READ_ONLY_FIELDS}

        role_change: str | None = None
        if not creating and section in ACCOUNT_SECTIONS:
            previous_role = str(selected.get("role") or "").lower()
            if previous_role and payload.get("role") != previous_role:
                if not await ask(self.confirm, describe_role_change(previous_role, payload["role"])):
                    log_action(self._logger, "crud", "change_role", section.value, None, "cancelled")
                    return MutationResult(ok=False, cancelled=True)
                role_change = payload["role"]

        if section in MEDIA_SECTIONS and (pending is not None or cleared or self._carried_uploads):
            summary = await self._upload(pending)
            if summary is None:
                return MutationResult(ok=False, cancelled=True)
            payload = merge_media({**_media_of(selected), **payload}, summary, cleared)

        self.state.action_in_progress = True
        try:
            record = await self._send(section, creating, selected, payload, role_change)
        except ApiError as error:
            return self._report_failure(error, "create" if creating else "update", section)
        finally:
            self.state.action_in_progress = False

        verb = "created" if creating else "updated"
        message = f'{NOUNS[section]} "{record_label(section, {**selected, **payload})}" {verb} successfully!'
        self.notifications.success(message)
        log_action(self._logger, "crud", "create" if creating else "update", section.value, None, "success")
        record_id = selected.get("id")
        self.close()
        await self._refresh(creating, record_id, {**payload, **record} if record else payload)
        return MutationResult(ok=True, message=message, record=record or None)

    async def confirm_delete(self) -> MutationResult:
        item = self.state.selected_item
        if self.state.modal_mode != ModalMode.DELETE or not item:
            return MutationResult(ok=False, message="Nothing selected to delete.")
        section = self.section
        record_id = str(item.get("id"))

        self.state.action_in_progress = True
        try:
            if section in ACCOUNT_SECTIONS:
                await self.accounts.delete_account(record_id)
            elif section in LISTING_SECTIONS:
                await self.listings.delete_listing(record_id)
            else:
                await self.complexes.delete_complex(record_id)
        except ApiError as error:
            return self._report_failure(error, "delete", section)
        finally:
            self.state.action_in_progress = False

        message = f'{NOUNS[section]} "{record_label(section, item)}" deleted successfully'
        self.notifications.success(message)
        log_action(self._logger, "crud", "delete", section.value, None, "success")
        self.close()
        if self.refresh_strategy == "optimistic":
            self._remove_local(record_id)
        else:
            await self.fetcher.refresh_silently()
        return MutationResult(ok=True, message=message)

    async def submit_media(
        self,
        pending: PendingUpload,
        cleared: frozenset[MediaSlot] = frozenset(),
    ) -> MutationResult:
        item = self.state.selected_item
        if not self.state.media_open or not item:
            return MutationResult(ok=False, message="Media manager is not open.")
        section = self.section

        summary = await self._upload(pending)
        if summary is None:
            return MutationResult(ok=False, cancelled=True)
        merged = merge_media(_media_of(item), summary, cleared)
        payload = {key: merged[key] for key in MEDIA_FIELDS if key in merged}

        try:
            if section in LISTING_SECTIONS:
                record = await self.listings.update_listing(str(item["id"]), payload)
            else:
                record = await self.complexes.update_complex(str(item["id"]), payload)
        except ApiError as error:
            return self._report_failure(error, "update", section, noun="media")

        message = "Media updated successfully!"
        self.notifications.success(message)
        log_action(self._logger, "crud", "update_media", section.value, None, "success")
        self.close_media()
        await self._refresh(False, item.get("id"), {**payload, **record} if record else payload)
        return MutationResult(ok=True, message=message, record=record or None)

    def _open(self, mode: ModalMode, item: dict[str, Any] | None) -> None:
        self.state.modal_mode = mode
        self.state.selected_item = item
        self._carried_uploads = {}

    async def _upload(self, pending: PendingUpload | None) -> UploadSummary | None:
        """Runs the upload fan-in and returns every URL uploaded in this modal session.

        Successful slots are unstaged by the coordinator, so their URLs are kept
        here until the save commits or the modal closes. Returns None when the
        user declines a partial result.
        """
        if pending is not None and not pending.is_empty:
            uploader = self.listings if self.section in LISTING_SECTIONS else self.complexes
            summary = await FileUploadCoordinator(uploader).upload_all(pending)
            self._carried_uploads = carry_uploads(self._carried_uploads, summary)
            if summary.has_errors:
                self.notifications.error(summary.aggregated_message())
                if not await ask(self.confirm, PARTIAL_UPLOAD_PROMPT):
                    log_action(self._logger, "crud", "upload", self.section.value, None, "cancelled")
                    return None
        return UploadSummary.from_urls(self._carried_uploads)

    async def _send(
        self,
        section: Section,
        creating: bool,
        selected: dict[str, Any],
        payload: dict[str, Any],
        role_change: str | None,
    ) -> dict[str, Any]:
        record_id = str(selected.get("id"))
        if section in ACCOUNT_SECTIONS:
            if creating:
                return await self.accounts.create_account(payload)
            if role_change is not None:
                fields = {key: value for key, value in payload.items() if key != "role"}
                record = await self.accounts.update_account(record_id, fields)
                await self.accounts.change_role(record_id, role_change)
                return {**record, "role": role_change}
            return await self.accounts.update_account(record_id, payload)
        if section in LISTING_SECTIONS:
            if creating:
                return await self.listings.create_listing(payload)
            return await self.listings.update_listing(record_id, payload)
        if creating:
            return await self.complexes.create_complex(payload)
        return await self.complexes.update_complex(record_id, payload)

    async def _refresh(self, creating: bool, record_id: Any, patch: dict[str, Any]) -> None:
        if self.refresh_strategy == "optimistic" and not creating and record_id is not None:
            self._patch_local(record_id, patch)
            return
        await self.fetcher.refresh_silently()

    def _patch_local(self, record_id: Any, patch: dict[str, Any]) -> None:
        clean = {key: value for key, value in patch.items() if key != "password"}
        self.state.rows = [
            {**row, **clean} if str(row.get("id")) == str(record_id) else row for row in self.state.rows
        ]

    def _remove_local(self, record_id: str) -> None:
        before = len(self.state.rows)
        self.state.rows = [row for row in self.state.rows if str(row.get("id")) != record_id]
        if len(self.state.rows) < before:
            pagination = self.state.query().pagination
            apply_totals(pagination, pagination.total - 1)

    def _report_failure(self, error: ApiError, verb: str, section: Section, noun: str | None = None) -> MutationResult:
        if isinstance(error, UnauthorizedError) and self.fetcher.on_unauthorized:
            self.fetcher.on_unauthorized(error)
        target = noun or NOUNS[section].lower()
        message = ErrorMapper.to_display_message(error, fallback=f"Failed to {verb} {target}")
        self.notifications.error(message)
        log_action(self._logger, "crud", verb, section.value, error.trace_id, "error", code=error.code)
        field_errors = map_api_validation_errors(error.details)
        return MutationResult(
            ok=False,
            message=message,
            field_errors=field_errors,
            focus_field=next(iter(field_errors), None),
        )


def _media_of(item: dict[str, Any]) -> dict[str, Any]:
    return {key: item[key] for key in MEDIA_FIELDS if key in item}
