from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.models import PreferencesRecord

from rental_console.app.infrastructure.errors.error_mapper import ErrorMapper
from rental_console.app.infrastructure.logging.logger import get_logger, log_action
from rental_console.app.notifications import NotificationQueue
from rental_console.app.ui.components.confirm_dialog import Confirmer, ask
from rental_console.app.ui.forms import validate_preferences_form

DELETE_PROMPT = "Delete the preferences of this account? This cannot be undone."


class PreferencesMode(str, Enum):
    NONE = "none"
    VIEW = "view"
    EDIT = "edit"


class PreferencesController:
    """Tenant preferences shown inside the account view modal."""

    def __init__(
        self,
        client: Any,
        notifications: NotificationQueue,
        confirm: Confirmer | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.client = client
        self.notifications = notifications
        self.confirm = confirm
        self._logger = logger or get_logger("rental_console.preferences")
        self.account_id: str | None = None
        self.record: PreferencesRecord | None = None
        self.mode = PreferencesMode.NONE
        self.loading = False
        self.last_error: str | None = None
        self._generation = 0

    async def load(self, account_id: str) -> PreferencesRecord | None:
        generation = self._begin(account_id)
        self.loading = True
        try:
            record = await self.client.get_preferences(account_id)
        except ApiError as error:
            if generation != self._generation:
                return None
            self.record = None
            self.last_error = ErrorMapper.to_display_message(error, fallback="Failed to load preferences")
            self.notifications.error(self.last_error)
            log_action(self._logger, "preferences", "load", "accounts", error.trace_id, "error")
        else:
            if generation != self._generation:
                log_action(self._logger, "preferences", "load", "accounts", None, "ignored")
                return None
            self.record = record
            self.last_error = None
        self.loading = False
        self.mode = PreferencesMode.VIEW if self.record is not None else PreferencesMode.NONE
        return self.record

    def start_edit(self) -> None:
        if self.account_id is None:
            return
        self.mode = PreferencesMode.EDIT

    def cancel_edit(self) -> None:
        self.mode = PreferencesMode.VIEW if self.record is not None else PreferencesMode.NONE

    async def save(self, values: dict[str, Any]) -> bool:
        account_id = self.account_id
        if account_id is None:
            return False
        form = validate_preferences_form(values)
        if not form.is_valid:
            self.notifications.error(form.summary())
            return False

        creating = self.record is None
        generation = self._generation
        try:
            if creating:
                await self.client.create_preferences(account_id, form.values)
            else:
                await self.client.update_preferences(account_id, form.values)
        except ApiError as error:
            if generation != self._generation:
                return False
            verb = "create" if creating else "update"
            self.notifications.error(ErrorMapper.to_display_message(error, fallback=f"Failed to {verb} preferences"))
            log_action(self._logger, "preferences", "save", "accounts", error.trace_id, "error")
            return False

        if generation != self._generation:
            return False
        self.notifications.success("Preferences created successfully" if creating else "Preferences updated successfully")
        log_action(self._logger, "preferences", "save", "accounts", None, "success")
        await self.load(account_id)
        return True

    async def delete(self) -> bool:
        account_id = self.account_id
        if account_id is None or self.record is None:
            return False
        generation = self._generation
        if not await ask(self.confirm, DELETE_PROMPT) or generation != self._generation:
            return False
        try:
            await self.client.delete_preferences(account_id)
        except ApiError as error:
            if generation != self._generation:
                return False
            self.notifications.error(ErrorMapper.to_display_message(error, fallback="Failed to delete preferences"))
            log_action(self._logger, "preferences", "delete", "accounts", error.trace_id, "error")
            return False

        if generation != self._generation:
            return False
        self.notifications.success("Preferences deleted successfully")
        log_action(self._logger, "preferences", "delete", "accounts", None, "success")
        await self.load(account_id)
        return True

    def reset(self) -> None:
        self._generation += 1
        self.account_id = None
        self.record = None
        self.mode = PreferencesMode.NONE
        self.loading = False
        self.last_error = None

    def _begin(self, account_id: str) -> int:
        """Starts a load; any result from an earlier load or a reset is dropped on arrival."""
        self._generation += 1
        self.account_id = account_id
        return self._generation
