from __future__ import annotations

from typing import Any

from clients.rental_api_sdk.errors import NotFoundError
from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.models import PreferencesRecord


class PreferencesClient:
    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    async def get_preferences(self, account_id: str) -> PreferencesRecord | None:
        """Returns None when the account has no preferences yet."""
        try:
            payload = await self.http_client.request("GET", _path(account_id))
        except NotFoundError:
            return None
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict) or not payload:
            return None
        return PreferencesRecord.model_validate(payload)

    async def create_preferences(self, account_id: str, values: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("POST", _path(account_id), json_body=values) or {}

    async def update_preferences(self, account_id: str, values: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("PUT", _path(account_id), json_body=values) or {}

    async def delete_preferences(self, account_id: str) -> None:
        await self.http_client.request("DELETE", _path(account_id))


def _path(account_id: str) -> str:
    return f"/users/{account_id}/preferences"
