from __future__ import annotations

from typing import Any

from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.normalizers import Envelope, parse_envelope


class AccountsClient:
    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    async def list_accounts(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        role: str | None = None,
        sort_by: str | None = None,
        order: str | None = None,
        **filters: Any,
    ) -> Envelope:
        params = _build_query_params(
            page=page,
            limit=limit,
            search=search,
            role=role,
            sortBy=sort_by,
            order=order,
            **filters,
        )
        payload = await self.http_client.request("GET", "/users", params=params)
        return parse_envelope(payload, plural_key="users")

    async def create_account(self, account_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("POST", "/users", json_body=account_payload) or {}

    async def update_account(self, account_id: str, account_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("PUT", f"/users/{account_id}", json_body=account_payload) or {}

    async def change_role(self, account_id: str, role: str) -> dict[str, Any]:
        return await self.http_client.request("PUT", f"/users/{account_id}/role", json_body={"role": role}) or {}

    async def delete_account(self, account_id: str) -> None:
        await self.http_client.request("DELETE", f"/users/{account_id}")


def _build_query_params(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value not in (None, "")}
