from __future__ import annotations

from typing import Any

from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.models import FilePayload, UploadedFile, parse_uploaded_files
from clients.rental_api_sdk.normalizers import Envelope, parse_envelope


class ListingsClient:
    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    async def list_listings(
        self,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        order: str | None = None,
        **filters: Any,
    ) -> Envelope:
        params = _build_query_params(page=page, limit=limit, search=search, sortBy=sort_by, order=order, **filters)
        payload = await self.http_client.request("GET", "/properties", params=params)
        return parse_envelope(payload)

    async def create_listing(self, listing_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("POST", "/properties", json_body=listing_payload) or {}

    async def update_listing(self, listing_id: str, listing_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("PATCH", f"/properties/{listing_id}", json_body=listing_payload) or {}

    async def delete_listing(self, listing_id: str) -> None:
        await self.http_client.request("DELETE", f"/properties/{listing_id}")

    async def upload_photos(self, files: list[FilePayload]) -> list[UploadedFile]:
        parts = [item.as_part("photos") for item in files]
        return parse_uploaded_files(await self.http_client.request("POST", "/properties/upload/photos", files=parts))

    async def upload_video(self, file: FilePayload) -> list[UploadedFile]:
        payload = await self.http_client.request("POST", "/properties/upload/video", files=[file.as_part("video")])
        return parse_uploaded_files(payload)

    async def upload_documents(self, files: list[FilePayload]) -> list[UploadedFile]:
        parts = [item.as_part("documents") for item in files]
        return parse_uploaded_files(await self.http_client.request("POST", "/properties/upload/documents", files=parts))


def _build_query_params(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value not in (None, "")}
