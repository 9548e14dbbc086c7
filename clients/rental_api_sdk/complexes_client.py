from __future__ import annotations

from typing import Any

from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.models import FilePayload, UploadedFile, parse_uploaded_files
from clients.rental_api_sdk.normalizers import Envelope, parse_envelope


class ComplexesClient:
    """Residential complexes live under /buildings on the API."""

    def __init__(self, http_client: HttpClient) -> None:
        self.http_client = http_client

    async def list_complexes(self, **filters: Any) -> Envelope:
        params = {key: value for key, value in filters.items() if value not in (None, "")}
        payload = await self.http_client.request("GET", "/buildings", params=params or None)
        return parse_envelope(payload)

    async def list_operators(self) -> list[dict[str, Any]]:
        payload = await self.http_client.request("GET", "/buildings/operators")
        return parse_envelope(payload, plural_key="operators").items

    async def create_complex(self, complex_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("POST", "/buildings", json_body=complex_payload) or {}

    async def update_complex(self, complex_id: str, complex_payload: dict[str, Any]) -> dict[str, Any]:
        return await self.http_client.request("PATCH", f"/buildings/{complex_id}", json_body=complex_payload) or {}

    async def delete_complex(self, complex_id: str) -> None:
        await self.http_client.request("DELETE", f"/buildings/{complex_id}")

    async def upload_logo(self, file: FilePayload) -> list[UploadedFile]:
        return await self._upload("logo", [file])

    async def upload_video(self, file: FilePayload) -> list[UploadedFile]:
        return await self._upload("video", [file])

    async def upload_photos(self, files: list[FilePayload]) -> list[UploadedFile]:
        return await self._upload("photos", files)

    async def upload_documents(self, files: list[FilePayload]) -> list[UploadedFile]:
        return await self._upload("documents", files)

    async def _upload(self, slot: str, files: list[FilePayload]) -> list[UploadedFile]:
        parts = [item.as_part(slot) for item in files]
        payload = await self.http_client.request("POST", f"/buildings/upload/{slot}", files=parts)
        return parse_uploaded_files(payload)
