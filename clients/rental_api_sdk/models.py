from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, ConfigDict


class UploadedFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    url: str
    key: str | None = None


class PreferencesRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    user_id: str | None = None
    preferred_address: str | None = None
    preferred_areas: list[str] | None = None
    preferred_districts: list[str] | None = None
    preferred_metro_stations: list[str] | None = None
    move_in_date: date | None = None
    move_out_date: date | None = None
    min_price: int | None = None
    max_price: int | None = None


@dataclass(frozen=True)
class FilePayload:
    """A staged file ready to be sent as one multipart part."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    def as_part(self, field_name: str) -> tuple[str, tuple[str, bytes, str]]:
        return (field_name, (self.filename, self.content, self.content_type))


def parse_uploaded_files(payload: object) -> list[UploadedFile]:
    """Accepts `{url, key}`, `[{url, key}, ...]` or `{data: [...]}`."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), (list, dict)):
        payload = payload["data"]
    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        return []
    return [UploadedFile.model_validate(item) for item in payload if isinstance(item, dict) and item.get("url")]
