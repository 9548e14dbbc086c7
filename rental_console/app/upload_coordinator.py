from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.models import FilePayload, UploadedFile

from rental_console.app.infrastructure.errors.error_mapper import ErrorMapper
from rental_console.app.infrastructure.logging.logger import get_logger, log_action

PARTIAL_UPLOAD_PROMPT = (
    "Some file uploads failed. Do you want to continue saving with the successfully uploaded files?"
)


class MediaSlot(str, Enum):
    LOGO = "logo"
    VIDEO = "video"
    PHOTOS = "photos"
    DOCUMENTS = "documents"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass
class PendingUpload:
    logo: FilePayload | None = None
    video: FilePayload | None = None
    photos: list[FilePayload] = field(default_factory=list)
    documents: list[FilePayload] = field(default_factory=list)

    def staged_slots(self) -> list[MediaSlot]:
        return [slot for slot in MediaSlot if self.files(slot)]

    def files(self, slot: MediaSlot) -> list[FilePayload]:
        value = getattr(self, slot.value)
        if value is None:
            return []
        return list(value) if isinstance(value, list) else [value]

    def clear(self, slot: MediaSlot) -> None:
        setattr(self, slot.value, [] if slot in (MediaSlot.PHOTOS, MediaSlot.DOCUMENTS) else None)

    @property
    def is_empty(self) -> bool:
        return not self.staged_slots()


@dataclass(frozen=True)
class UploadOutcome:
    slot: MediaSlot
    succeeded: bool
    urls: tuple[str, ...] = ()
    error_message: str | None = None


@dataclass
class UploadSummary:
    outcomes: list[UploadOutcome] = field(default_factory=list)

    @property
    def uploaded_urls(self) -> dict[MediaSlot, list[str]]:
        return {outcome.slot: list(outcome.urls) for outcome in self.outcomes if outcome.succeeded}

    @property
    def errors(self) -> list[str]:
        return [outcome.error_message for outcome in self.outcomes if not outcome.succeeded and outcome.error_message]

    @property
    def has_errors(self) -> bool:
        return any(not outcome.succeeded for outcome in self.outcomes)

    def aggregated_message(self) -> str:
        return "Some uploads failed: " + "; ".join(self.errors)

    @classmethod
    def from_urls(cls, urls: dict[MediaSlot, list[str]]) -> "UploadSummary":
        return cls(outcomes=[UploadOutcome(slot=slot, succeeded=True, urls=tuple(items)) for slot, items in urls.items()])


class FileUploadCoordinator:
    """Uploads every staged media slot concurrently.

    A failing slot never cancels its siblings: each one is awaited and caught on
    its own, and the summary reports both sides.
    """

    def __init__(self, uploader: Any, logger: logging.Logger | None = None) -> None:
        self.uploader = uploader
        self._logger = logger or get_logger("rental_console.uploads")

    def supports(self, slot: MediaSlot) -> bool:
        return callable(getattr(self.uploader, f"upload_{slot.value}", None))

    async def upload_all(self, pending: PendingUpload) -> UploadSummary:
        slots = pending.staged_slots()
        outcomes = await asyncio.gather(*(self._upload_slot(pending, slot) for slot in slots))
        for outcome in outcomes:
            if outcome.succeeded:
                pending.clear(outcome.slot)
        return UploadSummary(outcomes=list(outcomes))

    async def _upload_slot(self, pending: PendingUpload, slot: MediaSlot) -> UploadOutcome:
        if not self.supports(slot):
            return UploadOutcome(slot=slot, succeeded=False, error_message=f"{slot.label} upload failed: not supported")

        files = pending.files(slot)
        upload = getattr(self.uploader, f"upload_{slot.value}")
        try:
            if slot in (MediaSlot.LOGO, MediaSlot.VIDEO):
                uploaded: list[UploadedFile] = await upload(files[0])
            else:
                uploaded = await upload(files)
        except ApiError as error:
            message = ErrorMapper.to_display_message(error, fallback="Request failed")
            log_action(self._logger, "uploads", f"upload_{slot.value}", None, error.trace_id, "error")
            return UploadOutcome(slot=slot, succeeded=False, error_message=f"{slot.label} upload failed: {message}")
        except ValueError:
            log_action(self._logger, "uploads", f"upload_{slot.value}", None, None, "error")
            return UploadOutcome(slot=slot, succeeded=False, error_message=f"{slot.label} upload failed: invalid response")
        except Exception as error:
            log_action(self._logger, "uploads", f"upload_{slot.value}", None, None, "error", error=type(error).__name__)
            message = ErrorMapper.to_display_message(error, fallback="Request failed")
            return UploadOutcome(slot=slot, succeeded=False, error_message=f"{slot.label} upload failed: {message}")

        urls = tuple(item.url for item in uploaded)
        if not urls:
            return UploadOutcome(slot=slot, succeeded=False, error_message=f"{slot.label} upload failed: no URL returned")
        log_action(self._logger, "uploads", f"upload_{slot.value}", None, None, "success", files=len(files))
        return UploadOutcome(slot=slot, succeeded=True, urls=urls)


def merge_media(
    values: dict[str, Any],
    summary: UploadSummary,
    cleared: set[MediaSlot] | frozenset[MediaSlot] = frozenset(),
) -> dict[str, Any]:
    """Folds uploaded URLs into the record payload.

    Photos accumulate onto the existing list. Logo, video and documents take the
    new URL, else keep a non-empty previous value unless the user cleared it.
    """
    merged = dict(values)
    uploaded = summary.uploaded_urls

    existing_photos = [url for url in merged.get("photos") or [] if url]
    if MediaSlot.PHOTOS in cleared:
        existing_photos = []
    if MediaSlot.PHOTOS in uploaded or "photos" in merged or MediaSlot.PHOTOS in cleared:
        merged["photos"] = existing_photos + uploaded.get(MediaSlot.PHOTOS, [])

    for slot in (MediaSlot.LOGO, MediaSlot.VIDEO, MediaSlot.DOCUMENTS):
        new_urls = uploaded.get(slot)
        if new_urls:
            merged[slot.value] = new_urls[0]
            continue
        previous = merged.get(slot.value)
        if slot in cleared or not previous:
            if slot.value in merged or slot in cleared:
                merged[slot.value] = None
            continue
        merged[slot.value] = previous
    return merged


def carry_uploads(carried: dict[MediaSlot, list[str]], summary: UploadSummary) -> dict[MediaSlot, list[str]]:
    """Accumulates successful URLs across attempts: photos append, single slots take the latest."""
    merged = {slot: list(urls) for slot, urls in carried.items()}
    for slot, urls in summary.uploaded_urls.items():
        if slot == MediaSlot.PHOTOS:
            merged[slot] = merged.get(slot, []) + urls
        else:
            merged[slot] = urls
    return merged
