import asyncio

from clients.rental_api_sdk.errors import ApiError
from clients.rental_api_sdk.models import FilePayload, UploadedFile

from rental_console.app.upload_coordinator import (
    FileUploadCoordinator,
    MediaSlot,
    PendingUpload,
    UploadOutcome,
    UploadSummary,
    carry_uploads,
    merge_media,
)


class _StubUploader:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()
        self.calls: list[str] = []

    async def _result(self, slot: str, count: int) -> list[UploadedFile]:
        self.calls.append(slot)
        await asyncio.sleep(0)
        if slot in self.failing:
            raise ApiError(code="HTTP_ERROR", message="File too large", status_code=413)
        return [UploadedFile(url=f"https://cdn/{slot}-{index}") for index in range(count)]

    async def upload_logo(self, file: FilePayload) -> list[UploadedFile]:
        return await self._result("logo", 1)

    async def upload_video(self, file: FilePayload) -> list[UploadedFile]:
        return await self._result("video", 1)

    async def upload_photos(self, files: list[FilePayload]) -> list[UploadedFile]:
        return await self._result("photos", len(files))

    async def upload_documents(self, files: list[FilePayload]) -> list[UploadedFile]:
        return await self._result("documents", len(files))


class _ListingUploader:
    async def upload_photos(self, files: list[FilePayload]) -> list[UploadedFile]:
        return [UploadedFile(url="https://cdn/p")]


def _pending() -> PendingUpload:
    return PendingUpload(
        logo=FilePayload("logo.png", b"l"),
        video=FilePayload("tour.mp4", b"v"),
        photos=[FilePayload("one.jpg", b"1")],
        documents=[FilePayload("plan.pdf", b"d")],
    )


def test_one_failing_slot_does_not_cancel_the_others() -> None:
    uploader = _StubUploader(failing={"video"})
    pending = _pending()

    summary = asyncio.run(FileUploadCoordinator(uploader).upload_all(pending))

    assert summary.has_errors
    assert sorted(uploader.calls) == ["documents", "logo", "photos", "video"]
    assert sum(len(urls) for urls in summary.uploaded_urls.values()) == 3
    assert summary.errors == ["Video upload failed: File too large"]
    assert summary.aggregated_message() == "Some uploads failed: Video upload failed: File too large"
    assert pending.video is not None
    assert pending.logo is None
    assert pending.photos == []
    assert pending.staged_slots() == [MediaSlot.VIDEO]


def test_unsupported_slot_is_reported_not_raised() -> None:
    pending = PendingUpload(logo=FilePayload("logo.png", b"l"), photos=[FilePayload("a.jpg", b"a")])

    summary = asyncio.run(FileUploadCoordinator(_ListingUploader()).upload_all(pending))

    assert summary.uploaded_urls == {MediaSlot.PHOTOS: ["https://cdn/p"]}
    assert summary.errors == ["Logo upload failed: not supported"]


def test_merge_appends_photos_and_prefers_new_single_urls() -> None:
    summary = UploadSummary(
        outcomes=[
            UploadOutcome(slot=MediaSlot.PHOTOS, succeeded=True, urls=("https://cdn/new.jpg",)),
            UploadOutcome(slot=MediaSlot.LOGO, succeeded=True, urls=("https://cdn/logo2.png",)),
            UploadOutcome(slot=MediaSlot.VIDEO, succeeded=False, error_message="Video upload failed: x"),
        ]
    )
    values = {"photos": ["https://cdn/old.jpg"], "logo": "https://cdn/logo1.png", "video": "https://cdn/v1.mp4"}

    merged = merge_media(values, summary)

    assert merged["photos"] == ["https://cdn/old.jpg", "https://cdn/new.jpg"]
    assert merged["logo"] == "https://cdn/logo2.png"
    assert merged["video"] == "https://cdn/v1.mp4"


def test_merge_nulls_cleared_or_empty_fields() -> None:
    values = {"logo": "https://cdn/logo1.png", "documents": "", "photos": ["https://cdn/a.jpg"]}

    merged = merge_media(values, UploadSummary(), cleared=frozenset({MediaSlot.LOGO, MediaSlot.PHOTOS}))

    assert merged["logo"] is None
    assert merged["documents"] is None
    assert merged["photos"] == []
    assert "video" not in merged


class _BrokenVideoUploader(_StubUploader):
    async def upload_video(self, file: FilePayload) -> list[UploadedFile]:
        raise RuntimeError("connection reset by peer")


def test_unexpected_exception_is_recorded_as_that_slot_failing() -> None:
    pending = PendingUpload(video=FilePayload("tour.mp4", b"v"), photos=[FilePayload("one.jpg", b"1")])

    summary = asyncio.run(FileUploadCoordinator(_BrokenVideoUploader()).upload_all(pending))

    assert summary.uploaded_urls == {MediaSlot.PHOTOS: ["https://cdn/photos-0"]}
    assert summary.errors == ["Video upload failed: Request failed"]
    assert pending.video is not None
    assert pending.photos == []


def test_carry_uploads_appends_photos_and_replaces_single_slots() -> None:
    first = UploadSummary(
        outcomes=[
            UploadOutcome(slot=MediaSlot.PHOTOS, succeeded=True, urls=("https://cdn/a.jpg",)),
            UploadOutcome(slot=MediaSlot.LOGO, succeeded=True, urls=("https://cdn/logo-1.png",)),
        ]
    )
    second = UploadSummary(
        outcomes=[
            UploadOutcome(slot=MediaSlot.PHOTOS, succeeded=True, urls=("https://cdn/b.jpg",)),
            UploadOutcome(slot=MediaSlot.LOGO, succeeded=True, urls=("https://cdn/logo-2.png",)),
            UploadOutcome(slot=MediaSlot.VIDEO, succeeded=False, error_message="Video upload failed: boom"),
        ]
    )

    carried = carry_uploads(carry_uploads({}, first), second)

    assert carried == {
        MediaSlot.PHOTOS: ["https://cdn/a.jpg", "https://cdn/b.jpg"],
        MediaSlot.LOGO: ["https://cdn/logo-2.png"],
    }
    assert UploadSummary.from_urls(carried).uploaded_urls == carried
