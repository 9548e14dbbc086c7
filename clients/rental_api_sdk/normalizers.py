from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class DataEnvelope:
    """`{data: [...], total, page, totalPages}` as returned by /properties."""

    items: list[dict[str, Any]]
    total: int | None = None
    page: int | None = None


@dataclass(frozen=True)
class PluralEnvelope:
    """`{<plural>: [...], total, page}` as returned by /users."""

    key: str
    items: list[dict[str, Any]]
    total: int | None = None
    page: int | None = None


@dataclass(frozen=True)
class BareListEnvelope:
    """A bare JSON array holding the whole collection, as returned by /buildings."""

    items: list[dict[str, Any]] = field(default_factory=list)


Envelope = Union[DataEnvelope, PluralEnvelope, BareListEnvelope]


@dataclass(frozen=True)
class NormalizedPage:
    items: list[dict[str, Any]]
    total: int
    total_pages: int


def compute_total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / max(1, limit))


def parse_envelope(payload: Any, plural_key: str | None = None) -> Envelope:
    if isinstance(payload, list):
        return BareListEnvelope(items=_rows(payload))
    if not isinstance(payload, dict):
        return BareListEnvelope(items=[])

    if isinstance(payload.get("data"), list):
        return DataEnvelope(
            items=_rows(payload["data"]),
            total=_to_int(payload.get("total")),
            page=_to_int(payload.get("page")),
        )

    keys = [plural_key] if plural_key else []
    keys.extend(key for key, value in payload.items() if isinstance(value, list) and key not in keys)
    for key in keys:
        if isinstance(payload.get(key), list):
            return PluralEnvelope(
                key=key,
                items=_rows(payload[key]),
                total=_to_int(payload.get("total")),
                page=_to_int(payload.get("page")),
            )
    return BareListEnvelope(items=[])


def normalize_data_envelope(envelope: DataEnvelope, limit: int) -> NormalizedPage:
    total = envelope.total if envelope.total is not None else len(envelope.items)
    return NormalizedPage(items=list(envelope.items), total=total, total_pages=compute_total_pages(total, limit))


def normalize_plural_envelope(envelope: PluralEnvelope, limit: int) -> NormalizedPage:
    total = envelope.total if envelope.total is not None else len(envelope.items)
    return NormalizedPage(items=list(envelope.items), total=total, total_pages=compute_total_pages(total, limit))


def normalize_bare_list(envelope: BareListEnvelope, page: int, limit: int) -> NormalizedPage:
    safe_limit = max(1, limit)
    start = (max(1, page) - 1) * safe_limit
    total = len(envelope.items)
    return NormalizedPage(
        items=list(envelope.items[start : start + safe_limit]),
        total=total,
        total_pages=compute_total_pages(total, safe_limit),
    )


def normalize_envelope(envelope: Envelope, *, page: int = 1, limit: int = 10) -> NormalizedPage:
    if isinstance(envelope, DataEnvelope):
        return normalize_data_envelope(envelope, limit)
    if isinstance(envelope, PluralEnvelope):
        return normalize_plural_envelope(envelope, limit)
    return normalize_bare_list(envelope, page, limit)


def _rows(values: list[Any]) -> list[dict[str, Any]]:
    return [value for value in values if isinstance(value, dict)]


def _to_int(value: Any) -> int | None:
    try:
        if value is None or value == "":
            return None
        return int(value)
    except (TypeError, ValueError):
        return None
