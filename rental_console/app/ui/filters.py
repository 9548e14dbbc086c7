from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from rental_console.app.query_state import QuerySnapshot


def clean_filters(filters: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in filters.items() if value not in (None, "")}


def parse_filter_args(values: list[str] | None) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw in values or []:
        if "=" not in raw:
            raise ValueError(f"Filter must look like key=value, got {raw!r}")
        key, value = raw.split("=", 1)
        parsed[key.strip()] = value.strip()
    return clean_filters(parsed)


def build_list_params(snapshot: "QuerySnapshot") -> dict[str, Any]:
    params: dict[str, Any] = {
        "page": snapshot.page,
        "limit": snapshot.limit,
        "sort_by": snapshot.sort_field,
        "order": snapshot.sort_direction.value.upper(),
    }
    if snapshot.search:
        params["search"] = snapshot.search
    params.update(dict(snapshot.filters))
    return params
