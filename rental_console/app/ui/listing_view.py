from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from rental_console.app.query_state import Section, SortDirection, SortState

EMPTY_VALUE = "—"
SENSITIVE_KEYS = {"token", "refresh_token", "secret", "password", "access_token"}


@dataclass(frozen=True)
class ColumnDef:
    key: str
    label: str
    sortable: bool = True


SECTION_COLUMNS: dict[Section, list[ColumnDef]] = {
    Section.ACCOUNTS: [
        ColumnDef("full_name", "Name"),
        ColumnDef("email", "Email"),
        ColumnDef("role", "Role"),
        ColumnDef("created_at", "Created"),
    ],
    Section.LISTINGS: [
        ColumnDef("title", "Title"),
        ColumnDef("price", "Price"),
        ColumnDef("property_type", "Type"),
        ColumnDef("status", "Status"),
        ColumnDef("created_at", "Created"),
    ],
    Section.LINKED_LISTINGS: [
        ColumnDef("title", "Title"),
        ColumnDef("complex_name", "Complex", sortable=False),
        ColumnDef("operator_name", "Operator", sortable=False),
        ColumnDef("price", "Price"),
        ColumnDef("created_at", "Created"),
    ],
    Section.OPERATOR_ACCOUNTS: [
        ColumnDef("full_name", "Name"),
        ColumnDef("email", "Email"),
        ColumnDef("created_at", "Created"),
    ],
    Section.COMPLEXES: [
        ColumnDef("name", "Name"),
        ColumnDef("address", "Address"),
        ColumnDef("number_of_units", "Units"),
        ColumnDef("created_at", "Created"),
    ],
}

# Fields a bare-array collection is searched on when the server does not filter it.
SEARCH_FIELDS: dict[Section, tuple[str, ...]] = {
    Section.ACCOUNTS: ("full_name", "email"),
    Section.LISTINGS: ("title", "address"),
    Section.LINKED_LISTINGS: ("title", "complex_name", "operator_name"),
    Section.OPERATOR_ACCOUNTS: ("full_name", "email"),
    Section.COMPLEXES: ("name", "address", "area"),
}


def columns_for(section: Section) -> list[ColumnDef]:
    return SECTION_COLUMNS[section]


def sort_rows(rows: list[dict[str, Any]], sort: SortState) -> list[dict[str, Any]]:
    """Numbers before text; rows without a value stay at the end in either direction."""
    if not sort.field:
        return list(rows)

    def _sort_key(row: dict[str, Any]) -> tuple[int, float, str]:
        raw = row.get(sort.field)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return (0, float(raw), "")
        return (1, 0.0, normalize_value(raw).lower())

    present = [row for row in rows if normalize_value(row.get(sort.field)) != EMPTY_VALUE]
    missing = [row for row in rows if normalize_value(row.get(sort.field)) == EMPTY_VALUE]
    return sorted(present, key=_sort_key, reverse=sort.direction == SortDirection.DESC) + missing


def filter_rows(rows: list[dict[str, Any]], search: str, fields: tuple[str, ...]) -> list[dict[str, Any]]:
    term = search.strip().lower()
    if not term:
        return list(rows)
    return [row for row in rows if any(term in str(row.get(key) or "").lower() for key in fields)]


def normalize_value(value: Any) -> str:
    if value is None:
        return EMPTY_VALUE
    if isinstance(value, str):
        clean = value.strip()
        return clean or EMPTY_VALUE
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, datetime):
        return value.astimezone().strftime("%Y-%m-%d %H:%M:%S %z")
    if isinstance(value, (list, tuple)):
        return ", ".join(normalize_value(item) for item in value) or EMPTY_VALUE
    return str(value)


def sanitize_row(row: dict[str, Any], headers: list[str]) -> dict[str, str]:
    sanitized: dict[str, str] = {}
    for header in headers:
        if any(token in header.lower() for token in SENSITIVE_KEYS):
            sanitized[header] = EMPTY_VALUE
            continue
        sanitized[header] = normalize_value(row.get(header))
    return sanitized
