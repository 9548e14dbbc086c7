from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from rental_console.app.query_state import Section

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
ACCOUNT_ROLES = ("tenant", "operator", "admin")
LABELLED_LIST_FIELDS = ("metro_stations", "commute_times", "local_essentials")


@dataclass
class FormResult:
    values: dict[str, Any]
    field_errors: dict[str, str]

    @property
    def first_invalid_field(self) -> str | None:
        return next(iter(self.field_errors), None)

    @property
    def is_valid(self) -> bool:
        return len(self.field_errors) == 0

    def summary(self) -> str:
        return "; ".join(self.field_errors.values())


def _normalize_required_text(value: Any) -> str:
    return str(value or "").strip()


def _check_non_negative(values: dict[str, Any], key: str, label: str, field_errors: dict[str, str]) -> None:
    raw = values.get(key)
    if raw in (None, ""):
        values.pop(key, None)
        return
    try:
        number = float(raw)
    except (TypeError, ValueError):
        field_errors[key] = f"{label} must be a number."
        return
    if number < 0:
        field_errors[key] = f"{label} cannot be negative."
        return
    values[key] = int(number) if number.is_integer() else number


def validate_account_form(values: dict[str, Any], creating: bool) -> FormResult:
    cleaned = dict(values)
    field_errors: dict[str, str] = {}

    full_name = _normalize_required_text(values.get("full_name"))
    email = _normalize_required_text(values.get("email")).lower()
    role = _normalize_required_text(values.get("role")).lower()
    password = _normalize_required_text(values.get("password"))

    if not full_name:
        field_errors["full_name"] = "Full name is required."
    if not email:
        field_errors["email"] = "Email is required."
    elif not EMAIL_REGEX.match(email):
        field_errors["email"] = "Email is invalid."
    if role not in ACCOUNT_ROLES:
        field_errors["role"] = f"Role must be one of: {', '.join(ACCOUNT_ROLES)}."
    if creating and not password:
        field_errors["password"] = "Password is required."

    cleaned.update({"full_name": full_name, "email": email, "role": role})
    if password:
        cleaned["password"] = password
    else:
        cleaned.pop("password", None)
    return FormResult(values=cleaned, field_errors=field_errors)


def validate_listing_form(values: dict[str, Any]) -> FormResult:
    cleaned = dict(values)
    field_errors: dict[str, str] = {}

    title = _normalize_required_text(values.get("title"))
    building_id = _normalize_required_text(values.get("building_id"))
    if not title:
        field_errors["title"] = "Title is required."
    if not building_id:
        field_errors["building_id"] = "A residential complex must be selected."
    _check_non_negative(cleaned, "price", "Price", field_errors)

    cleaned.update({"title": title, "building_id": building_id})
    return FormResult(values=cleaned, field_errors=field_errors)


def validate_complex_form(values: dict[str, Any]) -> FormResult:
    cleaned = dict(values)
    field_errors: dict[str, str] = {}

    name = _normalize_required_text(values.get("name"))
    address = _normalize_required_text(values.get("address"))
    if not name:
        field_errors["name"] = "Name is required."
    if not address:
        field_errors["address"] = "Address is required."
    _check_non_negative(cleaned, "number_of_units", "Number of units", field_errors)

    for key in LABELLED_LIST_FIELDS:
        entries = cleaned.get(key)
        if isinstance(entries, list):
            kept = [item for item in entries if isinstance(item, dict) and _normalize_required_text(item.get("label"))]
            if kept:
                cleaned[key] = kept
            else:
                cleaned.pop(key, None)

    cleaned.update({"name": name, "address": address})
    return FormResult(values=cleaned, field_errors=field_errors)


def validate_preferences_form(values: dict[str, Any]) -> FormResult:
    cleaned = dict(values)
    field_errors: dict[str, str] = {}
    _check_non_negative(cleaned, "min_price", "Minimum price", field_errors)
    _check_non_negative(cleaned, "max_price", "Maximum price", field_errors)

    min_price = cleaned.get("min_price")
    max_price = cleaned.get("max_price")
    if not field_errors and min_price is not None and max_price is not None and min_price > max_price:
        field_errors["min_price"] = "Minimum price cannot exceed maximum price."
    return FormResult(values=cleaned, field_errors=field_errors)


def validate_section_form(section: Section, values: dict[str, Any], creating: bool) -> FormResult:
    if section in (Section.ACCOUNTS, Section.OPERATOR_ACCOUNTS):
        if section == Section.OPERATOR_ACCOUNTS:
            values = {**values, "role": values.get("role") or "operator"}
        return validate_account_form(values, creating=creating)
    if section in (Section.LISTINGS, Section.LINKED_LISTINGS):
        return validate_listing_form(values)
    return validate_complex_form(values)


def map_api_validation_errors(error_details: Any) -> dict[str, str]:
    if not error_details:
        return {}

    mapped: dict[str, str] = {}
    if isinstance(error_details, dict):
        if isinstance(error_details.get("errors"), dict):
            for key, value in error_details["errors"].items():
                mapped[str(key)] = str(value)
        for key, value in error_details.items():
            if key == "errors":
                continue
            if isinstance(value, str):
                mapped[str(key)] = value
            elif isinstance(value, list) and value and isinstance(value[0], str):
                mapped[str(key)] = value[0]
    elif isinstance(error_details, list):
        for item in error_details:
            if isinstance(item, str):
                # "price must not be less than 0" style messages lead with the field name.
                field = item.split(" ", 1)[0]
                mapped.setdefault(field, item)
                continue
            if not isinstance(item, dict):
                continue
            field = item.get("field") or item.get("property")
            message = item.get("message") or item.get("msg")
            if field and message:
                mapped[str(field)] = str(message)
    return mapped
