from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass
class ApiError(Exception):
    code: str
    message: str
    details: dict[str, Any] | list[Any] | str | None = None
    trace_id: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    @classmethod
    def from_http_response(cls, response: httpx.Response) -> "ApiError":
        trace_id = response.headers.get("X-Trace-ID") or response.headers.get("X-Request-ID")
        try:
            payload = response.json()
        except ValueError:
            payload = None
        return map_error(response.status_code, payload, trace_id, fallback_text=response.text)


class NetworkError(ApiError):
    """No HTTP response was received."""


class UnauthorizedError(ApiError):
    """401: the session is missing or expired."""


class ForbiddenError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class ServerError(ApiError):
    """5xx server-side failures."""


def map_error(
    status_code: int,
    payload: Any,
    trace_id: str | None,
    fallback_text: str | None = None,
) -> ApiError:
    message = fallback_text or "HTTP request failed"
    code = "HTTP_ERROR"
    details: Any = None
    if isinstance(payload, dict):
        # NestJS-style bodies carry the message as a string or as a list of validation messages.
        raw_message = payload.get("message")
        if isinstance(raw_message, list):
            details = raw_message
            raw_message = "; ".join(str(item) for item in raw_message)
        message = str(raw_message or payload.get("error") or "HTTP request failed")
        code = str(payload.get("code") or payload.get("error") or code).upper().replace(" ", "_")
        details = payload.get("details", details)
        trace_id = payload.get("trace_id") or trace_id
    elif payload is not None:
        details = payload

    mapped: type[ApiError]
    if status_code == 401:
        mapped = UnauthorizedError
    elif status_code == 403:
        mapped = ForbiddenError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=trace_id,
        status_code=status_code,
    )
