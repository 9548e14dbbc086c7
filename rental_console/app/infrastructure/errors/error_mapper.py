from clients.rental_api_sdk.errors import ApiError, NetworkError


class ErrorMapper:
    _STATUS_HINTS = {
        400: ("VALIDATION_ERROR", "The request was rejected by the server."),
        401: ("UNAUTHORIZED", "Your session has expired. Sign in again."),
        403: ("PERMISSION_DENIED", "You do not have permission for this operation."),
        404: ("NOT_FOUND", "The requested record no longer exists."),
        409: ("CONFLICT", "The record was changed by someone else."),
        500: ("INTERNAL_ERROR", "The server failed to process the request."),
    }

    @classmethod
    def to_payload(cls, error: Exception, fallback: str | None = None) -> dict:
        if isinstance(error, NetworkError):
            return {
                "code": "NETWORK_ERROR",
                "message": fallback or "Cannot reach the API. Check your connection.",
                "details": error.details,
                "trace_id": None,
            }
        if isinstance(error, ApiError):
            status_code = error.status_code or -1
            mapped = cls._STATUS_HINTS.get(status_code)
            if mapped is None and status_code >= 500:
                mapped = cls._STATUS_HINTS[500]
            code, generic = mapped if mapped is not None else (error.code, "Request failed")
            return {
                "code": code,
                "message": _server_message(error) or fallback or generic,
                "details": error.details,
                "trace_id": error.trace_id,
            }
        return {
            "code": "INTERNAL_ERROR",
            "message": fallback or str(error) or "Unexpected error",
            "details": None,
            "trace_id": None,
        }

    @classmethod
    def to_display_message(cls, error: Exception, fallback: str | None = None) -> str:
        return cls.to_payload(error, fallback=fallback)["message"]


def _server_message(error: ApiError) -> str | None:
    message = (error.message or "").strip()
    if not message or message == "HTTP request failed":
        return None
    return message
