import httpx

from clients.rental_api_sdk.errors import (
    ApiError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    UnauthorizedError,
    map_error,
)


def test_map_error_selects_subclass_by_status() -> None:
    assert isinstance(map_error(401, {}, None), UnauthorizedError)
    assert isinstance(map_error(403, {}, None), ForbiddenError)
    assert isinstance(map_error(404, {}, None), NotFoundError)
    assert isinstance(map_error(503, {}, None), ServerError)
    assert type(map_error(400, {}, None)) is ApiError


def test_list_of_validation_messages_is_joined() -> None:
    error = map_error(
        400,
        {"statusCode": 400, "message": ["title should not be empty", "price must not be less than 0"], "error": "Bad Request"},
        None,
    )

    assert error.message == "title should not be empty; price must not be less than 0"
    assert error.code == "BAD_REQUEST"
    assert error.details == ["title should not be empty", "price must not be less than 0"]


def test_from_http_response_reads_trace_header_and_plain_text() -> None:
    response = httpx.Response(502, text="bad gateway", headers={"X-Trace-ID": "trace-9"})

    error = ApiError.from_http_response(response)

    assert isinstance(error, ServerError)
    assert error.message == "bad gateway"
    assert error.trace_id == "trace-9"
    assert error.status_code == 502
