import asyncio
import json

import httpx

from clients.rental_api_sdk.accounts_client import AccountsClient
from clients.rental_api_sdk.complexes_client import ComplexesClient
from clients.rental_api_sdk.config import SDKConfig
from clients.rental_api_sdk.http_client import HttpClient
from clients.rental_api_sdk.listings_client import ListingsClient
from clients.rental_api_sdk.models import FilePayload
from clients.rental_api_sdk.normalizers import BareListEnvelope, DataEnvelope, PluralEnvelope
from clients.rental_api_sdk.preferences_client import PreferencesClient


def _config() -> SDKConfig:
    return SDKConfig(
        base_url="http://api.test/",
        timeout_seconds=5,
        verify_ssl=True,
        retry_max_attempts=1,
        retry_backoff_ms=0,
    )


class _Recorder:
    def __init__(self, responses: dict[tuple[str, str], httpx.Response]) -> None:
        self.responses = responses
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.get((request.method, request.url.path), httpx.Response(200, json={}))


def _http(recorder: _Recorder, token: str | None = "secret") -> HttpClient:
    return HttpClient(_config(), token_provider=lambda: token, transport=httpx.MockTransport(recorder))


def test_list_accounts_sends_query_params_and_bearer_token() -> None:
    recorder = _Recorder({("GET", "/users"): httpx.Response(200, json={"users": [{"id": "u-1"}], "total": 1})})
    client = AccountsClient(_http(recorder))

    envelope = asyncio.run(
        client.list_accounts(page=2, limit=10, search="ana", role="tenant", sort_by="created_at", order="DESC")
    )

    assert isinstance(envelope, PluralEnvelope)
    assert envelope.items == [{"id": "u-1"}]
    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert dict(request.url.params) == {
        "page": "2",
        "limit": "10",
        "search": "ana",
        "role": "tenant",
        "sortBy": "created_at",
        "order": "DESC",
    }


def test_list_accounts_omits_empty_search() -> None:
    recorder = _Recorder({("GET", "/users"): httpx.Response(200, json={"users": []})})
    client = AccountsClient(_http(recorder, token=None))

    asyncio.run(client.list_accounts(page=1, limit=10, search=""))

    request = recorder.requests[0]
    assert "search" not in request.url.params
    assert "Authorization" not in request.headers


def test_change_role_uses_dedicated_endpoint() -> None:
    recorder = _Recorder({})
    client = AccountsClient(_http(recorder))

    asyncio.run(client.change_role("u-7", "operator"))

    request = recorder.requests[0]
    assert request.method == "PUT"
    assert request.url.path == "/users/u-7/role"
    assert json.loads(request.content) == {"role": "operator"}


def test_listing_update_uses_patch_and_list_reads_data_envelope() -> None:
    recorder = _Recorder(
        {("GET", "/properties"): httpx.Response(200, json={"data": [{"id": "p-1"}], "total": 1, "page": 1})}
    )
    client = ListingsClient(_http(recorder))

    async def _scenario():
        listed = await client.list_listings(page=1, limit=10)
        await client.update_listing("p-1", {"title": "Loft"})
        return listed

    envelope = asyncio.run(_scenario())

    assert isinstance(envelope, DataEnvelope)
    assert envelope.total == 1
    assert recorder.requests[1].method == "PATCH"
    assert recorder.requests[1].url.path == "/properties/p-1"


def test_complexes_list_is_bare_array() -> None:
    recorder = _Recorder({("GET", "/buildings"): httpx.Response(200, json=[{"id": "b-1", "name": "Riverside"}])})
    client = ComplexesClient(_http(recorder))

    envelope = asyncio.run(client.list_complexes())

    assert isinstance(envelope, BareListEnvelope)
    assert envelope.items[0]["name"] == "Riverside"


def test_complex_photo_upload_sends_multipart_and_parses_urls() -> None:
    recorder = _Recorder(
        {
            ("POST", "/buildings/upload/photos"): httpx.Response(
                200,
                json=[{"url": "https://cdn/a.jpg", "key": "a"}, {"url": "https://cdn/b.jpg", "key": "b"}],
            )
        }
    )
    client = ComplexesClient(_http(recorder))
    files = [FilePayload("a.jpg", b"aaa", "image/jpeg"), FilePayload("b.jpg", b"bbb", "image/jpeg")]

    uploaded = asyncio.run(client.upload_photos(files))

    assert [item.url for item in uploaded] == ["https://cdn/a.jpg", "https://cdn/b.jpg"]
    request = recorder.requests[0]
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'name="photos"; filename="a.jpg"' in request.content


def test_single_upload_response_is_wrapped_in_list() -> None:
    recorder = _Recorder({("POST", "/buildings/upload/logo"): httpx.Response(200, json={"url": "https://cdn/logo.png"})})
    client = ComplexesClient(_http(recorder))

    uploaded = asyncio.run(client.upload_logo(FilePayload("logo.png", b"png")))

    assert [item.url for item in uploaded] == ["https://cdn/logo.png"]


def test_missing_preferences_are_absent_not_an_error() -> None:
    recorder = _Recorder(
        {("GET", "/users/u-1/preferences"): httpx.Response(404, json={"statusCode": 404, "message": "Not Found"})}
    )
    client = PreferencesClient(_http(recorder))

    assert asyncio.run(client.get_preferences("u-1")) is None


def test_preferences_are_parsed_into_record() -> None:
    recorder = _Recorder(
        {("GET", "/users/u-1/preferences"): httpx.Response(200, json={"id": "pr-1", "min_price": 900, "max_price": 1500})}
    )
    client = PreferencesClient(_http(recorder))

    record = asyncio.run(client.get_preferences("u-1"))

    assert record is not None
    assert record.min_price == 900
    assert record.max_price == 1500
