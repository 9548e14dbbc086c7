from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import httpx

from clients.rental_api_sdk.config import SDKConfig
from clients.rental_api_sdk.errors import ApiError, NetworkError

TokenProvider = Callable[[], str | None]


class HttpClient:
    """Async JSON client for the rental API.

    GET requests are retried on transport failures and 5xx responses with a
    linear backoff. Mutations are sent exactly once.
    """

    def __init__(
        self,
        config: SDKConfig | None = None,
        token_provider: TokenProvider | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleeper: Callable[[float], Any] | None = None,
    ) -> None:
        self.config = config or SDKConfig.from_env()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            verify=self.config.verify_ssl,
            transport=transport,
        )
        self._token_provider = token_provider
        self._retry_max_attempts = max(1, self.config.retry_max_attempts)
        self._retry_backoff_ms = max(0, self.config.retry_backoff_ms)
        self._sleep = sleeper or asyncio.sleep
        self._auth_error_handler: Callable[[ApiError], None] | None = None

    def register_auth_error_handler(self, handler: Callable[[ApiError], None] | None) -> None:
        self._auth_error_handler = handler

    async def request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        files: list[tuple[str, tuple[str, bytes, str]]] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        request_headers = dict(headers or {})
        token = self._token_provider() if self._token_provider else None
        if token:
            request_headers["Authorization"] = f"Bearer {token}"

        normalized_path = path.lstrip("/")
        allow_retry = method.upper() == "GET"

        for attempt in range(1, self._retry_max_attempts + 1):
            try:
                response = await self._client.request(
                    method=method,
                    url=normalized_path,
                    json=json_body,
                    params=params,
                    files=files,
                    headers=request_headers,
                )
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if (not allow_retry) or attempt >= self._retry_max_attempts:
                    raise NetworkError(
                        code="NETWORK_ERROR",
                        message="Network error while calling the rental API",
                        details=str(exc),
                    ) from exc
                await self._backoff(attempt)
                continue

            if response.status_code >= 400:
                error = ApiError.from_http_response(response)
                if allow_retry and self._is_retryable_status(error.status_code) and attempt < self._retry_max_attempts:
                    await self._backoff(attempt)
                    continue
                if error.status_code == 401 and self._auth_error_handler:
                    self._auth_error_handler(error)
                raise error

            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return None

        raise NetworkError(code="NETWORK_ERROR", message="Network error while calling the rental API", details="retry exhausted")

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _backoff(self, attempt: int) -> None:
        await self._sleep((self._retry_backoff_ms * attempt) / 1000)

    @staticmethod
    def _is_retryable_status(status_code: int | None) -> bool:
        return bool(status_code and 500 <= status_code <= 599)
