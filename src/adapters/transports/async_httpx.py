"""Transport nativo async sobre `httpx.AsyncClient`."""

from __future__ import annotations

from typing import Any, TypeVar

import httpx
import structlog

from adapters.http_client import (
    REQUEST_ERRORS,
    build_async_client,
    decode_json,
    encode_json,
    ensure_success,
)
from adapters.image_decoder import decode_image
from core.config import AppSettings
from core.domain.errors import AssetDecodeError, TransportError
from core.domain.models import Asset

T = TypeVar("T")

logger = structlog.get_logger(component="transport.async")


class AsyncHttpTransport:
    """Implementa `core.interfaces.transport.Transport` con un único AsyncClient.

    Los headers por defecto viven en el propio cliente (`client.headers`), que es
    case-insensitive, así que `Content-type` y `content-type` son la misma clave.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_async_client(self._settings)

    def set_default_header(self, key: str, value: str) -> None:
        if key in self._client.headers:
            return
        self._client.headers[key] = value

    @property
    def default_headers(self) -> httpx.Headers:
        return self._client.headers

    async def _send(self, method: str, url: str, *, content: bytes | None = None) -> httpx.Response:
        try:
            return await self._client.request(method, url, content=content)
        except REQUEST_ERRORS as exc:
            raise TransportError(url, detail=f"{exc.__class__.__name__}: {exc}") from exc

    async def get(self, url: str, shape: type[T]) -> T:
        response = await self._send("GET", url)
        ensure_success(response, url)
        return decode_json(response.content, shape, url)

    async def post(self, url: str, payload: Any, shape: type[T]) -> T:
        response = await self._send("POST", url, content=encode_json(payload))
        ensure_success(response, url)
        return decode_json(response.content, shape, url)

    async def delete(self, url: str, shape: type[T]) -> T:
        response = await self._send("DELETE", url)
        ensure_success(response, url)
        return decode_json(response.content, shape, url)

    async def fetch_asset(self, url: str) -> Asset | None:
        try:
            response = await self._client.get(url)
        except REQUEST_ERRORS as exc:
            logger.warning("asset_request_failed", url=url, error=str(exc))
            return None

        if not response.is_success:
            logger.warning("asset_bad_status", url=url, status=response.status_code)
            return None
        if not response.content:
            logger.warning("asset_empty_body", url=url)
            return None

        try:
            return decode_image(response.content, source_url=url)
        except AssetDecodeError as exc:
            logger.warning("asset_decode_failed", url=url, error=str(exc))
            return None

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
