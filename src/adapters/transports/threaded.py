"""Transport bloqueante (`httpx.Client`) ejecutado en un pool de threads.

Cada request corre en un worker del `ThreadPoolExecutor`; la corrutina que la
pidió queda suspendida en `run_in_executor`, nunca bloquea el event loop.
Los headers por defecto se guardan en una tabla propia y se aplican en cada
request, no en el cliente.
"""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, TypeVar

import httpx
import structlog

from adapters.http_client import (
    REQUEST_ERRORS,
    build_sync_client,
    decode_json,
    encode_json,
    ensure_success,
)
from adapters.image_decoder import decode_image
from core.config import AppSettings
from core.domain.errors import AssetDecodeError, TransportError
from core.domain.models import Asset

T = TypeVar("T")

logger = structlog.get_logger(component="transport.threaded")


class ThreadedHttpTransport:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client or build_sync_client(self._settings)
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or self._settings.threaded_max_workers,
            thread_name_prefix="pokedex-http",
        )
        self._default_headers = httpx.Headers()

    def set_default_header(self, key: str, value: str) -> None:
        if key in self._default_headers:
            return
        self._default_headers[key] = value

    @property
    def default_headers(self) -> httpx.Headers:
        return self._default_headers

    async def _run(self, method: str, url: str, content: bytes | None = None) -> httpx.Response:
        loop = asyncio.get_running_loop()
        call = partial(
            self._client.request,
            method,
            url,
            content=content,
            headers=self._default_headers,
        )
        return await loop.run_in_executor(self._executor, call)

    async def _send(self, method: str, url: str, *, content: bytes | None = None) -> httpx.Response:
        try:
            return await self._run(method, url, content)
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
            response = await self._run("GET", url)
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

    def _shutdown(self) -> None:
        self._executor.shutdown(wait=True, cancel_futures=True)
        self._client.close()

    async def aclose(self) -> None:
        # Los workers pueden seguir en un request abandonado por timeout; se espera
        # su fin fuera del event loop.
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._shutdown)

    async def __aenter__(self) -> "ThreadedHttpTransport":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
