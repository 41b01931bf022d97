"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y el contrato status/decode para todos los transports.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Mapping

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from core.config import AppSettings
from core.domain.errors import DecodeError, TransportError

# Lo que puede lanzar un request: fallos de red/protocolo y URLs mal formadas
# (`InvalidURL` y `ValueError` no heredan de `HTTPError`).
REQUEST_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, httpx.InvalidURL, ValueError)


def _base_headers(settings: AppSettings, extra_headers: Mapping[str, str] | None) -> dict[str, str]:
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json, image/*;q=0.9, */*;q=0.8",
    }
    if extra_headers:
        headers.update(extra_headers)
    return headers


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: Mapping[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las requests se comporten igual.
    - `transport` permite tests sin red (`httpx.MockTransport`).
    """

    settings = settings or AppSettings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=_base_headers(settings, extra_headers),
        transport=transport,
    )


def build_sync_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: Mapping[str, str] | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Versión bloqueante de `build_async_client` (backend `threaded`)."""

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=_base_headers(settings, extra_headers),
        transport=transport,
    )


def ensure_success(response: httpx.Response, url: str) -> None:
    if not response.is_success:
        raise TransportError(url, status=response.status_code)


@lru_cache(maxsize=64)
def _adapter_for(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


def decode_json(body: bytes | str, shape: type[Any], url: str) -> Any:
    """Interpreta `body` como JSON con la forma `shape` (modelo pydantic, list[...], dict...)."""

    if not body:
        raise DecodeError(url, "empty body")
    try:
        return _adapter_for(shape).validate_json(body)
    except ValidationError as exc:
        raise DecodeError(url, f"{exc.error_count()} validation error(s): {exc.errors()[0]['msg']}") from exc


def encode_json(payload: Any) -> bytes:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(by_alias=True).encode("utf-8")
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")
