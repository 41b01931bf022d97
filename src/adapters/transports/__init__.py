"""Transports concretos (implementan `core.interfaces.transport.Transport`).

El mecanismo se elige al construir, según `AppSettings.transport_backend`; el
pipeline solo ve el Protocol.
"""

from __future__ import annotations

from adapters.transports.async_httpx import AsyncHttpTransport
from adapters.transports.threaded import ThreadedHttpTransport
from core.config import AppSettings, TransportBackend
from core.interfaces.transport import Transport


def build_transport(settings: AppSettings | None = None) -> Transport:
    """Crea el transport configurado con los headers comunes ya aplicados."""

    settings = settings or AppSettings()
    transport: Transport
    if settings.transport_backend == TransportBackend.THREADED:
        transport = ThreadedHttpTransport(settings)
    else:
        transport = AsyncHttpTransport(settings)
    transport.set_default_header("Content-type", "application/json")
    return transport


__all__ = [
    "AsyncHttpTransport",
    "ThreadedHttpTransport",
    "build_transport",
]
