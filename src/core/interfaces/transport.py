"""Contrato del transport HTTP.

Por qué Protocol:
- El pipeline depende solo de esta forma, no de httpx ni de threads.
- Permite intercambiar el mecanismo (cliente async nativo vs. cliente bloqueante
  en un pool de threads) y usar fakes en tests sin herencia.
"""

from __future__ import annotations

from typing import Any, Protocol, TypeVar, runtime_checkable

from core.domain.models import Asset

T = TypeVar("T")


@runtime_checkable
class Transport(Protocol):
    """Una request por llamada, devuelve un resultado tipado o un asset decodificado.

    Reglas:
    - `get`/`post`/`delete` lanzan `TransportError` ante status no exitoso o fallo
      de red y `DecodeError` si el body no encaja con `shape`.
    - `fetch_asset` nunca lanza: devuelve None y loguea un warning.
    - Sin reintentos en esta capa.
    """

    def set_default_header(self, key: str, value: str) -> None:
        """Registra un header para todas las requests siguientes (idempotente)."""

        ...

    async def get(self, url: str, shape: type[T]) -> T:
        ...

    async def post(self, url: str, payload: Any, shape: type[T]) -> T:
        ...

    async def delete(self, url: str, shape: type[T]) -> T:
        ...

    async def fetch_asset(self, url: str) -> Asset | None:
        ...

    async def aclose(self) -> None:
        ...
