"""Taxonomía de errores del dominio.

Solo `EmptyListing` es fatal para un batch; el resto se captura en el borde de
cada tarea y se convierte en un resultado parcial.
"""

from __future__ import annotations


class PokedexError(Exception):
    """Base de todos los errores propios."""


class TransportError(PokedexError):
    """Respuesta no exitosa o fallo de red (`status` es None si no hubo respuesta)."""

    def __init__(self, url: str, status: int | None = None, detail: str | None = None) -> None:
        self.url = url
        self.status = status
        self.detail = detail
        if status is None:
            message = f"request to {url} failed: {detail or 'no response'}"
        else:
            message = f"request to {url} returned HTTP {status}"
        super().__init__(message)


class DecodeError(PokedexError):
    """El body no se pudo interpretar con la forma pedida."""

    def __init__(self, url: str, detail: str) -> None:
        self.url = url
        self.detail = detail
        super().__init__(f"could not decode response from {url}: {detail}")


class EmptyListing(PokedexError):
    """El listado falló o vino vacío: el batch entero se aborta."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"listing {url} unusable: {reason}")


class ItemFetchError(PokedexError):
    """Fallo (no fatal) al obtener un item concreto."""

    def __init__(self, url: str, index: int, reason: str) -> None:
        self.url = url
        self.index = index
        self.reason = reason
        super().__init__(f"item #{index} ({url}) failed: {reason}")


class AssetFetchError(PokedexError):
    """Fallo (no fatal) al obtener la imagen de un item."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"asset {url} unavailable: {reason}")


class AssetDecodeError(PokedexError):
    """Los bytes recibidos no son una imagen decodificable."""
