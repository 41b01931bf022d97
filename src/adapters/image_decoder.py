"""Decode de imágenes (Pillow).

Por qué decodificar y no guardar bytes sin más:
- Un 200 con HTML de error o un PNG truncado no es un asset válido; decodificar
  aquí hace que el consumidor solo reciba imágenes utilizables.
"""

from __future__ import annotations

from io import BytesIO

from PIL import Image

from core.domain.errors import AssetDecodeError
from core.domain.models import Asset


def decode_image(data: bytes, *, source_url: str | None = None) -> Asset:
    """Valida `data` como imagen y devuelve un `Asset` con sus dimensiones.

    Lanza `AssetDecodeError` si el body está vacío o Pillow no lo reconoce.
    """

    if not data:
        raise AssetDecodeError("empty image body")

    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            fmt = img.format or "UNKNOWN"
            width, height = img.size
            mode = img.mode
    except Image.DecompressionBombError as exc:
        raise AssetDecodeError(f"image too large: {exc}") from exc
    except (OSError, ValueError, SyntaxError) as exc:
        # UnidentifiedImageError es subclase de OSError.
        raise AssetDecodeError(f"not a decodable image: {exc}") from exc

    return Asset(
        content=bytes(data),
        format=fmt,
        width=width,
        height=height,
        mode=mode,
        source_url=source_url,
    )
