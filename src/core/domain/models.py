"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El mismo modelo sirve como "shape" que el transport usa para decodificar JSON.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class ListingEntry(BaseModel):
    """Una entrada del listado: identifica un recurso remoto a descargar."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(
        default="",
        description="Slug del Pokémon según el listado.",
    )
    url: str = Field(
        ...,
        min_length=1,
        description="URL del recurso individual (item locator).",
    )

    @property
    def locator(self) -> str:
        return self.url


class ListingResponse(BaseModel):
    """Respuesta del endpoint paginado `/pokemon?limit=..&offset=..`."""

    model_config = ConfigDict(extra="ignore")

    count: int | None = Field(
        default=None,
        description="Total de recursos disponibles en el servidor.",
    )
    next: str | None = Field(
        default=None,
        description="URL de la siguiente página (si existe).",
    )
    results: list[ListingEntry] | None = Field(
        default=None,
        description="Entradas de esta página.",
    )


class TypeInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    url: str | None = None


class PokemonType(BaseModel):
    model_config = ConfigDict(extra="ignore")

    slot: int | None = None
    type: TypeInfo


class Pokemon(BaseModel):
    """Registro de un Pokémon tal como lo devuelve `/pokemon/{id}`.

    El `id` lo asigna la fuente remota; el filtrado por rango ocurre en el pipeline,
    no aquí, para que un id fuera de rango no se confunda con un error de decode.
    """

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="Identificador asignado por PokeAPI.")
    name: str = Field(..., min_length=1, description="Nombre/slug del Pokémon.")
    height: int = Field(default=0, ge=0, description="Altura en decímetros.")
    weight: int = Field(default=0, ge=0, description="Peso en hectogramos.")
    types: list[PokemonType] = Field(
        default_factory=list,
        description="Tipos del Pokémon (0..n).",
    )

    @property
    def type_names(self) -> list[str]:
        ordered = sorted(self.types, key=lambda t: t.slot if t.slot is not None else 0)
        return [t.type.name for t in ordered]

    @property
    def display_name(self) -> str:
        return self.name.replace("-", " ").title()


class Asset(BaseModel):
    """Imagen decodificada asociada 1:1 a un Pokémon.

    `content` guarda los bytes originales; las dimensiones y el formato salen del
    decode (Pillow), lo que garantiza que los bytes son una imagen válida.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., repr=False, description="Bytes crudos de la imagen.")
    format: str = Field(..., min_length=1, description="Formato detectado (PNG, JPEG, ...).")
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    mode: str = Field(default="", description="Modo de color de Pillow (RGBA, P, ...).")
    source_url: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)

    @property
    def media_type(self) -> str:
        return f"image/{self.format.lower()}"


@dataclass
class IndexedResult:
    """Unidad que viaja por el pipeline; recuerda su posición en el listado."""

    original_index: int
    item: Optional[Pokemon] = None
    asset: Optional[Asset] = None
    error: Optional[Exception] = None


@dataclass(frozen=True)
class PokedexEntry:
    """Par (Pokémon, imagen) entregado al consumidor, en orden de listado."""

    original_index: int
    pokemon: Pokemon
    asset: Optional[Asset] = None
