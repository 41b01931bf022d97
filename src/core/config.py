"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/transports) y el pipeline lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssetGateMode(str, Enum):
    """How artwork fetches are admitted relative to item fetches."""

    SHARED = "shared"
    INDEPENDENT = "independent"


class TransportBackend(str, Enum):
    """Concrete request mechanism behind the `Transport` protocol."""

    ASYNC = "async"
    THREADED = "threaded"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "pokedex-fetch"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "pokedex-fetch"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "pokedex-fetch"
    return Path.home() / ".config" / "pokedex-fetch"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# pokedex-fetch user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters/pipeline.
    """

    model_config = SettingsConfigDict(
        env_prefix="POKEDEX_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="https://pokeapi.co/api/v2",
        min_length=8,
        description="Base URL de PokeAPI (sin barra final).",
    )
    artwork_base_url: str = Field(
        default="https://img.pokemondb.net/sprites/home/normal/",
        min_length=8,
        description="Prefijo de la URL de artwork; se le concatena `<name>.png`.",
    )
    listing_limit: int = Field(
        default=151,
        ge=1,
        le=2000,
        description="Cantidad de entradas pedidas al endpoint de listado.",
    )
    listing_offset: int = Field(
        default=0,
        ge=0,
        description="Offset del endpoint de listado.",
    )
    min_id: int = Field(
        default=1,
        ge=0,
        description="Menor id aceptado en el resultado final (inclusive).",
    )
    max_id: int = Field(
        default=151,
        ge=0,
        description="Mayor id aceptado en el resultado final (inclusive).",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request HTTP (segundos).",
    )
    item_timeout_seconds: float | None = Field(
        default=30.0,
        gt=0,
        description="Deadline por item (fetch del registro); None desactiva el deadline.",
    )
    user_agent: str = Field(
        default="pokedex-fetch/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para las peticiones.",
    )

    max_concurrency: int = Field(
        default=30,
        ge=1,
        le=500,
        description="Máximo de fetches de items en vuelo a la vez.",
    )
    asset_gate_mode: AssetGateMode = Field(
        default=AssetGateMode.SHARED,
        description="`shared`: el asset usa el permiso del item; `independent`: gate propio.",
    )
    asset_max_concurrency: int = Field(
        default=30,
        ge=1,
        le=500,
        description="Capacidad del gate de assets cuando asset_gate_mode=independent.",
    )
    chunk_size: int | None = Field(
        default=30,
        ge=0,
        description="Tamaño de lote para reportar progreso; 0/None procesa todo de una vez.",
    )

    transport_backend: TransportBackend = Field(
        default=TransportBackend.ASYNC,
        description="Mecanismo HTTP: `async` (httpx.AsyncClient) o `threaded` (httpx.Client + threads).",
    )
    threaded_max_workers: int = Field(
        default=8,
        ge=1,
        le=128,
        description="Threads del backend `threaded`.",
    )

    log_level: str = Field(
        default="warning",
        description="Nivel de logging (debug/info/warning/error).",
    )
    log_format: str = Field(
        default="console",
        pattern="^(console|json)$",
        description="Renderer de logs: console o json.",
    )

    @model_validator(mode="after")
    def _check_id_range(self) -> "AppSettings":
        if self.min_id > self.max_id:
            raise ValueError("min_id must be <= max_id")
        return self

    @property
    def listing_url(self) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}/pokemon?limit={self.listing_limit}&offset={self.listing_offset}"

    def pokemon_url(self, name_or_id: str | int) -> str:
        base = self.base_url.rstrip("/")
        return f"{base}/pokemon/{str(name_or_id).strip().lower()}"

    def asset_url_for(self, name: str) -> str:
        return f"{self.artwork_base_url}{name}.png"
