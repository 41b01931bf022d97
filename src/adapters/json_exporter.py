"""Exportación JSON de un batch entregado.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines (`pokedex list --json | jq`).
- Los bytes de imagen no se incluyen; solo su descripción (formato, tamaño).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Sequence

from core.domain.models import PokedexEntry


def entry_payload(entry: PokedexEntry) -> dict[str, Any]:
    pokemon = entry.pokemon
    image: dict[str, Any] | None = None
    if entry.asset is not None:
        image = {
            "format": entry.asset.format,
            "width": entry.asset.width,
            "height": entry.asset.height,
            "size_bytes": entry.asset.size_bytes,
            "source_url": entry.asset.source_url,
        }
    return {
        "index": entry.original_index,
        "id": pokemon.id,
        "name": pokemon.name,
        "height": pokemon.height,
        "weight": pokemon.weight,
        "types": pokemon.type_names,
        "image": image,
    }


def pokedex_to_json(entries: Sequence[PokedexEntry]) -> str:
    payload = [entry_payload(e) for e in entries]
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_pokedex_json(*, entries: Sequence[PokedexEntry], output_path: Path) -> Path:
    """Exporta el batch a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(pokedex_to_json(entries), encoding="utf-8")
    return output_path
