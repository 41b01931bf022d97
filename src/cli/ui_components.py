"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `list` y `show`.
"""

from __future__ import annotations

from typing import Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import PokedexEntry
from core.services.pokedex_pipeline import PipelineResult


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Se omite en modos no interactivos (`--json`).
    """

    title = Text("POKÉDEX", style="bold red")
    subtitle = Text("Kanto • 151 Pokémon • PokeAPI", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="red", padding=(1, 4)))


def _image_label(entry: PokedexEntry) -> str:
    if entry.asset is None:
        return "—"
    return f"{entry.asset.format} {entry.asset.width}x{entry.asset.height}"


def build_pokedex_table(entries: Sequence[PokedexEntry]) -> Table:
    """Una fila por Pokémon, en orden de listado."""

    table = Table(title="Pokédex")
    table.add_column("#", style="cyan", justify="right", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Types", style="magenta")
    table.add_column("Image", style="green")
    for entry in entries:
        table.add_row(
            f"{entry.pokemon.id:03d}",
            entry.pokemon.display_name,
            ", ".join(entry.pokemon.type_names) or "—",
            _image_label(entry),
        )
    return table


def build_summary_text(result: PipelineResult) -> Text:
    text = Text()
    text.append(f"{len(result.entries)} delivered", style="bold green")
    text.append(f" / {result.requested} listed")
    if result.failed:
        text.append(f" • {result.failed} failed", style="red")
    if result.filtered_out:
        text.append(f" • {result.filtered_out} out of range", style="yellow")
    if result.missing_assets:
        text.append(f" • {result.missing_assets} without image", style="yellow")
    return text


def build_detail_panel(entry: PokedexEntry) -> Panel:
    """Panel de detalle de un Pokémon (equivalente al click en la tarjeta)."""

    pokemon = entry.pokemon
    title = Text(f"#{pokemon.id:03d} {pokemon.display_name}", style="bold yellow")
    body = Text()
    body.append("Types: ", style="bold")
    body.append(", ".join(pokemon.type_names) or "—")
    body.append("\nHeight: ", style="bold")
    body.append(f"{pokemon.height / 10:.1f} m")
    body.append("\nWeight: ", style="bold")
    body.append(f"{pokemon.weight / 10:.1f} kg")
    body.append("\nImage: ", style="bold")
    if entry.asset is None:
        body.append("not available", style="dim")
    else:
        body.append(f"{_image_label(entry)} ({entry.asset.size_bytes} bytes)")
        if entry.asset.source_url:
            body.append(f"\n{entry.asset.source_url}", style="dim")

    return Panel(body, title=title, border_style="yellow")
