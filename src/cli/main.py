"""CLI principal (Typer).

Por qué la CLI es delgada:
- Todo el trabajo (listado, fan-out, gate, orden) vive en
  `core.services.pokedex_pipeline`; aquí solo se traducen flags a opciones y
  se pinta el resultado con Rich.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from adapters.json_exporter import export_pokedex_json, pokedex_to_json
from adapters.transports import build_transport
from cli import doctor
from cli.ui_components import (
    build_detail_panel,
    build_pokedex_table,
    build_summary_text,
    print_banner,
)
from core.config import AppSettings, AssetGateMode, TransportBackend
from core.domain.errors import EmptyListing, PokedexError
from core.domain.models import PokedexEntry
from core.logging_setup import configure_logging
from core.services.pokedex_pipeline import (
    BatchOptions,
    PipelineHooks,
    PipelineResult,
    fetch_pokedex,
    fetch_pokemon,
)

app = typer.Typer(no_args_is_help=True, help="Batch-fetch the first 151 Pokémon from PokeAPI.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def _settings_with(**overrides: object) -> AppSettings:
    settings = AppSettings()
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return settings
    return settings.model_copy(update=values)


async def _run_batch(
    settings: AppSettings,
    options: BatchOptions,
    *,
    show_progress: bool,
) -> tuple[PipelineResult, list[PokedexEntry]]:
    delivered: list[PokedexEntry] = []
    transport = build_transport(settings)
    try:
        if not show_progress:
            result = await fetch_pokedex(
                settings=settings,
                transport=transport,
                options=options,
                deliver=delivered.extend,
            )
            return result, delivered

        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=_err_console,
            transient=True,
        ) as progress:
            task_id = progress.add_task("Fetching Pokémon", total=None)
            hooks = PipelineHooks(
                started=lambda total: progress.update(task_id, total=total),
                progress=lambda done, total: progress.update(task_id, completed=done, total=total),
            )
            result = await fetch_pokedex(
                settings=settings,
                transport=transport,
                options=options,
                hooks=hooks,
                deliver=delivered.extend,
            )
        return result, delivered
    finally:
        await transport.aclose()


@app.command(name="list")
def list_pokedex(
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, help="Max item fetches in flight."
    ),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", min=0, help="Progress chunk size (0 disables chunking)."
    ),
    asset_gate: Optional[AssetGateMode] = typer.Option(
        None, "--asset-gate", case_sensitive=False, help="shared | independent."
    ),
    backend: Optional[TransportBackend] = typer.Option(
        None, "--backend", case_sensitive=False, help="async | threaded."
    ),
    no_assets: bool = typer.Option(False, "--no-assets", help="Skip artwork downloads."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON to stdout instead of a table."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write JSON to this path."),
    show_warnings: bool = typer.Option(False, "--warnings", help="Print per-item warnings."),
) -> None:
    """Fetch the listing, every Pokémon and its artwork, then print them in order."""

    settings = _settings_with(
        max_concurrency=concurrency,
        chunk_size=chunk_size,
        asset_gate_mode=asset_gate,
        transport_backend=backend,
    )
    configure_logging(settings)
    options = BatchOptions.from_settings(settings, fetch_assets=not no_assets)

    if not as_json:
        print_banner(_console)

    try:
        result, entries = asyncio.run(_run_batch(settings, options, show_progress=not as_json))
    except EmptyListing as exc:
        _err_console.print(f"[red]Pokédex unavailable:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if output is not None:
        export_pokedex_json(entries=entries, output_path=output)

    if as_json:
        typer.echo(pokedex_to_json(entries), nl=False)
        return

    _console.print(build_pokedex_table(entries))
    _console.print(build_summary_text(result))
    if show_warnings:
        for message in result.warnings:
            _console.print(f"[yellow]![/yellow] {message}")
    if output is not None:
        _console.print(f"[green]Saved JSON to:[/green] {output}")


@app.command()
def show(
    name: str = typer.Argument(..., help="Pokémon name or National Dex number."),
    no_assets: bool = typer.Option(False, "--no-assets", help="Skip the artwork download."),
) -> None:
    """Show the detail panel for a single Pokémon."""

    settings = AppSettings()
    configure_logging(settings)

    async def _fetch() -> PokedexEntry:
        transport = build_transport(settings)
        try:
            return await fetch_pokemon(
                settings=settings,
                transport=transport,
                name_or_id=name,
                fetch_assets=not no_assets,
            )
        finally:
            await transport.aclose()

    try:
        entry = asyncio.run(_fetch())
    except PokedexError as exc:
        _err_console.print(f"[red]Could not fetch {name}:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    _console.print(build_detail_panel(entry))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
