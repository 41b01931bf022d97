"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import PIL
import typer
from rich.console import Console
from rich.table import Table

from adapters.transports import build_transport
from core.config import AppSettings, AssetGateMode, TransportBackend, write_user_env_vars
from core.domain.errors import PokedexError
from core.domain.models import ListingResponse

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    url = f"{settings.base_url.rstrip('/')}/pokemon?limit=1&offset=0"
    transport = build_transport(settings)
    try:
        listing = await transport.get(url, ListingResponse)
    except PokedexError as exc:
        return False, str(exc)
    finally:
        await transport.aclose()
    return True, f"{listing.count or 0} resources listed"


async def _check_artwork(settings: AppSettings, name: str = "bulbasaur") -> tuple[bool, str]:
    transport = build_transport(settings)
    try:
        asset = await transport.fetch_asset(settings.asset_url_for(name))
    finally:
        await transport.aclose()
    if asset is None:
        return False, f"no decodable image at {settings.asset_url_for(name)}"
    return True, f"{asset.format} {asset.width}x{asset.height}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Pokédex Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("API base_url", "OK", settings.base_url)
    table.add_row("Artwork base_url", "OK", settings.artwork_base_url)
    table.add_row("Transport", "OK", settings.transport_backend.value)
    table.add_row(
        "Concurrency",
        "OK",
        f"items={settings.max_concurrency} assets={settings.asset_gate_mode.value}",
    )
    table.add_row("Pillow", "OK", PIL.__version__)

    # Connectivity (best-effort)
    ok_api, detail_api = asyncio.run(_check_api(settings))
    table.add_row("PokeAPI", "OK" if ok_api else "FAIL", detail_api)

    ok_art, detail_art = asyncio.run(_check_artwork(settings))
    table.add_row("Artwork", "OK" if ok_art else "WARN", detail_art)

    _console.print(table)

    if not ok_art:
        _console.print(
            "\n[yellow]Note:[/yellow] Without artwork the list still works; entries are shown without an image."
        )
    if not ok_api:
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    defaults = AppSettings()

    base_url = typer.prompt("PokeAPI base URL", default=defaults.base_url, show_default=True).strip()
    artwork = typer.prompt(
        "Artwork base URL", default=defaults.artwork_base_url, show_default=True
    ).strip()
    concurrency = typer.prompt(
        "Max concurrent fetches", default=defaults.max_concurrency, type=int, show_default=True
    )
    gate_mode = typer.prompt(
        "Asset gate (shared/independent)",
        default=defaults.asset_gate_mode.value,
        show_default=True,
    ).strip().lower()
    backend = typer.prompt(
        "Transport (async/threaded)",
        default=defaults.transport_backend.value,
        show_default=True,
    ).strip().lower()

    if not base_url or not artwork:
        raise typer.BadParameter("base URLs are required")
    if concurrency < 1:
        raise typer.BadParameter("concurrency must be >= 1")
    if gate_mode not in {m.value for m in AssetGateMode}:
        raise typer.BadParameter(f"unknown asset gate mode: {gate_mode}")
    if backend not in {b.value for b in TransportBackend}:
        raise typer.BadParameter(f"unknown transport: {backend}")

    env_path = write_user_env_vars(
        {
            "POKEDEX_BASE_URL": base_url,
            "POKEDEX_ARTWORK_BASE_URL": artwork,
            "POKEDEX_MAX_CONCURRENCY": str(concurrency),
            "POKEDEX_ASSET_GATE_MODE": gate_mode,
            "POKEDEX_TRANSPORT_BACKEND": backend,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
