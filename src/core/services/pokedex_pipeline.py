"""Batch orchestration for the Pokédex listing.

One invocation runs listing -> fan-out -> gated fetches -> artwork fetches ->
filter -> reorder -> deliver. Side-effects for UI layers (progress bars,
warnings on screen) go through `PipelineHooks` so the core stays reusable from
the CLI, tests or any other entry-point.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Sequence, TypeVar

import structlog

from core.config import AppSettings, AssetGateMode
from core.domain.errors import AssetFetchError, EmptyListing, ItemFetchError
from core.domain.models import (
    Asset,
    IndexedResult,
    ListingEntry,
    ListingResponse,
    Pokemon,
    PokedexEntry,
)
from core.interfaces.transport import Transport
from core.services.gate import ConcurrencyGate

T = TypeVar("T")

logger = structlog.get_logger(component="pokedex_pipeline")


@dataclass
class BatchOptions:
    """Knobs for one batch; `from_settings` fills them from `AppSettings`."""

    listing_url: str
    asset_url_prefix: str
    max_concurrency: int = 30
    asset_gate_mode: AssetGateMode = AssetGateMode.SHARED
    asset_max_concurrency: int = 30
    chunk_size: int | None = 30
    min_id: int = 1
    max_id: int = 151
    item_timeout_seconds: float | None = 30.0
    fetch_assets: bool = True

    @classmethod
    def from_settings(cls, settings: AppSettings, **overrides: object) -> "BatchOptions":
        values: dict[str, object] = {
            "listing_url": settings.listing_url,
            "asset_url_prefix": settings.artwork_base_url,
            "max_concurrency": settings.max_concurrency,
            "asset_gate_mode": settings.asset_gate_mode,
            "asset_max_concurrency": settings.asset_max_concurrency,
            "chunk_size": settings.chunk_size,
            "min_id": settings.min_id,
            "max_id": settings.max_id,
            "item_timeout_seconds": settings.item_timeout_seconds,
        }
        # Overrides se aplican tal cual: `None` desactiva timeout o chunking.
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def asset_url_for(self, pokemon: Pokemon) -> str:
        return f"{self.asset_url_prefix}{pokemon.name}.png"


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings)."""

    warning: Callable[[str], None] | None = None
    started: Callable[[int], None] | None = None
    progress: Callable[[int, int], None] | None = None


@dataclass
class PipelineResult:
    """Output of a batch invocation."""

    entries: list[PokedexEntry]
    requested: int = 0
    failed: int = 0
    filtered_out: int = 0
    missing_assets: int = 0
    warnings: list[str] = field(default_factory=list)


def _chunks(items: Sequence[T], size: int | None) -> list[Sequence[T]]:
    if not size or size <= 0:
        return [items]
    return [items[i : i + size] for i in range(0, len(items), size)]


async def _with_deadline(awaitable: Awaitable[T], timeout: float | None) -> T:
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)


async def fetch_listing(*, transport: Transport, listing_url: str) -> list[ListingEntry]:
    """Fetch the index resource; any failure or an empty page is `EmptyListing`."""

    try:
        listing = await transport.get(listing_url, ListingResponse)
    except Exception as exc:
        raise EmptyListing(listing_url, str(exc)) from exc

    if listing is None or not listing.results:
        raise EmptyListing(listing_url, "no results")
    return list(listing.results)


def select_entries(
    results: Sequence[IndexedResult],
    *,
    min_id: int,
    max_id: int,
) -> list[PokedexEntry]:
    """Drop unresolved or out-of-range items and restore listing order."""

    kept = [r for r in results if r.item is not None and min_id <= r.item.id <= max_id]
    kept.sort(key=lambda r: r.original_index)
    return [
        PokedexEntry(original_index=r.original_index, pokemon=r.item, asset=r.asset)  # type: ignore[arg-type]
        for r in kept
    ]


async def fetch_pokedex(
    *,
    settings: AppSettings,
    transport: Transport,
    gate: ConcurrencyGate | None = None,
    asset_gate: ConcurrencyGate | None = None,
    options: BatchOptions | None = None,
    hooks: PipelineHooks | None = None,
    deliver: Callable[[list[PokedexEntry]], None] | None = None,
) -> PipelineResult:
    """Run one batch and hand the ordered entries to `deliver` exactly once.

    Raises `EmptyListing` when the listing is unavailable; every other failure is
    absorbed per item.
    """

    options = options or BatchOptions.from_settings(settings)
    hooks = hooks or PipelineHooks()
    gate = gate or ConcurrencyGate(options.max_concurrency)
    if options.asset_gate_mode == AssetGateMode.INDEPENDENT and asset_gate is None:
        asset_gate = ConcurrencyGate(options.asset_max_concurrency)

    warnings: list[str] = []

    def warn(message: str) -> None:
        warnings.append(message)
        if hooks.warning:
            hooks.warning(message)

    entries = await fetch_listing(transport=transport, listing_url=options.listing_url)
    total = len(entries)
    logger.info("listing_fetched", url=options.listing_url, entries=total)
    if hooks.started:
        hooks.started(total)

    async def fetch_asset(pokemon: Pokemon) -> Asset | None:
        url = options.asset_url_for(pokemon)
        try:
            asset = await _with_deadline(transport.fetch_asset(url), options.item_timeout_seconds)
        except Exception as exc:
            asset = None
            reason = str(exc) or exc.__class__.__name__
        else:
            reason = "no image returned"
        if asset is None:
            error = AssetFetchError(url, reason)
            logger.warning("asset_missing", pokemon=pokemon.name, url=url, reason=reason)
            warn(str(error))
        return asset

    async def fetch_one(index: int, entry: ListingEntry) -> IndexedResult:
        result = IndexedResult(original_index=index)
        async with gate.slot():
            try:
                result.item = await _with_deadline(
                    transport.get(entry.locator, Pokemon),
                    options.item_timeout_seconds,
                )
            except Exception as exc:
                reason = str(exc) or exc.__class__.__name__
                result.error = ItemFetchError(entry.locator, index, reason)
                logger.warning("item_fetch_failed", index=index, url=entry.locator, reason=reason)
                warn(str(result.error))
                return result

            if options.fetch_assets and options.asset_gate_mode == AssetGateMode.SHARED:
                result.asset = await fetch_asset(result.item)

        if (
            options.fetch_assets
            and options.asset_gate_mode == AssetGateMode.INDEPENDENT
            and asset_gate is not None
        ):
            async with asset_gate.slot():
                result.asset = await fetch_asset(result.item)
        return result

    settled: list[IndexedResult] = []
    indexed = list(enumerate(entries))
    for chunk in _chunks(indexed, options.chunk_size):
        tasks = [asyncio.ensure_future(fetch_one(index, entry)) for index, entry in chunk]
        try:
            # Completion order is arbitrary; select_entries restores listing order.
            for next_done in asyncio.as_completed(tasks):
                settled.append(await next_done)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        logger.debug("chunk_settled", done=len(settled), total=total)
        if hooks.progress:
            hooks.progress(len(settled), total)

    ordered = select_entries(settled, min_id=options.min_id, max_id=options.max_id)
    failed = sum(1 for r in settled if r.item is None)
    result = PipelineResult(
        entries=ordered,
        requested=total,
        failed=failed,
        filtered_out=len(settled) - failed - len(ordered),
        missing_assets=(
            sum(1 for e in ordered if e.asset is None) if options.fetch_assets else 0
        ),
        warnings=warnings,
    )
    logger.info(
        "batch_completed",
        requested=result.requested,
        delivered=len(ordered),
        failed=result.failed,
        filtered_out=result.filtered_out,
        missing_assets=result.missing_assets,
        peak_in_flight=gate.peak,
    )

    if deliver is not None:
        deliver(ordered)
    return result


async def fetch_pokemon(
    *,
    settings: AppSettings,
    transport: Transport,
    name_or_id: str | int,
    fetch_assets: bool = True,
) -> PokedexEntry:
    """Fetch a single Pokémon plus its artwork (detail view).

    Unlike the batch, a failure here propagates to the caller.
    """

    url = settings.pokemon_url(name_or_id)
    pokemon = await transport.get(url, Pokemon)
    asset = None
    if fetch_assets:
        asset = await transport.fetch_asset(settings.asset_url_for(pokemon.name))
        if asset is None:
            logger.warning("asset_missing", pokemon=pokemon.name)
    return PokedexEntry(original_index=0, pokemon=pokemon, asset=asset)
