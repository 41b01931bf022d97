"""Shared fixtures for unit tests.

No test here touches the network: transports are driven through
`httpx.MockTransport` and the pipeline through `FakeTransport`.
"""

from __future__ import annotations

import asyncio
from io import BytesIO
from typing import Any, Callable

import pytest
from PIL import Image

from core.config import AppSettings
from core.domain.errors import TransportError
from core.domain.models import Asset, ListingResponse, Pokemon

LISTING_URL = "https://pokeapi.test/api/v2/pokemon?limit=151&offset=0"
ITEM_URL = "https://pokeapi.test/api/v2/pokemon/{}/"
ART_PREFIX = "https://art.test/"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, no I/O tests")


def png_bytes(size: tuple[int, int] = (4, 3), fmt: str = "PNG") -> bytes:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    buf = BytesIO()
    Image.new(mode, size, color=(200, 30, 30) if mode == "RGB" else (200, 30, 30, 255)).save(buf, format=fmt)
    return buf.getvalue()


def make_pokemon(pid: int, name: str | None = None, types: tuple[str, ...] = ("normal",)) -> Pokemon:
    return Pokemon.model_validate(
        {
            "id": pid,
            "name": name or f"mon-{pid}",
            "height": 7,
            "weight": 69,
            "types": [{"slot": i + 1, "type": {"name": t}} for i, t in enumerate(types)],
        }
    )


def make_asset(url: str) -> Asset:
    return Asset(content=b"\x89PNG", format="PNG", width=1, height=1, mode="RGBA", source_url=url)


class FakeTransport:
    """In-memory `Transport` that records calls and in-flight counts."""

    def __init__(
        self,
        *,
        listing: ListingResponse | Exception | None,
        items: dict[str, Pokemon | Exception] | None = None,
        assets: dict[str, Asset | None] | None = None,
        delays: dict[str, float] | None = None,
        default_asset: bool = True,
        on_asset: Callable[[str], None] | None = None,
    ) -> None:
        self.listing = listing
        self.items = items or {}
        self.assets = assets or {}
        self.delays = delays or {}
        self.default_asset = default_asset
        self.on_asset = on_asset
        self.headers: dict[str, str] = {}
        self.item_calls: list[str] = []
        self.asset_calls: list[str] = []
        self.listing_calls = 0
        self.items_in_flight = 0
        self.max_items_in_flight = 0
        self.assets_in_flight = 0
        self.max_assets_in_flight = 0
        self.closed = False

    def set_default_header(self, key: str, value: str) -> None:
        self.headers.setdefault(key.lower(), value)

    async def get(self, url: str, shape: type[Any]) -> Any:
        if shape is ListingResponse:
            self.listing_calls += 1
            if isinstance(self.listing, Exception):
                raise self.listing
            return self.listing

        self.item_calls.append(url)
        self.items_in_flight += 1
        self.max_items_in_flight = max(self.max_items_in_flight, self.items_in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            outcome = self.items.get(url)
            if outcome is None:
                raise TransportError(url, status=404)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.items_in_flight -= 1

    async def post(self, url: str, payload: Any, shape: type[Any]) -> Any:
        raise NotImplementedError

    async def delete(self, url: str, shape: type[Any]) -> Any:
        raise NotImplementedError

    async def fetch_asset(self, url: str) -> Asset | None:
        self.asset_calls.append(url)
        self.assets_in_flight += 1
        self.max_assets_in_flight = max(self.max_assets_in_flight, self.assets_in_flight)
        try:
            if self.on_asset:
                self.on_asset(url)
            await asyncio.sleep(self.delays.get(url, 0))
            if url in self.assets:
                return self.assets[url]
            return make_asset(url) if self.default_asset else None
        finally:
            self.assets_in_flight -= 1

    async def aclose(self) -> None:
        self.closed = True


def build_fake(
    pokemon: list[Pokemon | Exception],
    *,
    delays: list[float] | None = None,
    **kwargs: Any,
) -> FakeTransport:
    """One listing entry per element; exceptions make that item fail."""

    results = []
    items: dict[str, Pokemon | Exception] = {}
    delay_map: dict[str, float] = {}
    for i, p in enumerate(pokemon):
        url = ITEM_URL.format(i + 1)
        name = p.name if isinstance(p, Pokemon) else f"broken-{i}"
        results.append({"name": name, "url": url})
        items[url] = p
        if delays:
            delay_map[url] = delays[i]
    listing = ListingResponse.model_validate({"count": len(results), "next": None, "results": results})
    return FakeTransport(listing=listing, items=items, delays=delay_map, **kwargs)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        base_url="https://pokeapi.test/api/v2",
        artwork_base_url=ART_PREFIX,
        item_timeout_seconds=5.0,
    )


@pytest.fixture
def fake_factory() -> Callable[..., FakeTransport]:
    return build_fake


@pytest.fixture
def pokemon_factory() -> Callable[..., Pokemon]:
    return make_pokemon


@pytest.fixture
def png() -> Callable[..., bytes]:
    return png_bytes


@pytest.fixture
def fake_transport_cls() -> type[FakeTransport]:
    return FakeTransport
