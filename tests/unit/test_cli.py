"""CLI smoke tests with the transport replaced by an in-memory fake."""

from __future__ import annotations

import json
import logging

import pytest
import structlog
from typer.testing import CliRunner

import cli.main as cli_main
from core.domain.models import ListingResponse

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    def configure(settings=None):
        structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))

    monkeypatch.setattr(cli_main, "configure_logging", configure)
    monkeypatch.setenv("POKEDEX_BASE_URL", "https://pokeapi.test/api/v2")
    monkeypatch.setenv("POKEDEX_ARTWORK_BASE_URL", "https://art.test/")
    yield
    structlog.reset_defaults()


@pytest.fixture
def install_fake(monkeypatch):
    def install(fake):
        monkeypatch.setattr(cli_main, "build_transport", lambda settings: fake)
        return fake

    return install


def test_list_json_outputs_ordered_entries(install_fake, fake_factory, pokemon_factory):
    fake = install_fake(
        fake_factory([pokemon_factory(1, "bulbasaur"), pokemon_factory(4, "charmander", ("fire",))])
    )

    result = runner.invoke(cli_main.app, ["list", "--json", "--no-assets"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert [p["name"] for p in payload] == ["bulbasaur", "charmander"]
    assert payload[1]["types"] == ["fire"]
    assert fake.asset_calls == []
    assert fake.closed


def test_list_table_and_summary(install_fake, fake_factory, pokemon_factory):
    install_fake(fake_factory([pokemon_factory(7, "squirtle", ("water",)), pokemon_factory(300, "skitty")]))

    result = runner.invoke(cli_main.app, ["list"])

    assert result.exit_code == 0, result.output
    assert "Squirtle" in result.stdout
    assert "Skitty" not in result.stdout
    assert "1 delivered" in result.stdout
    assert "1 out of range" in result.stdout


def test_list_respects_concurrency_flag(install_fake, fake_factory, pokemon_factory):
    mons = [pokemon_factory(i) for i in range(1, 13)]
    fake = install_fake(fake_factory(mons, delays=[0.005] * len(mons)))

    result = runner.invoke(cli_main.app, ["list", "--json", "--concurrency", "2", "--chunk-size", "0"])

    assert result.exit_code == 0, result.output
    assert len(json.loads(result.stdout)) == 12
    assert fake.max_items_in_flight <= 2


def test_list_writes_output_file(tmp_path, install_fake, fake_factory, pokemon_factory):
    install_fake(fake_factory([pokemon_factory(25, "pikachu", ("electric",))]))
    out = tmp_path / "pokedex.json"

    result = runner.invoke(cli_main.app, ["list", "--no-assets", "--output", str(out)])

    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8"))[0]["name"] == "pikachu"


def test_list_empty_listing_exits_non_zero(install_fake, fake_transport_cls):
    install_fake(fake_transport_cls(listing=ListingResponse.model_validate({"results": []})))

    result = runner.invoke(cli_main.app, ["list"])

    assert result.exit_code == 1
    assert "unavailable" in result.output


def test_show_renders_detail_panel(install_fake, fake_transport_cls, pokemon_factory):
    url = "https://pokeapi.test/api/v2/pokemon/pikachu"
    install_fake(fake_transport_cls(listing=None, items={url: pokemon_factory(25, "pikachu", ("electric",))}))

    result = runner.invoke(cli_main.app, ["show", "Pikachu"])

    assert result.exit_code == 0, result.output
    assert "#025 Pikachu" in result.stdout
    assert "electric" in result.stdout
    assert "PNG 1x1" in result.stdout


def test_show_unknown_pokemon_exits_non_zero(install_fake, fake_transport_cls):
    install_fake(fake_transport_cls(listing=None))

    result = runner.invoke(cli_main.app, ["show", "missingno"])

    assert result.exit_code == 1
    assert "Could not fetch missingno" in result.output
