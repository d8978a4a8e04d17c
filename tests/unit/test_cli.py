"""Tests for the dexcache CLI."""

from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from dexcache.cli import app


runner = CliRunner()

BASE = "https://pokeapi.test/api/v2"
NAMES = ["bulbasaur", "ivysaur", "venusaur"]


@pytest.fixture
def cli_dex(monkeypatch: pytest.MonkeyPatch, fake_gateway):
    """Make the CLI build its service around the fake gateway."""
    from dexcache.adapters.store import FileBlobStore, NullBlobStore
    from dexcache.core.data_cache import DataCache
    from dexcache.core.services import Dex

    def build(config):
        store = FileBlobStore(config.data_root) if config.persistent else NullBlobStore()
        cache = DataCache(store, fake_gateway, base_url=BASE, online=config.online)
        return Dex(
            store,
            fake_gateway,
            data_cache=cache,
            batch_size=config.batch_size,
            batch_delay=0,
            max_records=config.max_records,
        )

    monkeypatch.setattr(importlib.import_module("dexcache.cli.main"), "build_dex", build)
    return fake_gateway


@pytest.mark.cli
@pytest.mark.tra("UseCase.Fetch")
@pytest.mark.tier(1)
class TestFetchCommand:
    """Tests for dexcache fetch."""

    def test_prints_json(self, tmp_path: Path, cli_dex) -> None:
        """fetch prints the resource as JSON."""
        cli_dex.json[f"{BASE}/type/13"] = {"name": "electric"}

        result = runner.invoke(app, ["--home", str(tmp_path), "fetch", f"{BASE}/type/13"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"name": "electric"}

    def test_offline_miss_exits_1(self, tmp_path: Path, cli_dex) -> None:
        """Offline without a cached copy is reported, not a traceback."""
        result = runner.invoke(
            app, ["--home", str(tmp_path), "--offline", "fetch", f"{BASE}/type/13", "--key", "type_13"]
        )

        assert result.exit_code == 1
        assert "No cached data for 'type_13'" in result.output
        assert cli_dex.calls == []

    def test_remote_failure_shows_hint(self, tmp_path: Path, cli_dex) -> None:
        """Gateway failures print the error and its recovery hint."""
        result = runner.invoke(app, ["--home", str(tmp_path), "fetch", f"{BASE}/type/404"])

        assert result.exit_code == 1
        assert "Error: API request failed: HTTP 404" in result.output
        assert "Hint:" in result.output


@pytest.mark.cli
@pytest.mark.tra("UseCase.Load")
@pytest.mark.tier(1)
class TestLoadCommand:
    """Tests for dexcache load."""

    def test_loads_records(self, tmp_path: Path, cli_dex) -> None:
        """load reports how many records it loaded and writes the snapshot."""
        cli_dex.seed_creatures(NAMES)

        result = runner.invoke(app, ["--home", str(tmp_path), "load", "--max", "3"])

        assert result.exit_code == 0, result.output
        assert "Loaded 3 records." in result.output
        assert (tmp_path / "cache" / "all_pokemon_complete.json").is_file()

    def test_reports_failures(self, tmp_path: Path, cli_dex) -> None:
        """Failed items are listed after the load."""
        cli_dex.seed_creatures(NAMES)
        cli_dex.failing[f"{BASE}/pokemon/ivysaur"] = "HTTP 500: boom"

        result = runner.invoke(app, ["--home", str(tmp_path), "load", "--max", "3"])

        assert result.exit_code == 0, result.output
        assert "Loaded 2 records." in result.output
        assert "1 items failed" in result.output
        assert "ivysaur" in result.output

    def test_retry_recovers(self, tmp_path: Path, cli_dex, monkeypatch: pytest.MonkeyPatch) -> None:
        """--retry re-runs failed items before reporting."""
        cli_dex.seed_creatures(NAMES)
        url = f"{BASE}/pokemon/ivysaur"
        cli_dex.failing[url] = "HTTP 500: boom"
        original = cli_dex.fetch_json

        def flaky(requested: str):
            result = original(requested)
            if requested == url:
                cli_dex.failing.pop(url, None)
            return result

        monkeypatch.setattr(cli_dex, "fetch_json", flaky)

        result = runner.invoke(app, ["--home", str(tmp_path), "load", "--max", "3", "--retry"])

        assert result.exit_code == 0, result.output
        assert "Recovered 1 records on retry." in result.output
        assert "Loaded 3 records." in result.output

    def test_offline_empty_cache_fails_cleanly(self, tmp_path: Path, cli_dex) -> None:
        """Nothing to load and nothing cached ends with the offline message."""
        result = runner.invoke(app, ["--home", str(tmp_path), "--offline", "load"])

        assert result.exit_code == 1
        assert "No internet connection and no cached data available" in result.output

    def test_invalid_batch_size_is_config_error(self, tmp_path: Path, cli_dex) -> None:
        """Bad numeric options are rejected before anything runs."""
        result = runner.invoke(app, ["--home", str(tmp_path), "load", "--batch-size", "0"])

        assert result.exit_code == 1
        assert "batch_size must be at least 1" in result.output


@pytest.mark.cli
@pytest.mark.tra("UseCase.Show")
@pytest.mark.tier(1)
class TestShowCommand:
    """Tests for dexcache show."""

    def test_summary(self, tmp_path: Path, cli_dex) -> None:
        """show prints a readable summary of the complete record."""
        cli_dex.seed_creatures(NAMES)

        result = runner.invoke(app, ["--home", str(tmp_path), "show", "ivysaur"])

        assert result.exit_code == 0, result.output
        assert "#0002 ivysaur" in result.output
        assert "Types: electric" in result.output
        assert "Description: ivysaur lives in tests." in result.output
        assert "Evolution chain: #1" in result.output

    def test_json_output(self, tmp_path: Path, cli_dex) -> None:
        """--json prints the composite record."""
        cli_dex.seed_creatures(NAMES)

        result = runner.invoke(app, ["--home", str(tmp_path), "show", "1", "--json"])

        assert result.exit_code == 0, result.output
        record = json.loads(result.stdout)
        assert record["name"] == "bulbasaur"
        assert set(record) >= {"species", "encounters", "evolution_chain"}

    def test_media_falls_back_to_urls(self, tmp_path: Path, cli_dex) -> None:
        """--media shows remote URLs when downloads are not possible."""
        cli_dex.seed_creatures(NAMES)

        result = runner.invoke(app, ["--home", str(tmp_path), "show", "bulbasaur", "--media"])

        assert result.exit_code == 0, result.output
        assert "Sprite: https://" in result.output
        assert "Cry: https://" in result.output

    def test_offline_unknown_record(self, tmp_path: Path, cli_dex) -> None:
        """Unknown records offline exit with status 1."""
        result = runner.invoke(app, ["--home", str(tmp_path), "--offline", "show", "mew"])

        assert result.exit_code == 1
        assert "Record 'mew' not found." in result.output


@pytest.mark.cli
@pytest.mark.tra("UseCase.Stats")
@pytest.mark.tier(1)
class TestStatsCommand:
    """Tests for dexcache stats."""

    def test_json(self, tmp_path: Path, cli_dex) -> None:
        """--json prints the stats dictionary."""
        (tmp_path / "sprites").mkdir()
        (tmp_path / "sprites" / "a.png").write_bytes(b"x" * 10)

        result = runner.invoke(app, ["--home", str(tmp_path), "stats", "--json"])

        assert result.exit_code == 0, result.output
        stats = json.loads(result.stdout)
        assert stats["sprites"] == {"files": 1, "size": 10}
        assert stats["total"] == {"files": 1, "size": 10}
        assert stats["performance"] == {"hits": 0, "misses": 0, "errors": 0}

    def test_table(self, tmp_path: Path, cli_dex) -> None:
        """The default output is a table with a total row."""
        result = runner.invoke(app, ["--home", str(tmp_path), "stats"])

        assert result.exit_code == 0, result.output
        for label in ("data", "sprites", "audio", "total", "Hits: 0"):
            assert label in result.output


@pytest.mark.cli
@pytest.mark.tra("UseCase.Clear")
@pytest.mark.tier(1)
class TestClearCommand:
    """Tests for dexcache clear."""

    def test_clear_one_domain(self, tmp_path: Path, cli_dex) -> None:
        """clear sprites removes only the sprites directory."""
        (tmp_path / "sprites").mkdir()
        (tmp_path / "sprites" / "a.png").write_bytes(b"x")
        (tmp_path / "cache").mkdir()
        (tmp_path / "cache" / "k.json").write_text("{}")

        result = runner.invoke(app, ["--home", str(tmp_path), "clear", "sprites"])

        assert result.exit_code == 0, result.output
        assert "Cleared sprites cache." in result.output
        assert not (tmp_path / "sprites").exists()
        assert (tmp_path / "cache" / "k.json").exists()

    def test_invalid_target(self, tmp_path: Path, cli_dex) -> None:
        """Unknown targets print the error and the accepted names."""
        result = runner.invoke(app, ["--home", str(tmp_path), "clear", "videos"])

        assert result.exit_code == 1
        assert "Invalid cache type 'videos'" in result.output
        assert "data, sprites, audio, all" in result.output


@pytest.mark.cli
@pytest.mark.tra("UseCase.Check")
@pytest.mark.tier(1)
class TestCheckCommand:
    """Tests for dexcache check."""

    def test_online(self, tmp_path: Path, cli_dex) -> None:
        """check prints online and exits 0 when the probe succeeds."""
        result = runner.invoke(app, ["--home", str(tmp_path), "check"])

        assert result.exit_code == 0, result.output
        assert "online" in result.output

    def test_offline(self, tmp_path: Path, cli_dex) -> None:
        """check exits 1 when the probe fails."""
        cli_dex.online = False

        result = runner.invoke(app, ["--home", str(tmp_path), "check"])

        assert result.exit_code == 1
        assert "offline" in result.output


@pytest.mark.cli
@pytest.mark.tier(0)
def test_no_args_shows_help() -> None:
    """Running without a command prints usage."""
    result = runner.invoke(app, [])

    assert "Usage" in result.output


@pytest.mark.cli
@pytest.mark.tier(0)
def test_verbose_enables_debug_logging(tmp_path: Path, cli_dex) -> None:
    """--verbose sets the package logger to DEBUG."""
    import logging

    runner.invoke(app, ["--home", str(tmp_path), "--verbose", "stats", "--json"])

    assert logging.getLogger("dexcache").level == logging.DEBUG
    runner.invoke(app, ["--home", str(tmp_path), "stats", "--json"])
    assert logging.getLogger("dexcache").level == logging.WARNING
