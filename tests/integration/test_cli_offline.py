"""Integration tests for offline continuation through the CLI.

These tests seed the cache with one online run, then drive the CLI
offline against the same data root.
"""

from __future__ import annotations

import importlib
import json
from typing import TYPE_CHECKING

import pytest
from typer.testing import CliRunner

from dexcache.cli import app


if TYPE_CHECKING:
    from pathlib import Path


runner = CliRunner()

NAMES = ["pichu", "pikachu", "raichu"]


@pytest.fixture
def seeded_home(tmp_path: Path, fake_gateway, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run one online load into tmp_path with the CLI wired to the fake gateway."""
    from dexcache.adapters.executor import ThreadPoolExecutorAdapter
    from dexcache.adapters.store import FileBlobStore, NullBlobStore
    from dexcache.core.data_cache import DataCache
    from dexcache.core.services import Dex

    def build(config):
        store = FileBlobStore(config.data_root) if config.persistent else NullBlobStore()
        cache = DataCache(
            store, fake_gateway, base_url=fake_gateway.base_url, online=config.online
        )
        return Dex(
            store,
            fake_gateway,
            data_cache=cache,
            executor=ThreadPoolExecutorAdapter(max_workers=config.batch_size),
            batch_size=config.batch_size,
            batch_delay=0,
        )

    monkeypatch.setattr(importlib.import_module("dexcache.cli.main"), "build_dex", build)
    fake_gateway.seed_creatures(NAMES)
    result = runner.invoke(app, ["--home", str(tmp_path), "load", "--max", "3"])
    assert result.exit_code == 0, result.output
    fake_gateway.calls.clear()
    fake_gateway.online = False
    return tmp_path


@pytest.mark.cli
@pytest.mark.e2e
@pytest.mark.tra("UseCase.OfflineContinuation")
@pytest.mark.tier(2)
class TestOfflineContinuation:
    """The CLI keeps working offline from what an earlier run cached."""

    def test_load_serves_snapshot(self, seeded_home: Path, fake_gateway) -> None:
        """An offline load returns the snapshot without any request."""
        result = runner.invoke(app, ["--home", str(seeded_home), "--offline", "load"])

        assert result.exit_code == 0, result.output
        assert "Loaded 3 records." in result.output
        assert fake_gateway.calls == []

    def test_show_by_name_and_id(self, seeded_home: Path, fake_gateway) -> None:
        """Composite records are reachable under name and id offline."""
        by_name = runner.invoke(app, ["--home", str(seeded_home), "--offline", "show", "Pikachu"])
        by_id = runner.invoke(app, ["--home", str(seeded_home), "--offline", "show", "2", "--json"])

        assert by_name.exit_code == 0, by_name.output
        assert "#0002 pikachu" in by_name.output
        assert json.loads(by_id.stdout)["name"] == "pikachu"
        assert fake_gateway.calls == []

    def test_stats_count_cached_files(self, seeded_home: Path) -> None:
        """stats sees the files the load wrote."""
        result = runner.invoke(app, ["--home", str(seeded_home), "stats", "--json"])

        stats = json.loads(result.stdout)
        assert stats["data"]["files"] > 0
        assert stats["sprites"]["files"] == 0

    def test_clear_then_offline_load_fails_cleanly(self, seeded_home: Path) -> None:
        """After clearing data, an offline load reports the offline message."""
        cleared = runner.invoke(app, ["--home", str(seeded_home), "clear", "data"])
        result = runner.invoke(app, ["--home", str(seeded_home), "--offline", "load"])

        assert cleared.exit_code == 0, cleared.output
        assert result.exit_code == 1
        assert "No internet connection and no cached data available" in result.output
