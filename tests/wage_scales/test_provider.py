import threading
from datetime import date

import pytest

from cao_model.exceptions import ConfigError
from cao_model.wage_scales.models import WageRate
from cao_model.wage_scales.provider import WAGE_TABLE_ENV_VAR, WageTableProvider, loader_from_path
from cao_model.wage_scales.table import WageScaleTable


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class SequenceLoader:
    """Returns the queued tables (or raises queued errors) in order."""

    def __init__(self, *items):
        self.items = list(items)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        item = self.items.pop(0) if len(self.items) > 1 else self.items[0]
        if isinstance(item, Exception):
            raise item
        return item


def _table(scale6, monthly, version):
    return WageScaleTable(
        {6: scale6}, [WageRate(6, 10, date(2024, 1, 1), monthly_wage=monthly)], version=version
    )


def test_current_loads_lazily(scale6):
    loader = SequenceLoader(_table(scale6, 2400.0, "v1"))
    provider = WageTableProvider(loader)
    assert loader.calls == 0
    assert provider.current().version == "v1"
    assert provider.current().version == "v1"
    assert loader.calls == 1


def test_refresh_swaps_snapshot_but_old_reference_is_unchanged(scale6):
    loader = SequenceLoader(_table(scale6, 2400.0, "v1"), _table(scale6, 2448.0, "v2"))
    provider = WageTableProvider(loader)
    old = provider.current()
    new = provider.refresh()
    assert new.version == "v2"
    assert provider.current() is new
    assert old.version == "v1"
    assert float(old.rates["monthly_wage"].iloc[0]) == 2400.0


def test_failed_refresh_keeps_snapshot_and_reraises(scale6, caplog):
    loader = SequenceLoader(_table(scale6, 2400.0, "v1"), ConfigError("broken file"))
    provider = WageTableProvider(loader)
    first = provider.current()
    with pytest.raises(ConfigError, match="broken file"):
        provider.refresh()
    assert provider.current() is first
    assert "keeping snapshot v1" in caplog.text


def test_from_table(history_table):
    provider = WageTableProvider.from_table(history_table)
    assert provider.current() is history_table
    assert not provider.is_stale


def test_staleness_follows_interval_and_invalidate(scale6):
    clock = FakeClock()
    loader = SequenceLoader(_table(scale6, 2400.0, "v1"), _table(scale6, 2448.0, "v2"))
    provider = WageTableProvider(loader, refresh_interval_seconds=60, clock=clock)
    assert provider.is_stale

    provider.refresh_if_stale()
    assert provider.current().version == "v1"
    assert not provider.is_stale

    clock.now = 30
    assert provider.refresh_if_stale().version == "v1"
    assert loader.calls == 1

    clock.now = 60
    assert provider.is_stale
    assert provider.refresh_if_stale().version == "v2"
    assert loader.calls == 2

    provider.invalidate()
    assert provider.is_stale


def test_concurrent_readers_see_whole_snapshots(scale6):
    tables = [_table(scale6, 2400.0 + i, f"v{i}") for i in range(5)]
    loader = SequenceLoader(*tables)
    provider = WageTableProvider(loader)
    provider.current()
    seen = []
    errors = []

    def reader():
        for _ in range(50):
            table = provider.current()
            wage = float(table.rates["monthly_wage"].iloc[0])
            if table.version != f"v{int(wage - 2400)}":
                errors.append((table.version, wage))
            seen.append(table.version)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for t in threads:
        t.start()
    for _ in range(4):
        provider.refresh()
    for t in threads:
        t.join()

    assert errors == []
    assert provider.current().version == "v4"
    assert set(seen) <= {t.version for t in tables}


def test_loader_from_path_defaults_to_builtin_table():
    assert loader_from_path()().version == "default"


def test_loader_from_path_uses_env_var(tmp_path, monkeypatch):
    p = tmp_path / "wages.yaml"
    p.write_text(
        "version: env-table\n"
        "scales:\n"
        "  - {scale_number: 6, min_step: 10, max_step: 10,\n"
        "     rates: [{step: 10, effective_date: 2024-01-01, monthly_wage: 2400.0}]}\n"
    )
    monkeypatch.setenv(WAGE_TABLE_ENV_VAR, str(p))
    assert loader_from_path()().version == "env-table"


def test_loader_from_path_missing_file_raises_on_load(tmp_path):
    loader = loader_from_path(str(tmp_path / "missing.parquet"))
    with pytest.raises(ConfigError):
        loader()
