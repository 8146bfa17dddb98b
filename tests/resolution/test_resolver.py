from datetime import date

import pytest

from cao_model.config.models import EngineSettings
from cao_model.exceptions import NotFoundError
from cao_model.resolution.resolver import WageResolver
from cao_model.wage_scales.provider import WageTableProvider


def test_resolver_over_fixed_table(history_table):
    resolver = WageResolver(history_table)
    assert resolver.table is history_table
    assert resolver.resolve_forward(6, 11, date(2024, 8, 1)).monthly_wage == 2550.0
    assert resolver.get_available_steps(7, date(2024, 8, 1)) == [1, 2]
    assert [p.wage for p in resolver.get_progression(6, 11)] == [2500.0, 2550.0, 2601.0]
    assert resolver.find_step_for_salary(2448, date(2024, 8, 1)) == (6, 10)


def test_resolver_uses_settings(history_table):
    resolver = WageResolver(history_table, EngineSettings(wage_basis="hourly"))
    assert [p.wage for p in resolver.get_progression(6, 11)] == [16.03, None, None]
    result = resolver.resolve_reverse(16.03, date(2024, 2, 1))
    assert (result.scale, result.exact_step) == (6, 11)


def test_resolver_follows_provider_snapshot(scenario_table, history_table):
    tables = iter([scenario_table, history_table])
    provider = WageTableProvider(lambda: next(tables))
    resolver = WageResolver(provider)

    assert resolver.resolve_reverse(2500, date(2024, 10, 1)).table_version == "scenario"
    provider.refresh()
    assert resolver.resolve_reverse(2500, date(2024, 10, 1)).table_version == "history"
    assert resolver.table is history_table


def test_resolver_propagates_errors(history_table):
    with pytest.raises(NotFoundError):
        WageResolver(history_table).resolve_forward(9, 1, date(2024, 8, 1))


def test_resolver_lists_scales(history_table):
    scales = WageResolver(history_table).list_scales()
    assert [(s.scale_number, s.scale_name) for s in scales] == [(6, "Schaal 6"), (7, "Schaal 7")]
