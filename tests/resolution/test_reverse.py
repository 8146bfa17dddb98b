from datetime import date

import pytest

from cao_model.config.models import EngineSettings, ToleranceLevel
from cao_model.exceptions import AmbiguousInputError, InputError, OutOfRangeError
from cao_model.resolution.forward import resolve_forward
from cao_model.resolution.reverse import AlternativeMatch, resolve_reverse
from cao_model.resolution.scoring import COMPLIANT, OVER_CAO, UNDER_CAO

LEAD_CATEGORY = "Leidinggevende"
PM_CATEGORY = "Pedagogisch medewerker"


def test_salary_between_two_steps(scenario_table):
    result = resolve_reverse(scenario_table, 2450, date(2024, 6, 1))
    assert (result.scale, result.nearest_step) == (6, 10)
    assert result.exact_step is None
    assert not result.is_exact
    assert result.cao_wage == 2400.0
    assert result.salary_difference == 50.0
    assert result.confidence_score == 79.59
    assert result.confidence_tier == "medium"
    assert result.compliance_status == OVER_CAO
    assert result.compliance_notes == ["Salary is 50.0 above CAO rate"]
    assert result.alternative_matches == [
        AlternativeMatch(scale=6, step=11, wage=2500.0, difference=-50.0, confidence_score=79.59)
    ]
    assert result.rate_effective_date == date(2024, 1, 1)
    assert result.table_version == "scenario"


def test_exact_salary(scenario_table):
    result = resolve_reverse(scenario_table, "2400", "2024-06-01")
    assert result.exact_step == 10
    assert result.is_exact
    assert result.salary_difference == 0.0
    assert result.confidence_score == 100.0
    assert result.confidence_tier == "high"
    assert result.compliance_status == COMPLIANT
    assert result.compliance_notes == ["Salary exactly matches CAO rate"]


def test_every_rate_round_trips(history_table):
    as_of = date(2024, 10, 1)
    for scale, step in history_table.pairs():
        wage = resolve_forward(history_table, scale, step, as_of).monthly_wage
        result = resolve_reverse(history_table, wage, as_of)
        assert (result.scale, result.exact_step) == (scale, step)
        assert result.confidence_score == 100.0


def test_best_match_across_scales(history_table):
    result = resolve_reverse(history_table, 2500, date(2024, 10, 1))
    assert (result.scale, result.nearest_step) == (7, 1)
    assert result.confidence_score == 92.0
    assert result.confidence_tier == "high"
    assert result.salary_difference == -20.0
    assert result.compliance_status == UNDER_CAO
    assert result.compliance_notes[-1] == "May require salary adjustment to meet CAO requirements"
    assert [(a.scale, a.step, a.confidence_score) for a in result.alternative_matches] == [
        (6, 11, 80.0),
        (6, 10, 79.2),
        (7, 2, 40.0),
    ]
    assert result.scale_info["scale_category"] == LEAD_CATEGORY


def test_alternative_scores_never_increase(history_table):
    result = resolve_reverse(history_table, 2475, date(2024, 10, 1))
    scores = [result.confidence_score] + [a.confidence_score for a in result.alternative_matches]
    assert scores == sorted(scores, reverse=True)


def test_max_alternatives(history_table):
    settings = EngineSettings(max_alternatives=1)
    result = resolve_reverse(history_table, 2500, date(2024, 10, 1), settings=settings)
    assert len(result.alternative_matches) == 1
    none = resolve_reverse(
        history_table, 2500, date(2024, 10, 1), settings=EngineSettings(max_alternatives=0)
    )
    assert none.alternative_matches == []


def test_tie_goes_to_lower_scale_without_hint(history_table):
    result = resolve_reverse(history_table, 2510, date(2024, 3, 1))
    assert (result.scale, result.nearest_step) == (6, 11)
    assert result.confidence_score == 96.02
    assert (result.alternative_matches[0].scale, result.alternative_matches[0].step) == (7, 1)
    assert result.alternative_matches[0].confidence_score == 96.02


def test_hint_breaks_tie(history_table):
    result = resolve_reverse(history_table, 2510, date(2024, 3, 1), scale_hint=LEAD_CATEGORY)
    assert (result.scale, result.nearest_step) == (7, 1)
    assert result.alternative_matches[0].step == 11


def test_hint_within_configured_band(history_table):
    settings = EngineSettings(category_tie_band=15.0)
    result = resolve_reverse(
        history_table, 2500, date(2024, 10, 1), scale_hint=PM_CATEGORY, settings=settings
    )
    assert (result.scale, result.nearest_step) == (6, 11)
    assert result.confidence_score == 80.0
    assert [(a.scale, a.step) for a in result.alternative_matches] == [(7, 1), (6, 10), (7, 2)]


def test_hint_outside_default_band_is_ignored(history_table):
    result = resolve_reverse(history_table, 2500, date(2024, 10, 1), scale_hint=PM_CATEGORY)
    assert (result.scale, result.nearest_step) == (7, 1)


def test_unknown_hint_is_ignored(history_table):
    result = resolve_reverse(history_table, 2500, date(2024, 10, 1), scale_hint="Kok")
    assert (result.scale, result.nearest_step) == (7, 1)


def test_tolerance_band(scenario_table):
    settings = EngineSettings(compliance_tolerance_pct=ToleranceLevel.NORMAL.value)
    result = resolve_reverse(scenario_table, 2450, date(2024, 6, 1), settings=settings)
    assert result.compliance_status == COMPLIANT
    assert result.compliance_notes == ["Salary within tolerance of CAO rate (difference 50.0)"]


def test_under_cao(scenario_table):
    result = resolve_reverse(scenario_table, 2390, date(2024, 6, 1))
    assert result.nearest_step == 10
    assert result.salary_difference == -10.0
    assert result.confidence_score == 95.82
    assert result.compliance_status == UNDER_CAO


def test_significant_premium(scenario_table):
    result = resolve_reverse(scenario_table, 3100, date(2024, 6, 1))
    assert result.nearest_step == 11
    assert result.confidence_score == 0.0
    assert result.confidence_tier == "low"
    assert result.compliance_notes == [
        "Salary is 600.0 above CAO rate",
        "Significant premium above CAO rate",
    ]


def test_hourly_basis(history_table):
    settings = EngineSettings(wage_basis="hourly")
    result = resolve_reverse(history_table, 15.38, date(2024, 3, 1), settings=settings)
    assert (result.scale, result.exact_step) == (6, 10)
    assert result.wage_basis == "hourly"
    # only rows with an hourly wage are candidates
    assert [(a.scale, a.step) for a in result.alternative_matches] == [(6, 11)]


def test_hourly_basis_without_hourly_rates(history_table):
    settings = EngineSettings(wage_basis="hourly")
    with pytest.raises(OutOfRangeError):
        resolve_reverse(history_table, 15.38, date(2024, 10, 1), settings=settings)


@pytest.mark.parametrize("salary", [0, -5, "abc", True, float("nan"), float("inf"), None])
def test_invalid_salary(scenario_table, salary):
    with pytest.raises(AmbiguousInputError):
        resolve_reverse(scenario_table, salary, date(2024, 6, 1))


def test_invalid_salary_is_an_input_error(scenario_table):
    with pytest.raises(InputError):
        resolve_reverse(scenario_table, -1, date(2024, 6, 1))


def test_date_before_all_rates(scenario_table):
    with pytest.raises(OutOfRangeError):
        resolve_reverse(scenario_table, 2400, date(2023, 12, 31))


def test_to_dict(scenario_table):
    data = resolve_reverse(scenario_table, 2450, date(2024, 6, 1)).to_dict()
    assert data["input_date"] == "2024-06-01"
    assert data["rate_effective_date"] == "2024-01-01"
    assert data["alternative_matches"][0]["step"] == 11
    assert data["scale_info"]["min_step"] == 10
