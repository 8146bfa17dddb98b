from datetime import date

from cao_model.resolution.progression import ProgressionStep, get_progression
from cao_model.wage_scales.models import WageRate
from cao_model.wage_scales.table import WageScaleTable


def test_progression_oldest_first(history_table):
    progression = get_progression(history_table, 6, 10)
    assert [p.effective_date for p in progression] == [
        date(2024, 1, 1),
        date(2024, 7, 1),
        date(2025, 1, 1),
    ]
    assert [p.wage for p in progression] == [2400.0, 2448.0, 2497.0]
    assert [p.increase_from_previous for p in progression] == [None, 48.0, 49.0]
    assert [p.increase_percentage for p in progression] == [None, 2.0, 2.0]


def test_progression_single_rate(history_table):
    assert get_progression(history_table, 7, 1) == [
        ProgressionStep(date(2024, 1, 1), 2520.0, None, None)
    ]


def test_progression_unknown_pair_is_empty(history_table):
    assert get_progression(history_table, 6, 23) == []
    assert get_progression(history_table, 9, 1) == []


def test_progression_missing_basis_values(history_table):
    progression = get_progression(history_table, 6, 10, wage_basis="hourly")
    assert [p.wage for p in progression] == [15.38, None, None]
    assert all(p.increase_from_previous is None for p in progression)


def test_progression_decrease_is_negative(scale6):
    table = WageScaleTable(
        {6: scale6},
        [
            WageRate(6, 12, date(2024, 1, 1), monthly_wage=2600.0),
            WageRate(6, 12, date(2024, 6, 1), monthly_wage=2574.0),
        ],
        version="decrease",
    )
    progression = get_progression(table, 6, 12)
    assert progression[1].increase_from_previous == -26.0
    assert progression[1].increase_percentage == -1.0
