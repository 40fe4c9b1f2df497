from datetime import date
from decimal import Decimal

import pytest

from familybank.exceptions import InvalidInterestRateError
from familybank.projections import (
    compound_growth_schedule,
    project_annual_growth,
    simulate_interest_rate,
)


def test_schedule_compounds_monthly() -> None:
    schedule = compound_growth_schedule(100, 12, years=1, start=date(2024, 1, 15))

    assert [point.month for point in schedule[:3]] == [0, 1, 2]
    assert [point.balance for point in schedule[:3]] == [
        Decimal("100.00"),
        Decimal("101.00"),
        Decimal("102.01"),
    ]
    assert schedule[-1].balance == Decimal("112.68")
    assert schedule[-1].on == date(2025, 1, 15)


def test_schedule_clamps_month_end_dates() -> None:
    schedule = compound_growth_schedule(50, 2, years=1, start=date(2024, 1, 31))

    assert schedule[1].on == date(2024, 2, 29)
    assert schedule[2].on == date(2024, 3, 31)
    assert schedule[3].on == date(2024, 4, 30)


def test_zero_rate_schedule_is_flat() -> None:
    schedule = compound_growth_schedule("42.10", 0, years=2, start=date(2024, 6, 1))

    assert len(schedule) == 25
    assert {point.balance for point in schedule} == {Decimal("42.10")}


def test_annual_growth_and_simulation() -> None:
    simulation = simulate_interest_rate(1000, "2.5", 5, years=5)

    assert project_annual_growth(1000, 10, 2) == Decimal("1210.00")
    assert simulation.current_projection == Decimal("1131.41")
    assert simulation.candidate_projection == Decimal("1276.28")
    assert simulation.difference == Decimal("144.87")
    assert simulation.years == 5


def test_invalid_projection_inputs() -> None:
    with pytest.raises(InvalidInterestRateError):
        compound_growth_schedule(100, -1)

    with pytest.raises(ValueError):
        compound_growth_schedule(100, 2, years=-1)

    with pytest.raises(InvalidInterestRateError):
        simulate_interest_rate(100, 2, -3)
