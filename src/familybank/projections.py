"""What-if growth projections for the savings charts and the rate simulator.

These use compound growth and are illustrations only; posted balances
always come from :mod:`familybank.ledger`.
"""

from __future__ import annotations

import calendar
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from .clock import utcnow
from .models import GrowthPoint, RateSimulation
from .money import CENT, AmountLike, to_ledger_decimal, to_rate

MONTHS_PER_YEAR = 12


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // MONTHS_PER_YEAR
    month = month_index % MONTHS_PER_YEAR + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _require_years(years: int) -> int:
    if years < 0:
        raise ValueError("years must not be negative")
    return years


def compound_growth_schedule(
    initial_balance: AmountLike,
    interest_rate: AmountLike,
    *,
    years: int = 5,
    start: Optional[date] = None,
) -> Tuple[GrowthPoint, ...]:
    """Return month-by-month balances compounding monthly at ``interest_rate``.

    The schedule has ``years * 12 + 1`` points; month 0 is the starting
    balance on ``start`` (today by default).
    """

    _require_years(years)
    rate = to_rate(interest_rate)
    monthly_factor = Decimal(1) + rate / Decimal(100) / Decimal(MONTHS_PER_YEAR)
    first_day = start or utcnow().date()
    balance = to_ledger_decimal(initial_balance)
    points: list[GrowthPoint] = []
    for month in range(years * MONTHS_PER_YEAR + 1):
        points.append(
            GrowthPoint(
                month=month,
                on=_add_months(first_day, month),
                balance=balance.quantize(CENT, rounding=ROUND_HALF_UP),
            )
        )
        balance = balance * monthly_factor
    return tuple(points)


def project_annual_growth(balance: AmountLike, interest_rate: AmountLike, years: int) -> Decimal:
    """Return ``balance * (1 + rate/100) ** years`` rounded to cents."""

    _require_years(years)
    rate = to_rate(interest_rate)
    value = to_ledger_decimal(balance) * (Decimal(1) + rate / Decimal(100)) ** years
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def simulate_interest_rate(
    balance: AmountLike,
    current_rate: AmountLike,
    candidate_rate: AmountLike,
    *,
    years: int = 5,
) -> RateSimulation:
    """Compare where ``balance`` ends up after ``years`` under two rates."""

    return RateSimulation(
        balance=to_ledger_decimal(balance),
        current_rate=to_rate(current_rate),
        candidate_rate=to_rate(candidate_rate),
        years=years,
        current_projection=project_annual_growth(balance, current_rate, years),
        candidate_projection=project_annual_growth(balance, candidate_rate, years),
    )


__all__ = ["compound_growth_schedule", "project_annual_growth", "simulate_interest_rate"]
