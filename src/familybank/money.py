"""Utilities for working with monetary values and rates in FamilyBank."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from .exceptions import InvalidAmountError, InvalidInterestRateError

CENT = Decimal("0.01")
# Interest and running balances keep sub-cent precision.
LEDGER_QUANTUM = Decimal("0.000001")
ZERO = Decimal("0")

AmountLike = Union[Decimal, int, float, str]


def _coerce(value: AmountLike) -> Decimal:
    if isinstance(value, bool):
        raise TypeError(f"Unsupported amount type: {type(value)!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    else:
        raise TypeError(f"Unsupported amount type: {type(value)!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def _quantize(value: AmountLike, quantum: Decimal) -> Decimal:
    try:
        return _coerce(value).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidAmountError(f"Amount {value} is too large to represent.") from exc


def to_decimal(value: AmountLike) -> Decimal:
    """Convert ``value`` to a :class:`~decimal.Decimal` with two decimal places."""

    return _quantize(value, CENT)


def to_cents(value: AmountLike) -> Decimal:
    """Like :func:`to_decimal` but reject values with fractions of a cent."""

    amount = to_decimal(value)
    if amount != _coerce(value):
        raise InvalidAmountError(f"Amount {value} has more than two decimal places.")
    return amount


def to_ledger_decimal(value: AmountLike) -> Decimal:
    """Convert ``value`` to the precision used for balances and interest."""

    return _quantize(value, LEDGER_QUANTUM)


def to_rate(value: AmountLike) -> Decimal:
    """Return an annual percentage rate, rejecting negative values."""

    rate = _coerce(value)
    if rate < ZERO:
        raise InvalidInterestRateError(f"Interest rate must be zero or greater, got {value}.")
    return rate


def require_positive(amount: Decimal) -> Decimal:
    if amount <= ZERO:
        raise InvalidAmountError("Amount must be greater than zero.")
    return amount


def format_currency(amount: Decimal) -> str:
    """Return ``amount`` as a currency formatted string (e.g. ``$12.34``)."""

    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if rounded < ZERO:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"


def format_rate(rate: Decimal) -> str:
    """Return ``rate`` as a percentage without trailing zeros (``2.5%``, ``10%``)."""

    text = format(rate.normalize(), "f")
    return f"{text}%"
