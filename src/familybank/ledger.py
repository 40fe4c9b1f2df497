"""Running-balance and interest-accrual calculations for an account ledger.

Interest is simple daily proration applied once per gap between postings::

    interest = previous_balance * (rate / 100 / 365) * elapsed_days

where ``elapsed_days`` is fractional, so sub-day gaps accrue proportionally
and two postings at the same instant accrue nothing. Every function here is
pure: inputs are never mutated and nothing is read from or written to
storage. The only clock read is the defaulted ``as_of`` of
:func:`project_current_balance`.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Tuple

from .clock import TimestampLike, normalize_timestamp, utcnow
from .exceptions import InvalidTimestampError
from .models import (
    BalanceProjection,
    Transaction,
    TransactionRequest,
    TransactionType,
    new_transaction_id,
)
from .money import (
    LEDGER_QUANTUM,
    ZERO,
    AmountLike,
    format_rate,
    require_positive,
    to_ledger_decimal,
    to_rate,
)

if TYPE_CHECKING:  # pragma: no cover
    from .account import Account

SECONDS_PER_DAY = Decimal(86400)
DAYS_PER_YEAR = Decimal(365)
_MICROSECONDS_PER_SECOND = Decimal(1_000_000)


def elapsed_days(start: datetime, end: datetime) -> Decimal:
    """Return the fractional number of days from ``start`` to ``end``."""

    delta: timedelta = end - start
    seconds = (
        Decimal(delta.days) * SECONDS_PER_DAY
        + Decimal(delta.seconds)
        + Decimal(delta.microseconds) / _MICROSECONDS_PER_SECOND
    )
    return seconds / SECONDS_PER_DAY


def accrued_interest(balance: Decimal, interest_rate: AmountLike, days: Decimal) -> Decimal:
    """Return simple prorated interest on ``balance`` over ``days`` days."""

    rate = to_rate(interest_rate)
    if days <= ZERO or rate == ZERO or balance == ZERO:
        return ZERO.quantize(LEDGER_QUANTUM)
    interest = balance * rate * days / (Decimal(100) * DAYS_PER_YEAR)
    return to_ledger_decimal(interest)


def latest_transaction(transactions: Iterable[Transaction]) -> Optional[Transaction]:
    """Return the most recent transaction, or ``None`` for an empty history.

    Ties on timestamp go to the record that appears last in ``transactions``.
    """

    latest: Optional[Transaction] = None
    for transaction in transactions:
        if latest is None or transaction.timestamp >= latest.timestamp:
            latest = transaction
    return latest


def accrue_on_append(
    prior_transactions: Iterable[Transaction],
    interest_rate: AmountLike,
    request: TransactionRequest,
    *,
    transaction_id: Optional[str] = None,
) -> Transaction:
    """Compute the record to append for ``request``.

    ``prior_transactions`` may be empty and in any order. The returned
    record folds interest accrued on the previous running balance since the
    previous posting into its ``running_balance`` and reports that interest
    separately as ``accumulated_interest``.

    Raises :class:`~familybank.exceptions.InvalidAmountError` when the amount
    is not positive and :class:`~familybank.exceptions.InvalidTimestampError`
    when ``request`` is dated before the latest prior transaction.
    """

    require_positive(request.amount)
    rate = to_rate(interest_rate)
    previous = latest_transaction(prior_transactions)
    previous_balance = previous.running_balance if previous else ZERO
    previous_timestamp = previous.timestamp if previous else request.timestamp
    if request.timestamp < previous_timestamp:
        raise InvalidTimestampError(
            f"Transaction at {request.timestamp.isoformat()} precedes the latest posted "
            f"transaction at {previous_timestamp.isoformat()}."
        )
    interest = accrued_interest(
        previous_balance, rate, elapsed_days(previous_timestamp, request.timestamp)
    )
    return Transaction(
        id=transaction_id or new_transaction_id(),
        timestamp=request.timestamp,
        type=request.type,
        amount=request.amount,
        description=request.description,
        running_balance=previous_balance + interest + request.type.signed(request.amount),
        accumulated_interest=interest,
    )


def project_current_balance(
    transactions: Iterable[Transaction],
    interest_rate: AmountLike,
    as_of: Optional[TimestampLike] = None,
) -> BalanceProjection:
    """Return the balance as of ``as_of`` including not-yet-posted interest.

    Nothing is posted. An empty history projects to zero.
    """

    moment = normalize_timestamp(as_of) if as_of is not None else utcnow()
    rate = to_rate(interest_rate)
    latest = latest_transaction(transactions)
    if latest is None:
        zero = ZERO.quantize(LEDGER_QUANTUM)
        return BalanceProjection(accrued_interest=zero, projected_balance=zero, as_of=moment)
    if moment < latest.timestamp:
        raise InvalidTimestampError(
            f"Projection time {moment.isoformat()} precedes the latest transaction "
            f"at {latest.timestamp.isoformat()}."
        )
    interest = accrued_interest(latest.running_balance, rate, elapsed_days(latest.timestamp, moment))
    return BalanceProjection(
        accrued_interest=interest,
        projected_balance=latest.running_balance + interest,
        as_of=moment,
        last_transaction_at=latest.timestamp,
    )


def rate_change_description(old_rate: Decimal, new_rate: Decimal) -> str:
    return f"Interest rate changed from {format_rate(old_rate)} to {format_rate(new_rate)}"


def change_interest_rate(
    account: "Account",
    new_rate: AmountLike,
    at: TimestampLike,
    *,
    transaction_id: Optional[str] = None,
) -> Transaction:
    """Return the zero-amount record that closes out interest under the old rate.

    The record's ``accumulated_interest`` is exactly what
    :func:`project_current_balance` reports at ``at`` under the account's
    current rate. ``account`` is not modified; callers post the record and
    only then switch the rate.
    """

    old_rate = to_rate(account.interest_rate)
    rate = to_rate(new_rate)
    moment = normalize_timestamp(at)
    projection = project_current_balance(account.transactions, old_rate, moment)
    return Transaction(
        id=transaction_id or new_transaction_id(),
        timestamp=moment,
        type=TransactionType.DEPOSIT,
        amount=ZERO,
        description=rate_change_description(old_rate, rate),
        running_balance=projection.projected_balance,
        accumulated_interest=projection.accrued_interest,
    )


def find_inconsistencies(transactions: Sequence[Transaction]) -> Tuple[str, ...]:
    """Return ids of records that break the running-balance chain.

    ``transactions`` are checked in the given order: each record must not
    predate its predecessor, and its running balance must equal the previous
    running balance plus its signed amount plus its accumulated interest.
    """

    offending: list[str] = []
    previous: Optional[Transaction] = None
    for transaction in transactions:
        previous_balance = previous.running_balance if previous else ZERO
        expected = previous_balance + transaction.signed_amount + transaction.accumulated_interest
        out_of_order = previous is not None and transaction.timestamp < previous.timestamp
        if out_of_order or transaction.running_balance != expected:
            offending.append(transaction.id)
        previous = transaction
    return tuple(offending)


__all__ = [
    "DAYS_PER_YEAR",
    "SECONDS_PER_DAY",
    "accrue_on_append",
    "accrued_interest",
    "change_interest_rate",
    "elapsed_days",
    "find_inconsistencies",
    "latest_transaction",
    "project_current_balance",
    "rate_change_description",
]
