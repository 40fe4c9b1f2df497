"""Domain models used by the FamilyBank package."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from .clock import normalize_timestamp
from .money import ZERO, to_cents, to_decimal, to_ledger_decimal


class TransactionType(str, Enum):
    """Enumerates the supported types of account transactions."""

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    def signed(self, amount: Decimal) -> Decimal:
        """Return ``amount`` with the sign implied by this transaction type."""

        return amount if self is TransactionType.DEPOSIT else -amount


def new_transaction_id() -> str:
    return str(uuid4())


@dataclass(frozen=True, slots=True)
class TransactionRequest:
    """A deposit or withdrawal that has not been posted to a ledger yet."""

    type: TransactionType
    amount: Decimal
    description: str
    timestamp: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", TransactionType(self.type))
        object.__setattr__(self, "amount", to_cents(self.amount))
        object.__setattr__(self, "timestamp", normalize_timestamp(self.timestamp))


@dataclass(frozen=True, slots=True)
class Transaction:
    """A posted ledger entry. Never edited once created."""

    id: str
    timestamp: datetime
    type: TransactionType
    amount: Decimal
    description: str
    running_balance: Decimal
    accumulated_interest: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "type", TransactionType(self.type))
        object.__setattr__(self, "timestamp", normalize_timestamp(self.timestamp))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "running_balance", to_ledger_decimal(self.running_balance))
        object.__setattr__(self, "accumulated_interest", to_ledger_decimal(self.accumulated_interest))
        if self.amount < ZERO:
            raise ValueError("amount cannot be negative; the sign comes from the type.")

    @property
    def signed_amount(self) -> Decimal:
        return self.type.signed(self.amount)

    @property
    def is_rate_change(self) -> bool:
        """True for the zero-amount marker posted when the interest rate changes."""

        return self.amount == ZERO


@dataclass(frozen=True, slots=True)
class BalanceProjection:
    """Live balance including interest accrued since the last posted transaction."""

    accrued_interest: Decimal
    projected_balance: Decimal
    as_of: datetime
    last_transaction_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class GrowthPoint:
    """One month on a compound-growth curve."""

    month: int
    on: date
    balance: Decimal


@dataclass(frozen=True, slots=True)
class RateSimulation:
    """Side-by-side projection of a balance under two interest rates."""

    balance: Decimal
    current_rate: Decimal
    candidate_rate: Decimal
    years: int
    current_projection: Decimal
    candidate_projection: Decimal

    @property
    def difference(self) -> Decimal:
        return self.candidate_projection - self.current_projection


__all__ = [
    "BalanceProjection",
    "GrowthPoint",
    "RateSimulation",
    "Transaction",
    "TransactionRequest",
    "TransactionType",
    "new_transaction_id",
]
