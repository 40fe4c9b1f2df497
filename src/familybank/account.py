"""Account object owning an append-only ledger for the FamilyBank application."""

from __future__ import annotations

import csv
import secrets
from datetime import datetime
from decimal import Decimal
from io import StringIO
from typing import Iterable, Optional, Sequence, Tuple
from uuid import uuid4

from . import config, ledger
from .clock import TimestampLike, normalize_timestamp, utcnow
from .exceptions import InvalidTimestampError
from .models import BalanceProjection, Transaction, TransactionRequest, TransactionType
from .money import ZERO, AmountLike, format_currency, format_rate, to_ledger_decimal, to_rate


def generate_account_number() -> str:
    """Return a random display account number in the form ``XXXX-XXXX-XXXX-XXXX``."""

    return "-".join(f"{secrets.randbelow(10_000):04d}" for _ in range(4))


class Account:
    """A child's sub-account with an interest rate and a transaction history."""

    __slots__ = (
        "id",
        "name",
        "account_number",
        "created_at",
        "_interest_rate",
        "_balance",
        "_transactions",
    )

    def __init__(
        self,
        name: str,
        *,
        interest_rate: AmountLike | None = None,
        account_id: str | None = None,
        account_number: str | None = None,
        created_at: TimestampLike | None = None,
        transactions: Iterable[Transaction] = (),
    ) -> None:
        if not name or not name.strip():
            raise ValueError("Account name must not be empty.")
        self.id = account_id or str(uuid4())
        self.name = name.strip()
        self.account_number = account_number or generate_account_number()
        self.created_at = normalize_timestamp(created_at) if created_at is not None else utcnow()
        self._interest_rate: Decimal = to_rate(
            config.DEFAULT_INTEREST_RATE if interest_rate is None else interest_rate
        )
        self._balance: Decimal = to_ledger_decimal(ZERO)
        self._transactions: list[Transaction] = []
        for transaction in sorted(transactions, key=lambda tx: tx.timestamp):
            self.record(transaction)

    @property
    def balance(self) -> Decimal:
        """Return the running balance of the most recent transaction."""

        return self._balance

    @property
    def interest_rate(self) -> Decimal:
        return self._interest_rate

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        """Return an immutable view of the transaction history."""

        return tuple(self._transactions)

    def set_interest_rate(self, rate: AmountLike) -> Decimal:
        """Replace the rate without posting anything; see :meth:`change_interest_rate`."""

        self._interest_rate = to_rate(rate)
        return self._interest_rate

    def record(self, transaction: Transaction) -> Transaction:
        """Append an already computed transaction and sync the cached balance."""

        last = self.last_transaction()
        if last is not None and transaction.timestamp < last.timestamp:
            raise InvalidTimestampError(
                f"Transaction {transaction.id} is dated before the latest posted transaction."
            )
        self._transactions.append(transaction)
        self._balance = transaction.running_balance
        return transaction

    def post(self, request: TransactionRequest) -> Transaction:
        """Compute interest and running balance for ``request`` and append it."""

        transaction = ledger.accrue_on_append(self._transactions, self._interest_rate, request)
        return self.record(transaction)

    def deposit(
        self,
        amount: AmountLike,
        description: str = "Deposit",
        *,
        timestamp: TimestampLike | None = None,
    ) -> Transaction:
        """Add money to the account."""

        return self.post(
            TransactionRequest(
                type=TransactionType.DEPOSIT,
                amount=amount,
                description=description,
                timestamp=timestamp or utcnow(),
            )
        )

    def withdraw(
        self,
        amount: AmountLike,
        description: str = "Withdrawal",
        *,
        timestamp: TimestampLike | None = None,
    ) -> Transaction:
        """Remove money from the account."""

        return self.post(
            TransactionRequest(
                type=TransactionType.WITHDRAWAL,
                amount=amount,
                description=description,
                timestamp=timestamp or utcnow(),
            )
        )

    def change_interest_rate(
        self, new_rate: AmountLike, *, at: TimestampLike | None = None
    ) -> Transaction:
        """Post interest accrued under the current rate, then switch to ``new_rate``."""

        transaction = ledger.change_interest_rate(self, new_rate, at or utcnow())
        self.record(transaction)
        self.set_interest_rate(new_rate)
        return transaction

    def projected_balance(self, *, as_of: TimestampLike | None = None) -> BalanceProjection:
        return ledger.project_current_balance(self._transactions, self._interest_rate, as_of)

    @property
    def total_interest(self) -> Decimal:
        """Return all interest folded into the ledger so far."""

        return sum((tx.accumulated_interest for tx in self._transactions), to_ledger_decimal(ZERO))

    def copy(self) -> "Account":
        """Return a detached copy sharing only the immutable transaction records."""

        clone = Account.__new__(Account)
        clone.id = self.id
        clone.name = self.name
        clone.account_number = self.account_number
        clone.created_at = self.created_at
        clone._interest_rate = self._interest_rate
        clone._balance = self._balance
        clone._transactions = list(self._transactions)
        return clone

    def recent_transactions(self, count: int = 5) -> Tuple[Transaction, ...]:
        """Return the most recent ``count`` transactions."""

        if count < 0:
            raise ValueError("count must not be negative")
        if count == 0:
            return tuple()
        return tuple(self._transactions[-count:])

    def filter_transactions(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        types: Optional[Sequence[TransactionType]] = None,
    ) -> Tuple[Transaction, ...]:
        """Return transactions filtered by the provided criteria."""

        start = normalize_timestamp(start) if start else None
        end = normalize_timestamp(end) if end else None
        result: list[Transaction] = []
        for transaction in self._transactions:
            if start and transaction.timestamp < start:
                continue
            if end and transaction.timestamp > end:
                continue
            if types and transaction.type not in types:
                continue
            result.append(transaction)
        return tuple(result)

    def last_transaction(
        self, *, transaction_type: TransactionType | None = None
    ) -> Optional[Transaction]:
        """Return the most recent transaction optionally matching ``transaction_type``."""

        for transaction in reversed(self._transactions):
            if transaction_type and transaction.type is not transaction_type:
                continue
            return transaction
        return None

    def generate_statement(
        self, *, max_transactions: int = 10, as_of: TimestampLike | None = None
    ) -> str:
        """Create a human-readable summary of the account state."""

        projection = self.projected_balance(as_of=as_of)
        lines = [
            f"Account: {self.name} ({self.account_number})",
            f"Interest rate: {format_rate(self._interest_rate)} per year",
            f"Posted balance: {format_currency(self._balance)}",
            f"Interest earned to date: {format_currency(self.total_interest)}",
            f"Balance with pending interest: {format_currency(projection.projected_balance)}",
            "",
            "Recent transactions:",
        ]
        transactions = self.recent_transactions(min(max_transactions, len(self._transactions)))
        if not transactions:
            lines.append("  (no transactions yet)")
        for transaction in transactions:
            if transaction.is_rate_change:
                posting = "Rate change:"
            else:
                posting = (
                    f"{transaction.type.value.title()}: {format_currency(transaction.amount)}"
                )
            lines.append(
                "  "
                f"[{transaction.timestamp:%Y-%m-%d}] "
                f"{posting} "
                f"+ interest {format_currency(transaction.accumulated_interest)} "
                f"(balance {format_currency(transaction.running_balance)})"
                f" {transaction.description}"
            )
        return "\n".join(lines)

    def export_transactions_csv(
        self,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> str:
        """Return a CSV export of the transaction ledger."""

        buffer = StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["timestamp", "type", "description", "amount", "interest", "balance"])
        for transaction in self.filter_transactions(start=start, end=end):
            writer.writerow(
                [
                    transaction.timestamp.isoformat(),
                    transaction.type.value,
                    transaction.description,
                    f"{transaction.amount:.2f}",
                    f"{transaction.accumulated_interest:.6f}",
                    f"{transaction.running_balance:.6f}",
                ]
            )
        return buffer.getvalue()

    def __repr__(self) -> str:
        return (
            f"Account(name={self.name!r}, account_number={self.account_number!r}, "
            f"balance={self._balance}, interest_rate={self._interest_rate})"
        )
