"""High level service for coordinating FamilyBank accounts."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Optional, Tuple

from . import config, ledger
from .account import Account, generate_account_number
from .api import EventDispatcher, LedgerExporter
from .clock import Clock, TimestampLike, normalize_timestamp, utcnow
from .exceptions import AccountNotFoundError, ConcurrentAppendError
from .models import (
    BalanceProjection,
    GrowthPoint,
    RateSimulation,
    Transaction,
    TransactionRequest,
    TransactionType,
)
from .money import AmountLike, to_rate
from .ops import StructuredLogger
from .projections import compound_growth_schedule, simulate_interest_rate
from .repository import AccountRepository, InMemoryAccountRepository

_ACCOUNT_NUMBER_ATTEMPTS = 20


class FamilyBank:
    """Manage accounts, postings and interest through an :class:`AccountRepository`."""

    __slots__ = (
        "_repository",
        "_logger",
        "_clock",
        "_events",
        "_exporter",
        "_default_interest_rate",
        "_append_retries",
    )

    def __init__(
        self,
        repository: AccountRepository | None = None,
        *,
        logger: StructuredLogger | None = None,
        clock: Clock | None = None,
        default_interest_rate: AmountLike | None = None,
        append_retries: int | None = None,
    ) -> None:
        self._repository: AccountRepository = repository or InMemoryAccountRepository()
        self._clock: Clock = clock or utcnow
        self._logger = logger or StructuredLogger(path=config.LOG_PATH, clock=self._clock)
        self._events = EventDispatcher()
        self._exporter = LedgerExporter()
        self._default_interest_rate = to_rate(
            config.DEFAULT_INTEREST_RATE if default_interest_rate is None else default_interest_rate
        )
        retries = config.APPEND_RETRIES if append_retries is None else append_retries
        if retries < 1:
            raise ValueError("append_retries must be at least 1")
        self._append_retries = retries

    @property
    def logger(self) -> StructuredLogger:
        return self._logger

    def subscribe(self, listener: Callable[[Dict[str, object]], None]) -> None:
        self._events.register(listener)

    def unsubscribe(self, listener: Callable[[Dict[str, object]], None]) -> None:
        self._events.unregister(listener)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------
    def create_account(
        self,
        name: str,
        *,
        interest_rate: AmountLike | None = None,
        created_at: TimestampLike | None = None,
    ) -> Account:
        account = Account(
            name,
            interest_rate=self._default_interest_rate if interest_rate is None else interest_rate,
            account_number=self._unused_account_number(),
            created_at=created_at or self._clock(),
        )
        stored = self._repository.add(account)
        self._logger.log(
            "account_created",
            account_id=stored.id,
            name=stored.name,
            interest_rate=stored.interest_rate,
        )
        self._events.dispatch({"event": "account_created", "account_id": stored.id})
        return stored

    def list_accounts(self) -> Tuple[Account, ...]:
        return self._repository.list()

    def get_account(self, account_id: str) -> Account:
        account = self._repository.get(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account '{account_id}' does not exist.")
        return account

    def _unused_account_number(self) -> str:
        for _ in range(_ACCOUNT_NUMBER_ATTEMPTS):
            candidate = generate_account_number()
            if not self._repository.account_number_taken(candidate):
                return candidate
        raise RuntimeError("Could not allocate an unused account number.")

    # ------------------------------------------------------------------
    # Postings
    # ------------------------------------------------------------------
    def _append(
        self,
        account_id: str,
        build: Callable[[Account], Transaction],
        *,
        interest_rate: Decimal | None = None,
    ) -> Tuple[Account, Account, Transaction]:
        """Read, compute and conditionally write, re-reading on a lost race.

        Returns the account as read, the account as stored and the new record.
        """

        attempt = 0
        while True:
            attempt += 1
            account = self.get_account(account_id)
            last = account.last_transaction()
            transaction = build(account)
            try:
                stored = self._repository.append_transaction(
                    account_id,
                    transaction,
                    expected_last_id=last.id if last else None,
                    interest_rate=interest_rate,
                )
            except ConcurrentAppendError:
                self._logger.log("append_conflict", account_id=account_id, attempt=attempt)
                if attempt >= self._append_retries:
                    raise
                continue
            return account, stored, transaction

    def add_transaction(
        self,
        account_id: str,
        transaction_type: TransactionType | str,
        amount: AmountLike,
        description: str,
        *,
        timestamp: TimestampLike | None = None,
    ) -> Transaction:
        request = TransactionRequest(
            type=TransactionType(transaction_type),
            amount=amount,
            description=description,
            timestamp=timestamp or self._clock(),
        )

        def build(account: Account) -> Transaction:
            return ledger.accrue_on_append(account.transactions, account.interest_rate, request)

        _, stored, transaction = self._append(account_id, build)
        self._logger.log(
            "transaction_posted",
            account_id=account_id,
            transaction_id=transaction.id,
            type=transaction.type,
            amount=transaction.amount,
            interest=transaction.accumulated_interest,
            balance=stored.balance,
        )
        self._events.dispatch(
            {
                "event": "transaction_posted",
                "account_id": account_id,
                "transaction": self._exporter.transaction_to_dict(transaction),
            }
        )
        return transaction

    def deposit(
        self,
        account_id: str,
        amount: AmountLike,
        *,
        description: str = "Deposit",
        timestamp: TimestampLike | None = None,
    ) -> Transaction:
        return self.add_transaction(
            account_id, TransactionType.DEPOSIT, amount, description, timestamp=timestamp
        )

    def withdraw(
        self,
        account_id: str,
        amount: AmountLike,
        *,
        description: str = "Withdrawal",
        timestamp: TimestampLike | None = None,
    ) -> Transaction:
        return self.add_transaction(
            account_id, TransactionType.WITHDRAWAL, amount, description, timestamp=timestamp
        )

    def change_interest_rate(
        self, account_id: str, new_rate: AmountLike, *, at: TimestampLike | None = None
    ) -> Transaction:
        """Post interest earned under the old rate, then switch the account to ``new_rate``."""

        rate = to_rate(new_rate)
        moment = normalize_timestamp(at) if at is not None else self._clock()

        def build(account: Account) -> Transaction:
            return ledger.change_interest_rate(account, rate, moment)

        before, _, transaction = self._append(account_id, build, interest_rate=rate)
        self._logger.log(
            "interest_rate_changed",
            account_id=account_id,
            transaction_id=transaction.id,
            old_rate=before.interest_rate,
            new_rate=rate,
            interest=transaction.accumulated_interest,
        )
        self._events.dispatch(
            {
                "event": "interest_rate_changed",
                "account_id": account_id,
                "old_rate": float(before.interest_rate),
                "new_rate": float(rate),
            }
        )
        return transaction

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------
    def current_balance(
        self, account_id: str, *, as_of: TimestampLike | None = None
    ) -> BalanceProjection:
        account = self.get_account(account_id)
        return ledger.project_current_balance(
            account.transactions, account.interest_rate, as_of if as_of is not None else self._clock()
        )

    def growth_projection(
        self,
        account_id: str,
        *,
        years: int | None = None,
        start: Optional[date] = None,
    ) -> Tuple[GrowthPoint, ...]:
        account = self.get_account(account_id)
        return compound_growth_schedule(
            account.balance,
            account.interest_rate,
            years=config.PROJECTION_YEARS if years is None else years,
            start=start or self._clock().date(),
        )

    def simulate_interest_rate(
        self, account_id: str, candidate_rate: AmountLike, *, years: int | None = None
    ) -> RateSimulation:
        account = self.get_account(account_id)
        return simulate_interest_rate(
            account.balance,
            account.interest_rate,
            candidate_rate,
            years=config.PROJECTION_YEARS if years is None else years,
        )

    def snapshot(self, account_id: str, *, as_of: TimestampLike | None = None) -> Dict[str, object]:
        account = self.get_account(account_id)
        projection = ledger.project_current_balance(
            account.transactions, account.interest_rate, as_of if as_of is not None else self._clock()
        )
        return self._exporter.account_snapshot(account, projection=projection)

    def summary(self) -> Dict[str, Decimal]:
        """Return the posted balance of every account keyed by account id."""

        return {account.id: account.balance for account in self.list_accounts()}


__all__ = ["FamilyBank"]
