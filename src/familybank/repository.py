"""Storage boundary for FamilyBank accounts."""

from __future__ import annotations

import threading
from decimal import Decimal
from typing import Dict, Optional, Protocol, Tuple

from .account import Account
from .exceptions import AccountNotFoundError, ConcurrentAppendError
from .models import Transaction
from .money import AmountLike, to_rate


class AccountRepository(Protocol):
    """What the service needs from persistent storage.

    ``append_transaction`` is a conditional write: it succeeds only while the
    stored account's latest transaction id still equals ``expected_last_id``
    (``None`` for an empty history), so two writers that read the same state
    cannot both append. When ``interest_rate`` is given the account switches
    to it in the same write, right after the transaction is recorded.
    """

    def add(self, account: Account) -> Account: ...

    def get(self, account_id: str) -> Optional[Account]: ...

    def list(self) -> Tuple[Account, ...]: ...

    def account_number_taken(self, account_number: str) -> bool: ...

    def append_transaction(
        self,
        account_id: str,
        transaction: Transaction,
        *,
        expected_last_id: Optional[str],
        interest_rate: AmountLike | None = None,
    ) -> Account: ...


class InMemoryAccountRepository:
    """Thread-safe, instance-scoped account store handing out detached copies."""

    def __init__(self) -> None:
        self._accounts: Dict[str, Account] = {}
        self._lock = threading.Lock()

    def add(self, account: Account) -> Account:
        with self._lock:
            if account.id in self._accounts:
                raise ValueError(f"Account '{account.id}' already exists.")
            if self._number_taken(account.account_number):
                raise ValueError(f"Account number '{account.account_number}' is already in use.")
            self._accounts[account.id] = account.copy()
            return account.copy()

    def get(self, account_id: str) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            return account.copy() if account else None

    def list(self) -> Tuple[Account, ...]:
        with self._lock:
            accounts = sorted(self._accounts.values(), key=lambda acc: (acc.created_at, acc.name))
            return tuple(account.copy() for account in accounts)

    def account_number_taken(self, account_number: str) -> bool:
        with self._lock:
            return self._number_taken(account_number)

    def append_transaction(
        self,
        account_id: str,
        transaction: Transaction,
        *,
        expected_last_id: Optional[str],
        interest_rate: AmountLike | None = None,
    ) -> Account:
        rate: Optional[Decimal] = to_rate(interest_rate) if interest_rate is not None else None
        with self._lock:
            account = self._require(account_id)
            last = account.last_transaction()
            current_last_id = last.id if last else None
            if current_last_id != expected_last_id:
                raise ConcurrentAppendError(
                    f"Account '{account_id}' changed since it was read "
                    f"(expected last transaction {expected_last_id!r}, found {current_last_id!r})."
                )
            account.record(transaction)
            if rate is not None:
                account.set_interest_rate(rate)
            return account.copy()

    def _require(self, account_id: str) -> Account:
        try:
            return self._accounts[account_id]
        except KeyError as exc:
            raise AccountNotFoundError(f"Account '{account_id}' does not exist.") from exc

    def _number_taken(self, account_number: str) -> bool:
        return any(acc.account_number == account_number for acc in self._accounts.values())


__all__ = ["AccountRepository", "InMemoryAccountRepository"]
