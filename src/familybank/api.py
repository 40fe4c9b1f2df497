"""Canonical record shapes and event hooks for FamilyBank consumers."""

from __future__ import annotations

import json
from decimal import InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional, TYPE_CHECKING

from .clock import isoformat
from .exceptions import MalformedRecordError
from .models import BalanceProjection, Transaction, TransactionType

if TYPE_CHECKING:  # pragma: no cover
    from .account import Account

TRANSACTION_FIELDS = (
    "id",
    "timestamp",
    "type",
    "amount",
    "description",
    "runningBalance",
    "accumulatedInterest",
)
# Field names from older payload revisions that must not be accepted silently.
LEGACY_TRANSACTION_FIELDS = {"transactionId": "id", "date": "timestamp"}


class LedgerExporter:
    """Convert FamilyBank data structures to JSON friendly dictionaries.

    Decimal fields are written as strings so records read back through
    :func:`transaction_from_dict` keep every digit.
    """

    def transaction_to_dict(self, transaction: Transaction) -> Dict[str, object]:
        return {
            "id": transaction.id,
            "timestamp": isoformat(transaction.timestamp),
            "type": transaction.type.value,
            "amount": str(transaction.amount),
            "description": transaction.description,
            "runningBalance": str(transaction.running_balance),
            "accumulatedInterest": str(transaction.accumulated_interest),
        }

    def projection_to_dict(self, projection: BalanceProjection) -> Dict[str, object]:
        return {
            "accruedInterest": str(projection.accrued_interest),
            "projectedBalance": str(projection.projected_balance),
            "asOf": isoformat(projection.as_of),
            "lastTransactionAt": (
                isoformat(projection.last_transaction_at) if projection.last_transaction_at else None
            ),
        }

    def account_snapshot(
        self, account: "Account", *, projection: Optional[BalanceProjection] = None
    ) -> Dict[str, object]:
        snapshot: Dict[str, object] = {
            "id": account.id,
            "name": account.name,
            "accountNumber": account.account_number,
            "interestRate": str(account.interest_rate),
            "balance": str(account.balance),
            "createdAt": isoformat(account.created_at),
            "transactions": [self.transaction_to_dict(tx) for tx in account.transactions],
        }
        if projection is not None:
            snapshot["projection"] = self.projection_to_dict(projection)
        return snapshot

    def to_json(self, payload: Dict[str, object]) -> str:
        return json.dumps(payload, sort_keys=True)


def transaction_from_dict(payload: Mapping[str, Any]) -> Transaction:
    """Build a :class:`Transaction` from the canonical camelCase shape.

    Missing fields, unknown transaction types and legacy field names raise
    :class:`~familybank.exceptions.MalformedRecordError`.
    """

    legacy = sorted(key for key in LEGACY_TRANSACTION_FIELDS if key in payload)
    if legacy:
        renames = ", ".join(f"{key!r} -> {LEGACY_TRANSACTION_FIELDS[key]!r}" for key in legacy)
        raise MalformedRecordError(f"Legacy transaction fields are not accepted: {renames}.")
    missing = [name for name in TRANSACTION_FIELDS if name not in payload]
    if missing:
        raise MalformedRecordError(f"Transaction record is missing fields: {', '.join(missing)}.")
    try:
        return Transaction(
            id=str(payload["id"]),
            timestamp=payload["timestamp"],
            type=TransactionType(payload["type"]),
            amount=payload["amount"],
            description=str(payload["description"]),
            running_balance=payload["runningBalance"],
            accumulated_interest=payload["accumulatedInterest"],
        )
    except (TypeError, ValueError, InvalidOperation) as exc:
        raise MalformedRecordError(f"Invalid transaction record {payload.get('id')!r}: {exc}") from exc


class EventDispatcher:
    """Synchronously fan ledger events out to registered listeners.

    :class:`~familybank.service.FamilyBank` dispatches ``account_created``,
    ``transaction_posted`` (carrying the canonical record) and
    ``interest_rate_changed`` (old and new rate) events.
    """

    def __init__(self) -> None:
        self._listeners: list[Callable[[Dict[str, object]], None]] = []

    def register(self, listener: Callable[[Dict[str, object]], None]) -> None:
        self._listeners.append(listener)

    def unregister(self, listener: Callable[[Dict[str, object]], None]) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def dispatch(self, event: Dict[str, object]) -> None:
        for listener in list(self._listeners):
            listener(event)


__all__ = ["EventDispatcher", "LedgerExporter", "transaction_from_dict"]
