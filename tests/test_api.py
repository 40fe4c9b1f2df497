import json
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from familybank.account import Account
from familybank.api import EventDispatcher, LedgerExporter, transaction_from_dict
from familybank.exceptions import MalformedRecordError
from familybank.ledger import accrue_on_append, find_inconsistencies
from familybank.models import TransactionRequest, TransactionType

T0 = datetime(2024, 2, 1, 7, 30, 0)


def canonical_payload(**overrides):
    payload = {
        "id": "tx-1",
        "timestamp": "2024-02-01T07:30:00Z",
        "type": "deposit",
        "amount": 12.5,
        "description": "Allowance",
        "runningBalance": 12.5,
        "accumulatedInterest": 0,
    }
    payload.update(overrides)
    return payload


def test_transaction_to_dict_uses_canonical_field_names() -> None:
    account = Account("Ava", interest_rate="3.65", created_at=T0)
    account.deposit(1000, timestamp=T0)
    transaction = account.deposit(1, "Coin", timestamp=T0 + timedelta(days=10))

    payload = LedgerExporter().transaction_to_dict(transaction)

    assert set(payload) == {
        "id",
        "timestamp",
        "type",
        "amount",
        "description",
        "runningBalance",
        "accumulatedInterest",
    }
    assert payload["timestamp"] == "2024-02-11T07:30:00Z"
    assert payload["runningBalance"] == "1002.000000"
    assert payload["accumulatedInterest"] == "1.000000"


def test_account_snapshot_serialises_to_json() -> None:
    account = Account("Ava", interest_rate="2.5", account_number="1234-5678-9012-3456", created_at=T0)
    account.deposit(5, timestamp=T0)
    exporter = LedgerExporter()

    snapshot = exporter.account_snapshot(account, projection=account.projected_balance(as_of=T0))
    decoded = json.loads(exporter.to_json(snapshot))

    assert decoded["accountNumber"] == "1234-5678-9012-3456"
    assert decoded["interestRate"] == "2.5"
    assert decoded["createdAt"] == "2024-02-01T07:30:00Z"
    assert decoded["projection"]["lastTransactionAt"] == "2024-02-01T07:30:00Z"
    assert len(decoded["transactions"]) == 1


def test_transaction_from_dict_parses_canonical_shape() -> None:
    transaction = transaction_from_dict(canonical_payload())

    assert transaction.id == "tx-1"
    assert transaction.timestamp == T0
    assert transaction.type is TransactionType.DEPOSIT
    assert transaction.amount == Decimal("12.50")
    assert transaction.running_balance == Decimal("12.5")


def test_records_survive_a_json_round_trip_digit_for_digit() -> None:
    first = accrue_on_append(
        [],
        "3.65",
        TransactionRequest(type="deposit", amount="9800000000", description="Trust", timestamp=T0),
    )
    second = accrue_on_append(
        [first],
        "3.65",
        TransactionRequest(
            type="deposit", amount=1, description="Coin", timestamp=T0 + timedelta(days=7, seconds=13)
        ),
    )
    exporter = LedgerExporter()

    restored = [
        transaction_from_dict(json.loads(exporter.to_json(exporter.transaction_to_dict(tx))))
        for tx in (first, second)
    ]

    assert restored == [first, second]
    assert restored[1].running_balance == second.running_balance
    assert find_inconsistencies(restored) == ()


@pytest.mark.parametrize(
    "payload",
    [
        {key: value for key, value in canonical_payload().items() if key != "runningBalance"},
        canonical_payload(transactionId="tx-1"),
        canonical_payload(date="2024-02-01T07:30:00Z"),
        canonical_payload(type="transfer"),
        canonical_payload(timestamp="yesterday"),
        canonical_payload(amount=-3),
    ],
)
def test_transaction_from_dict_rejects_drifted_shapes(payload) -> None:
    with pytest.raises(MalformedRecordError):
        transaction_from_dict(payload)


def test_event_dispatcher_register_and_unregister() -> None:
    dispatcher = EventDispatcher()
    seen: list[dict] = []

    dispatcher.register(seen.append)
    dispatcher.dispatch({"event": "ping"})
    dispatcher.unregister(seen.append)
    dispatcher.unregister(seen.append)
    dispatcher.dispatch({"event": "ignored"})

    assert seen == [{"event": "ping"}]
