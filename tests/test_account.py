import re
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from familybank.account import Account, generate_account_number
from familybank.exceptions import InvalidAmountError, InvalidTimestampError
from familybank.ledger import find_inconsistencies
from familybank.models import TransactionType

T0 = datetime(2024, 3, 1, 12, 0, 0)


def test_deposit_records_transaction() -> None:
    account = Account("Ava's savings", interest_rate="2.5", created_at=T0)

    transaction = account.deposit(10, "Weekly allowance", timestamp=T0)

    assert account.balance == Decimal("10.00")
    assert transaction.description == "Weekly allowance"
    assert transaction.type is TransactionType.DEPOSIT
    assert account.transactions[-1] is transaction


def test_withdraw_reduces_balance_after_interest() -> None:
    account = Account("Ava", interest_rate="3.65", created_at=T0)
    account.deposit(Decimal("1000"), timestamp=T0)

    transaction = account.withdraw("5.50", "Book purchase", timestamp=T0 + timedelta(days=10))

    assert transaction.amount == Decimal("5.50")
    assert transaction.type is TransactionType.WITHDRAWAL
    assert transaction.accumulated_interest == Decimal("1.00")
    assert account.balance == Decimal("995.50")


def test_invalid_amount_leaves_history_untouched() -> None:
    account = Account("Ava", created_at=T0)

    with pytest.raises(InvalidAmountError):
        account.deposit(0, timestamp=T0)

    assert account.transactions == ()
    assert account.balance == Decimal("0")


def test_record_rejects_out_of_order_transactions() -> None:
    account = Account("Ava", interest_rate=0, created_at=T0)
    late = account.deposit(5, timestamp=T0 + timedelta(days=2))
    other = Account("Ben", interest_rate=0, created_at=T0)
    early = other.deposit(5, timestamp=T0)

    with pytest.raises(InvalidTimestampError):
        account.record(early)

    assert account.transactions == (late,)


def test_constructor_replays_existing_history_in_time_order() -> None:
    source = Account("Ava", interest_rate="2.5", created_at=T0)
    first = source.deposit(40, timestamp=T0)
    second = source.deposit(10, timestamp=T0 + timedelta(days=30))

    restored = Account(
        "Ava",
        interest_rate="2.5",
        account_id=source.id,
        account_number=source.account_number,
        created_at=T0,
        transactions=[second, first],
    )

    assert restored.transactions == (first, second)
    assert restored.balance == second.running_balance
    assert find_inconsistencies(restored.transactions) == ()


def test_copy_is_detached_from_original() -> None:
    account = Account("Ava", interest_rate=1, created_at=T0)
    account.deposit(5, timestamp=T0)

    clone = account.copy()
    clone.deposit(7, timestamp=T0 + timedelta(days=1))
    clone.set_interest_rate(9)

    assert len(account.transactions) == 1
    assert account.balance == Decimal("5")
    assert account.interest_rate == Decimal("1")
    assert clone.id == account.id


def test_filters_and_recent_transactions() -> None:
    account = Account("Ava", interest_rate=0, created_at=T0)
    account.deposit(20, "Birthday", timestamp=T0)
    account.withdraw(3, "Snack", timestamp=T0 + timedelta(days=1))
    account.deposit(4, "Chores", timestamp=T0 + timedelta(days=2))

    withdrawals = account.filter_transactions(types=(TransactionType.WITHDRAWAL,))
    later = account.filter_transactions(start=T0 + timedelta(hours=1))

    assert [tx.description for tx in withdrawals] == ["Snack"]
    assert [tx.description for tx in later] == ["Snack", "Chores"]
    assert [tx.description for tx in account.recent_transactions(2)] == ["Snack", "Chores"]
    assert account.recent_transactions(0) == ()
    assert account.last_transaction(transaction_type=TransactionType.WITHDRAWAL).description == "Snack"

    with pytest.raises(ValueError):
        account.recent_transactions(-1)


def test_statement_and_csv_export_include_interest() -> None:
    account = Account("Ava", interest_rate="3.65", created_at=T0)
    account.deposit(1000, "Gift from grandma", timestamp=T0)
    account.deposit(1, "Found coin", timestamp=T0 + timedelta(days=10))

    statement = account.generate_statement(as_of=T0 + timedelta(days=10))
    exported = account.export_transactions_csv()

    assert f"Account: Ava ({account.account_number})" in statement
    assert "Interest rate: 3.65% per year" in statement
    assert "Interest earned to date: $1.00" in statement
    assert "Posted balance: $1,002.00" in statement
    lines = exported.strip().splitlines()
    assert lines[0] == "timestamp,type,description,amount,interest,balance"
    assert lines[2].endswith("deposit,Found coin,1.00,1.000000,1002.000000")


def test_statement_labels_rate_change_markers() -> None:
    account = Account("Ava", interest_rate=2, created_at=T0)
    account.deposit(100, timestamp=T0)
    marker = account.change_interest_rate(5, at=T0 + timedelta(days=30))

    statement = account.generate_statement(as_of=T0 + timedelta(days=30))

    assert marker.is_rate_change
    assert not account.transactions[0].is_rate_change
    assert "Rate change: + interest $0.16" in statement
    assert "Interest rate changed from 2% to 5%" in statement
    assert "Deposit: $0.00" not in statement


def test_statement_for_empty_account() -> None:
    account = Account("Ava", created_at=T0)

    statement = account.generate_statement(as_of=T0)

    assert "(no transactions yet)" in statement


def test_account_number_format() -> None:
    assert re.fullmatch(r"\d{4}-\d{4}-\d{4}-\d{4}", generate_account_number())


def test_empty_name_is_rejected() -> None:
    with pytest.raises(ValueError):
        Account("   ")
