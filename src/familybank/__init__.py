"""FamilyBank package: a toy family bank ledger with prorated interest."""

from .account import Account, generate_account_number
from .api import EventDispatcher, LedgerExporter, transaction_from_dict
from .exceptions import (
    AccountNotFoundError,
    ConcurrentAppendError,
    FamilyBankError,
    InvalidAmountError,
    InvalidInterestRateError,
    InvalidTimestampError,
    MalformedRecordError,
)
from .ledger import (
    accrue_on_append,
    accrued_interest,
    change_interest_rate,
    elapsed_days,
    find_inconsistencies,
    latest_transaction,
    project_current_balance,
)
from .models import (
    BalanceProjection,
    GrowthPoint,
    RateSimulation,
    Transaction,
    TransactionRequest,
    TransactionType,
)
from .ops import StructuredLogger
from .projections import compound_growth_schedule, project_annual_growth, simulate_interest_rate
from .repository import AccountRepository, InMemoryAccountRepository
from .service import FamilyBank

__all__ = [
    "Account",
    "AccountNotFoundError",
    "AccountRepository",
    "BalanceProjection",
    "ConcurrentAppendError",
    "EventDispatcher",
    "FamilyBank",
    "FamilyBankError",
    "GrowthPoint",
    "InMemoryAccountRepository",
    "InvalidAmountError",
    "InvalidInterestRateError",
    "InvalidTimestampError",
    "LedgerExporter",
    "MalformedRecordError",
    "RateSimulation",
    "StructuredLogger",
    "Transaction",
    "TransactionRequest",
    "TransactionType",
    "accrue_on_append",
    "accrued_interest",
    "change_interest_rate",
    "compound_growth_schedule",
    "elapsed_days",
    "find_inconsistencies",
    "generate_account_number",
    "latest_transaction",
    "project_annual_growth",
    "project_current_balance",
    "simulate_interest_rate",
    "transaction_from_dict",
]
