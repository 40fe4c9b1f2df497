"""Custom exception hierarchy for the FamilyBank package."""

from __future__ import annotations


class FamilyBankError(Exception):
    """Base class for all FamilyBank specific errors."""


class InvalidAmountError(FamilyBankError, ValueError):
    """Raised when a transaction amount is zero or negative."""


class InvalidTimestampError(FamilyBankError, ValueError):
    """Raised when an event is dated before the latest posted transaction."""


class InvalidInterestRateError(FamilyBankError, ValueError):
    """Raised when an interest rate is negative."""


class AccountNotFoundError(FamilyBankError):
    """Raised when an account lookup fails."""


class ConcurrentAppendError(FamilyBankError):
    """Raised when an account changed between reading its history and appending to it."""


class MalformedRecordError(FamilyBankError, ValueError):
    """Raised when a serialised record does not match the canonical shape."""
