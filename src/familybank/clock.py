"""Time helpers: every instant inside FamilyBank is a naive UTC datetime."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Union

TimestampLike = Union[datetime, str]

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Return the current instant as a naive UTC datetime."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_timestamp(value: TimestampLike) -> datetime:
    """Convert ``value`` to a naive UTC datetime.

    Strings are parsed as ISO-8601 (a trailing ``Z`` is accepted). Aware
    datetimes are converted to UTC; naive ones are assumed to be UTC already.
    """

    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}") from exc
    elif isinstance(value, datetime):
        moment = value
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def isoformat(moment: datetime) -> str:
    """Render a naive UTC datetime as an ISO-8601 instant with a ``Z`` suffix."""

    return moment.isoformat() + "Z"


__all__ = ["Clock", "TimestampLike", "isoformat", "normalize_timestamp", "utcnow"]
