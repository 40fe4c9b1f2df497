"""Operational utilities for FamilyBank."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

from .clock import Clock, utcnow


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class StructuredLogger:
    """Write JSON lines log entries for ledger activity."""

    def __init__(self, *, path: Path | None = None, clock: Clock | None = None) -> None:
        self.path = path
        self._clock = clock or utcnow
        self._entries: list[dict] = []

    def log(self, event_type: str, **fields: object) -> dict:
        entry = {"timestamp": self._clock().isoformat(), "event": event_type, **fields}
        self._entries.append(entry)
        if self.path:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry, default=_json_default, sort_keys=True) + "\n")
        return entry

    def tail(self, limit: int = 50, *, event_type: str | None = None) -> tuple[dict, ...]:
        entries = self._entries
        if event_type is not None:
            entries = [entry for entry in entries if entry["event"] == event_type]
        return tuple(entries[-limit:])


__all__ = ["StructuredLogger"]
