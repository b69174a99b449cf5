# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Event data access.
Encapsulates all read/write operations on the events in-memory store.
NO business rules and NO locking here; EventRegistry serialises writes.
"""

import itertools
from typing import Optional

from membership.models.domain import Event, Registration


class EventRepository:
    """In-memory event storage with a monotonic id counter."""

    def __init__(self) -> None:
        self._store: dict[int, Event] = {}
        self._ids = itertools.count(1)

    # ── Read ──

    def get_all(self) -> list[Event]:
        return list(self._store.values())

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self._store.get(event_id)

    def count(self) -> int:
        return len(self._store)

    # ── Write ──

    def next_id(self) -> int:
        return next(self._ids)

    def save(self, event: Event) -> None:
        self._store[event.id] = event

    def append_registration(self, event_id: int, registration: Registration) -> None:
        self._store[event_id].registrations.append(registration)

    # ── Bulk / internal ──

    def clear(self) -> None:
        self._store.clear()
        self._ids = itertools.count(1)
