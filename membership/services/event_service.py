# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Event registry: creation, listing and sign-ups.
All writes go through one lock so id assignment and the
duplicate check + append are atomic under concurrent requests.
"""

import threading
from typing import Any, Optional

from membership.core.exceptions import Conflict, NotFound, ValidationError
from membership.core.logging import get_logger
from membership.metrics.prometheus import (
    ACTIVE_EVENTS,
    EVENTS_CREATED,
    REGISTRATIONS_TOTAL,
)
from membership.models.domain import Event, Registration
from membership.repositories.event_repository import EventRepository

logger = get_logger(__name__)


def _clean_options(values: Any, field: str) -> list[str]:
    """Strip, reject blanks, drop duplicates keeping first occurrence."""
    if not isinstance(values, (list, tuple)) or not values:
        raise ValidationError(f"{field} must be a non-empty list")
    cleaned: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{field} must contain non-empty strings")
        value = value.strip()
        if value not in cleaned:
            cleaned.append(value)
    return cleaned


class EventRegistry:
    """Business logic for events and registrations."""

    def __init__(self, event_repo: Optional[EventRepository] = None) -> None:
        self._events = event_repo or EventRepository()
        self._lock = threading.Lock()

    # ── Commands ──

    def create_event(
        self,
        name: str,
        description: Optional[str],
        time_slots: list[str],
        role_options: list[str],
    ) -> Event:
        """Validate, then store with the next id. Raises ValidationError."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Event name is required")
        slots = _clean_options(time_slots, "time slots")
        roles = _clean_options(role_options, "roles")

        with self._lock:
            event = Event(
                id=self._events.next_id(),
                name=name.strip(),
                description=(description or "").strip(),
                time_slots=slots,
                role_options=roles,
            )
            self._events.save(event)
            ACTIVE_EVENTS.set(self._events.count())

        EVENTS_CREATED.inc()
        logger.info(
            "Event created: slots=%d, roles=%d", len(slots), len(roles),
            extra={"event_id": event.id},
        )
        return event.model_copy(deep=True)

    def register(
        self,
        event_id: int,
        member_identifier: int,
        time_slot: str,
        role: str,
    ) -> Registration:
        """
        Sign a member up for (time_slot, role) of an event.
        Raises NotFound, ValidationError, or Conflict on an identical triple.
        """
        time_slot = time_slot.strip() if isinstance(time_slot, str) else time_slot
        role = role.strip() if isinstance(role, str) else role

        with self._lock:
            event = self._events.get_by_id(event_id)
            if event is None:
                REGISTRATIONS_TOTAL.labels(outcome="not_found").inc()
                raise NotFound("Event not found")
            if time_slot not in event.time_slots:
                REGISTRATIONS_TOTAL.labels(outcome="invalid").inc()
                raise ValidationError("Invalid time slot")
            if role not in event.role_options:
                REGISTRATIONS_TOTAL.labels(outcome="invalid").inc()
                raise ValidationError("Invalid role for this event")

            registration = Registration(
                member_identifier=member_identifier, role=role, time_slot=time_slot
            )
            if event.has_registration(registration):
                REGISTRATIONS_TOTAL.labels(outcome="duplicate").inc()
                raise Conflict("Already registered for that slot")
            self._events.append_registration(event_id, registration)

        REGISTRATIONS_TOTAL.labels(outcome="accepted").inc()
        logger.info(
            "Registration accepted: slot=%s, role=%s", time_slot, role,
            extra={"event_id": event_id, "matricula": member_identifier},
        )
        return registration

    # ── Queries ──

    def list_events(self) -> list[Event]:
        """All events in creation order, as a snapshot."""
        with self._lock:
            return [e.model_copy(deep=True) for e in self._events.get_all()]

    def get_event(self, event_id: int) -> Event:
        with self._lock:
            event = self._events.get_by_id(event_id)
            if event is None:
                raise NotFound("Event not found")
            return event.model_copy(deep=True)

    def count(self) -> int:
        return self._events.count()

    # ── Maintenance ──

    def clear(self) -> None:
        """Drop every event and restart ids at 1."""
        with self._lock:
            self._events.clear()
            ACTIVE_EVENTS.set(0)
