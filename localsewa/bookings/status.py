from __future__ import annotations

from datetime import datetime, timezone

from .models import Booking, BookingStatus, StatusChange

_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset({BookingStatus.confirmed, BookingStatus.cancelled}),
    BookingStatus.confirmed: frozenset({BookingStatus.scheduled, BookingStatus.cancelled}),
    BookingStatus.scheduled: frozenset({BookingStatus.completed}),
    BookingStatus.completed: frozenset(),
    BookingStatus.cancelled: frozenset(),
}

# Leaving "confirmed" is an administrative decision.
_ADMIN_ONLY_FROM = frozenset({BookingStatus.confirmed})


class InvalidStatusTransition(ValueError):
    def __init__(self, current: BookingStatus, requested: BookingStatus, reason: str = "") -> None:
        self.current = current
        self.requested = requested
        message = f"Cannot move booking from {current.value} to {requested.value}"
        super().__init__(f"{message}: {reason}" if reason else message)


def allowed_transitions(status: BookingStatus) -> frozenset[BookingStatus]:
    return _TRANSITIONS[status]


def check_transition(current: BookingStatus, requested: BookingStatus, role: str = "user") -> None:
    if requested not in _TRANSITIONS[current]:
        raise InvalidStatusTransition(current, requested)
    if current in _ADMIN_ONLY_FROM and role != "admin":
        raise InvalidStatusTransition(current, requested, "admin approval required")


def record_status_change(
    booking: Booking,
    status: BookingStatus,
    note: str,
    actor: str = "system",
) -> Booking:
    """Return a copy of ``booking`` moved to ``status`` with a timeline entry appended."""
    entry = StatusChange(
        status=status,
        note=note,
        changed_by=actor,
        changed_at=datetime.now(timezone.utc),
    )
    return booking.model_copy(update={
        "status": status,
        "status_timeline": [*booking.status_timeline, entry],
    })
