from __future__ import annotations

import logging

from ..store.data_store import DataStore
from .models import Booking, BookingConflictQuery, ConflictKind

logger = logging.getLogger(__name__)


def detect_conflict(
    store: DataStore,
    query: BookingConflictQuery,
) -> tuple[ConflictKind, Booking] | None:
    """Return the blocking booking for ``query``, or ``None`` when the slot is free.

    A user may hold only one active booking per provider; that check runs before
    the slot check so a repeat request is reported as a duplicate.
    """
    existing = store.active_booking_between(query.user_id, query.provider_id)
    if existing is not None:
        logger.debug("User %s already has booking %s with %s", query.user_id, existing.id, query.provider_id)
        return ConflictKind.user_provider_duplicate, existing

    existing = store.active_booking_for_slot(query.provider_id, query.date, query.time)
    if existing is not None:
        logger.debug("Slot %s %s of %s taken by %s", query.date, query.time, query.provider_id, existing.id)
        return ConflictKind.slot_taken, existing

    return None
