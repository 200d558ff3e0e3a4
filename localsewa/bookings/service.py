from __future__ import annotations

import logging
import random
import re
import string
import uuid
from datetime import datetime, timezone

from ..areas.graph import AreaGraph
from ..events.store import record_event
from ..matching.models import LocationDescriptor
from ..store.data_store import DataStore, SlotUnavailable
from .alternatives import AlternativeFinder
from .config import DEFAULT_BOOKING_CONFIG, BookingConfig
from .conflicts import detect_conflict
from .models import (
    Booking,
    BookingConflictQuery,
    BookingRequest,
    BookingStatus,
    ConflictKind,
    ConflictOutcome,
)
from .status import check_transition, record_status_change

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class BookingValidationError(ValueError):
    """Request rejected before conflict detection; ``status_code`` mirrors the HTTP answer."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


def generate_confirmation_code() -> str:
    letters = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"SJ-{letters}{random.randint(1000, 9999)}"


def parse_slot(date: str, time: str) -> datetime:
    if not _DATE_RE.match(date):
        raise BookingValidationError("Invalid date format. Use YYYY-MM-DD")
    if not _TIME_RE.match(time):
        raise BookingValidationError("Invalid time format. Use HH:MM (24-hour)")
    try:
        return datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise BookingValidationError("Invalid booking date/time") from None


class BookingService:
    def __init__(
        self,
        graph: AreaGraph,
        store: DataStore,
        finder: AlternativeFinder | None = None,
        config: BookingConfig = DEFAULT_BOOKING_CONFIG,
    ) -> None:
        self._graph = graph
        self._store = store
        self._finder = finder or AlternativeFinder(graph, store, config)
        self._config = config

    def create(
        self,
        user_id: str,
        request: BookingRequest,
        now: datetime | None = None,
    ) -> Booking | ConflictOutcome:
        """Create a pending booking, or describe why the slot cannot be had.

        Malformed or unbookable requests raise ``BookingValidationError``; a
        conflict is a normal outcome carrying substitute providers.
        """
        slot = parse_slot(request.date, request.time)
        if slot < (now or datetime.now()):
            raise BookingValidationError("Cannot book for past date/time. Choose a future time.")

        listing = self._store.get_listing(request.service_id)
        if listing is None:
            raise BookingValidationError("Service not found", status_code=404)
        provider = self._store.get_provider(request.provider_id)
        if provider is None:
            raise BookingValidationError("Provider not found", status_code=404)
        if not provider.is_approved:
            raise BookingValidationError("Provider is not approved. Service not available.")

        area = self._graph.resolve(request.area)
        origin = LocationDescriptor(
            locality=area.slug if area else None,
            coordinates=request.coordinates,
        )
        query = BookingConflictQuery(
            user_id=user_id,
            provider_id=provider.id,
            category=listing.category,
            date=request.date,
            time=request.time,
            origin=origin,
        )

        conflict = detect_conflict(self._store, query)
        if conflict is not None:
            kind, existing = conflict
            return self._conflict_outcome(query, kind, existing)

        created_at = datetime.now(timezone.utc)
        booking = Booking(
            id=uuid.uuid4().hex,
            user_id=user_id,
            provider_id=provider.id,
            service_id=listing.id,
            date=request.date,
            time=request.time,
            confirmation_code=generate_confirmation_code(),
            total_amount=listing.price,
            customer_area_slug=origin.locality,
            customer_coordinates=request.coordinates,
            created_at=created_at,
        )
        booking = record_status_change(booking, BookingStatus.pending, "Booking created", user_id)

        try:
            self._store.insert_booking(booking)
        except SlotUnavailable as exc:
            logger.info("Lost race for %s %s %s", provider.id, request.date, request.time)
            return self._conflict_outcome(query, ConflictKind.slot_taken, exc.existing)

        self._store.increment_booking_count(listing.id)
        record_event("booking-created", {
            "booking_id": booking.id,
            "user_id": user_id,
            "provider_id": provider.id,
            "service_id": listing.id,
            "date": booking.date,
            "time": booking.time,
        })
        logger.info("Booking %s created for %s with %s", booking.confirmation_code, user_id, provider.id)
        return booking

    def _conflict_outcome(
        self,
        query: BookingConflictQuery,
        kind: ConflictKind,
        existing: Booking,
    ) -> ConflictOutcome:
        limit = (
            self._config.duplicate_alternatives
            if kind == ConflictKind.user_provider_duplicate
            else self._config.slot_alternatives
        )
        alternatives = self._finder.find_alternatives(
            query.category,
            query.provider_id,
            query.date,
            query.time,
            origin=query.origin,
            limit=limit,
        )
        record_event("booking-conflict", {
            "user_id": query.user_id,
            "provider_id": query.provider_id,
            "conflict_kind": kind.value,
            "alternatives": len(alternatives),
        })
        return ConflictOutcome(conflict_kind=kind, existing_booking=existing, alternatives=alternatives)

    def update_status(
        self,
        booking_id: str,
        status: BookingStatus,
        actor: str,
        role: str = "user",
        note: str | None = None,
    ) -> Booking | None:
        """Move a booking along the state machine; ``None`` if the booking is unknown."""
        booking = self._store.get_booking(booking_id)
        if booking is None:
            return None
        check_transition(booking.status, status, role)
        updated = record_status_change(
            booking, status, note or f"Status changed to {status.value}", actor,
        )
        self._store.save_booking(updated)
        record_event("booking-status", {
            "booking_id": booking_id,
            "from": booking.status.value,
            "to": status.value,
            "changed_by": actor,
        })
        return updated
