from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..matching.models import Coordinates, LocationDescriptor, ProviderProfile, ServiceListing


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


ACTIVE_STATUSES = frozenset({
    BookingStatus.pending,
    BookingStatus.confirmed,
    BookingStatus.scheduled,
})


class StatusChange(BaseModel):
    status: BookingStatus
    note: str = ""
    changed_by: str = "system"
    changed_at: datetime


class Booking(BaseModel):
    id: str
    user_id: str
    provider_id: str
    service_id: str
    date: str
    time: str
    status: BookingStatus = BookingStatus.pending
    confirmation_code: str
    total_amount: float = 0.0
    customer_area_slug: str | None = None
    customer_coordinates: Coordinates | None = None
    status_timeline: list[StatusChange] = Field(default_factory=list)
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES


class BookingRequest(BaseModel):
    provider_id: str = Field(..., min_length=1)
    service_id: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM, 24-hour")
    area: str | None = Field(default=None, description="Customer locality slug or name")
    coordinates: Coordinates | None = None
    notes: str | None = Field(default=None, max_length=500)


class BookingConflictQuery(BaseModel):
    user_id: str
    provider_id: str
    category: str
    date: str
    time: str
    origin: LocationDescriptor = Field(default_factory=LocationDescriptor)


class ConflictKind(str, Enum):
    user_provider_duplicate = "user_provider_duplicate"
    slot_taken = "slot_taken"


class Alternative(BaseModel):
    listing: ServiceListing
    provider: ProviderProfile
    distance_km: float | None = None


class ConflictOutcome(BaseModel):
    conflict_kind: ConflictKind
    existing_booking: Booking | None = None
    alternatives: list[Alternative] = Field(default_factory=list)


class StatusUpdateRequest(BaseModel):
    status: BookingStatus
    note: str | None = Field(default=None, max_length=300)
