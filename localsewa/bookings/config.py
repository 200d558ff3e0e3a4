from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BookingConfig:
    # radius tiers (km) for substitute providers
    radii_with_origin_km: tuple[float, ...] = (3.0, 6.0, 12.0, 20.0)
    radii_without_origin_km: tuple[float, ...] = (10.0, 25.0, 40.0)
    # providers fetched per tier = limit * this factor
    fetch_factor: int = 5
    duplicate_alternatives: int = 5
    slot_alternatives: int = 3


DEFAULT_BOOKING_CONFIG = BookingConfig()
