from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

SERVICE_CATEGORIES = [
    "plumbing",
    "electrical",
    "cleaning",
    "appliance",
    "painting",
    "moving",
    "handyman",
    "gardening",
    "security",
    "wellness",
]


class CvStatus(str, Enum):
    not_provided = "not_provided"
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class Coordinates(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class LocationDescriptor(BaseModel):
    """Either side of a distance query: a locality reference, raw coordinates, or both."""

    locality: str | None = Field(default=None, description="Locality slug or display name")
    coordinates: Coordinates | None = None


class ServiceListing(BaseModel):
    id: str
    name: str
    description: str = ""
    category: str
    price: float = Field(..., ge=0.0)
    currency: str = "NPR"
    tags: list[str] = Field(default_factory=list)
    rating: float = Field(default=4.7, ge=1.0, le=5.0)
    booking_count: int = Field(default=0, ge=0)
    review_count: int = Field(default=0, ge=0)
    provider_id: str
    is_core: bool = False
    is_approved: bool | None = None
    created_at: datetime | None = None


class ProviderProfile(BaseModel):
    id: str
    name: str
    is_approved: bool = False
    coordinates: Coordinates | None = None
    primary_area_slug: str | None = None
    service_radius_km: float = 25.0
    cv_status: CvStatus = CvStatus.not_provided
    cv_score: float | None = Field(default=None, ge=0.0, le=1.0)
    experience_years: int = 0
    skill_tags: list[str] = Field(default_factory=list)
    booking_load: int = 0
    smart_score: float | None = None

    def location(self) -> LocationDescriptor:
        return LocationDescriptor(locality=self.primary_area_slug, coordinates=self.coordinates)


class MatchCandidate(BaseModel):
    listing: ServiceListing
    provider: ProviderProfile
    distance_km: float | None = None
    score: float = 0.0
    breakdown: dict[str, float] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    query: str
    results: list[MatchCandidate]
    total_candidates: int
