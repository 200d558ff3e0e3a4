from __future__ import annotations

from pydantic import BaseModel, Field

from ..matching.models import Coordinates, CvStatus, MatchCandidate, ProviderProfile, ServiceListing


class RecommendationResponse(BaseModel):
    recommendations: list[MatchCandidate]
    total_candidates: int
    preference_signals: int = 0


class ProviderRecommendation(BaseModel):
    provider: ProviderProfile
    listing: ServiceListing
    distance_km: float | None = None
    is_booked: bool = False


class NearestProvider(BaseModel):
    provider: ProviderProfile
    distance_km: float
    smart_score: float
    services: list[ServiceListing] = Field(default_factory=list)


class NearestProvidersResponse(BaseModel):
    providers: list[NearestProvider]
    requested_radius_km: float
    only_reviewed: bool = False
    cv_qualified: bool = False


class LocationUpdate(BaseModel):
    coordinates: Coordinates
    area: str | None = None
    service_radius_km: float | None = Field(default=None, gt=0)


class CvEvaluation(BaseModel):
    cv_score: float = Field(..., ge=0.0, le=1.0)
    cv_status: CvStatus | None = None
    experience_years: int | None = Field(default=None, ge=0)
