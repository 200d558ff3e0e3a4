from __future__ import annotations

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ChatSuggestion(BaseModel):
    service_id: str
    name: str
    category: str
    price: float
    currency: str = "NPR"
    rating: float
    provider_id: str
    provider_name: str
    distance_km: float | None = None
    score: float


class DetectedIntent(BaseModel):
    category: str | None = None
    budget_ceiling: float | None = None
    area_slug: str | None = None
    area_name: str | None = None


class ChatResponse(BaseModel):
    reply: str
    suggestions: list[ChatSuggestion] = Field(default_factory=list)
    detected: DetectedIntent = Field(default_factory=DetectedIntent)
