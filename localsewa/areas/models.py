from __future__ import annotations

from pydantic import BaseModel, Field


class RouteRequest(BaseModel):
    source: str = Field(..., min_length=1, description="Locality slug or display name")
    target: str = Field(..., min_length=1, description="Locality slug or display name")
