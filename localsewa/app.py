from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .areas.graph import get_area_graph
from .areas.models import RouteRequest
from .auth.dependencies import get_current_user, require_admin, require_provider_or_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .bookings.models import Booking, BookingRequest, ConflictOutcome, StatusUpdateRequest
from .bookings.service import BookingService, BookingValidationError
from .bookings.status import InvalidStatusTransition
from .chat.intent import answer
from .chat.models import ChatRequest, ChatResponse
from .events.aggregator import summarize_events
from .events.store import get_events, record_event
from .matching.distance import DistanceResolver
from .matching.models import Coordinates, LocationDescriptor, ProviderProfile, SearchResponse
from .matching.scoring import search_by_text
from .recommendations.models import (
    CvEvaluation,
    LocationUpdate,
    NearestProvidersResponse,
    ProviderRecommendation,
    RecommendationResponse,
)
from .recommendations.providers import clamp_radius, nearest_providers, recommend_providers
from .recommendations.ranker import RecommendationRanker, recommend_for_user
from .store.data_store import get_data_store

app = FastAPI(title="LocalSewa Service Matching API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "localsewa-secret-change-in-production"),
)


def _booking_service() -> BookingService:
    return BookingService(get_area_graph(), get_data_store())


def _origin(area: str | None, lat: float | None, lng: float | None) -> LocationDescriptor | None:
    coordinates = Coordinates(lat=lat, lng=lng) if lat is not None and lng is not None else None
    if area is None and coordinates is None:
        return None
    return LocationDescriptor(locality=area, coordinates=coordinates)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/areas")
def areas() -> dict:
    return {"areas": get_area_graph().list_areas()}


@app.get("/areas/{identifier}/nearby")
def nearby_areas(identifier: str, radius_km: float = Query(default=3.0, gt=0, le=50)) -> dict:
    graph = get_area_graph()
    origin = graph.resolve(identifier)
    if origin is None:
        raise HTTPException(status_code=404, detail="Area not found")
    return {
        "origin": origin.to_dict(),
        "radius_km": radius_km,
        "areas": [
            {**n.locality.to_dict(), "distance_km": n.distance_km}
            for n in graph.nearby(origin, radius_km)
        ],
    }


@app.post("/routes/shortest")
def shortest_route(body: RouteRequest) -> dict:
    route = get_area_graph().shortest_path(body.source, body.target)
    if route is None:
        raise HTTPException(status_code=404, detail="No route between these areas")
    return route.to_dict()


@app.get("/services/search/smart", response_model=SearchResponse)
def smart_search(
    q: str = Query(..., min_length=1),
    limit: int = 10,
    only_reviewed: bool = False,
    cv_qualified: bool = False,
) -> SearchResponse:
    candidates = get_data_store().candidates()
    results = search_by_text(
        q,
        candidates,
        only_reviewed=only_reviewed,
        require_quality_threshold=cv_qualified,
        limit=max(3, min(25, limit)),
    )
    return SearchResponse(query=q, results=results, total_candidates=len(candidates))


@app.get("/providers/recommended", response_model=list[ProviderRecommendation])
def providers_recommended(
    request: Request,
    category: str | None = None,
    area: str | None = None,
    lat: float | None = Query(default=None, ge=-90, le=90),
    lng: float | None = Query(default=None, ge=-180, le=180),
    hide_booked: bool = False,
    limit: int = Query(default=10, ge=1, le=50),
) -> list[ProviderRecommendation]:
    user = get_current_user(request)
    return recommend_providers(
        get_data_store(),
        DistanceResolver(get_area_graph()),
        category=category,
        origin=_origin(area, lat, lng),
        user_id=user["user_id"] if user else None,
        hide_booked=hide_booked,
        limit=limit,
    )


@app.get("/providers/nearest", response_model=NearestProvidersResponse)
def providers_nearest(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    category: str | None = None,
    radius_km: float | None = None,
    only_reviewed: bool = False,
    cv_qualified: bool = False,
) -> NearestProvidersResponse:
    providers = nearest_providers(
        get_data_store(),
        lat,
        lng,
        category=category,
        radius_km=radius_km,
        only_reviewed=only_reviewed,
        cv_qualified=cv_qualified,
    )
    return NearestProvidersResponse(
        providers=providers,
        requested_radius_km=clamp_radius(radius_km),
        only_reviewed=only_reviewed,
        cv_qualified=cv_qualified,
    )


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/services/recommended", response_model=RecommendationResponse)
def services_recommended(
    limit: int = Query(default=8, ge=1, le=25),
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    ranked, total, signals = recommend_for_user(
        get_data_store(), RecommendationRanker(), user["user_id"], limit=limit,
    )
    return RecommendationResponse(
        recommendations=ranked, total_candidates=total, preference_signals=signals,
    )


@app.post("/bookings", status_code=201, response_model=Booking)
def create_booking(body: BookingRequest, user: dict = Depends(require_user)):
    try:
        outcome = _booking_service().create(user["user_id"], body)
    except BookingValidationError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from None

    if isinstance(outcome, ConflictOutcome):
        return JSONResponse(status_code=409, content=outcome.model_dump(mode="json"))
    return outcome


@app.get("/bookings/me", response_model=list[Booking])
def my_bookings(user: dict = Depends(require_user)) -> list[Booking]:
    return get_data_store().bookings_for_user(user["user_id"])


@app.patch("/bookings/{booking_id}/status", response_model=Booking)
def update_booking_status(
    booking_id: str,
    body: StatusUpdateRequest,
    user: dict = Depends(require_user),
) -> Booking:
    booking = get_data_store().get_booking(booking_id)
    if booking is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    is_party = booking.user_id == user["user_id"] or booking.provider_id == user.get("provider_id")
    if not is_party and user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Not allowed to update this booking")

    try:
        updated = _booking_service().update_status(
            booking_id, body.status, actor=user["username"], role=user["role"], note=body.note,
        )
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None
    if updated is None:
        raise HTTPException(status_code=404, detail="Booking not found")
    return updated


@app.post("/chat", response_model=ChatResponse)
def chat(body: ChatRequest, user: dict = Depends(require_user)) -> ChatResponse:
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message is required")
    response = answer(body.message, get_area_graph(), get_data_store())
    record_event("chat", {
        "user_id": user["user_id"],
        "category": response.detected.category,
        "area": response.detected.area_slug,
        "suggestions": len(response.suggestions),
    })
    return response


# ── Provider endpoints ───────────────────────────────────────────────────


@app.patch("/providers/{provider_id}/location", response_model=ProviderProfile)
def update_provider_location(
    provider_id: str,
    body: LocationUpdate,
    user: dict = Depends(require_provider_or_admin),
) -> ProviderProfile:
    if user["role"] != "admin" and user.get("provider_id") != provider_id:
        raise HTTPException(status_code=403, detail="Not allowed to update this provider")

    area = get_area_graph().resolve(body.area) if body.area else None
    if body.area and area is None:
        raise HTTPException(status_code=400, detail="Unknown area")

    provider = get_data_store().update_provider_location(
        provider_id,
        body.coordinates,
        area_slug=area.slug if area else None,
        service_radius_km=body.service_radius_km,
    )
    if provider is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return provider


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.post("/providers/{provider_id}/cv-evaluation", response_model=ProviderProfile)
def record_cv_evaluation(
    provider_id: str,
    body: CvEvaluation,
    user: dict = Depends(require_admin),
) -> ProviderProfile:
    provider = get_data_store().record_cv_evaluation(
        provider_id, body.cv_score, body.cv_status, body.experience_years,
    )
    if provider is None:
        raise HTTPException(status_code=404, detail="Provider not found")
    return provider


@app.get("/events")
def events(event_type: str | None = None, user: dict = Depends(require_admin)) -> dict:
    found = get_events(event_type)
    return {"events": found, "total": len(found)}


@app.get("/events/summary")
def events_summary(user: dict = Depends(require_admin)) -> dict:
    return summarize_events(get_events())
