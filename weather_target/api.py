"""
FastAPI service exposing the game's target location.

Endpoints:
  GET  /target      - Current target (selected at startup, rotated on a schedule)
  POST /target/new  - Select a fresh random target
  PUT  /target      - Use a location the player picked on the map
  GET  /place       - Describe an arbitrary coordinate
  GET  /health      - Service status
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware

from weather_target.catalog import get_catalog
from weather_target.config import get_settings
from weather_target.geocode import ReverseGeocoder, get_geocoder
from weather_target.models import (
    Coordinate,
    HealthResponse,
    ManualTargetRequest,
    PlaceResponse,
    TargetResponse,
)
from weather_target.resolver import describe_place, is_likely_uninhabited
from weather_target.scheduler import start_scheduler, stop_scheduler
from weather_target.selection import build_selector
from weather_target.tracker import TargetTracker

logger = logging.getLogger(__name__)


def create_app(geocoder: Optional[ReverseGeocoder] = None) -> FastAPI:
    """Build the app. Pass a geocoder to bypass the configured HTTP provider."""

    # ── Lifespan ──────────────────────────────────────────────────────

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: build selector + pick first target. Shutdown: cancel work, close client."""
        logger.info("Starting up API server...")
        client: Optional[httpx.AsyncClient] = None
        tracker: Optional[TargetTracker] = None
        try:
            oracle = geocoder
            if oracle is None:
                client = httpx.AsyncClient()
                oracle = get_geocoder(client)

            selector = build_selector(geocoder=oracle)
            tracker = TargetTracker(selector)
            app.state.geocoder = oracle
            app.state.tracker = tracker

            await tracker.refresh()
            start_scheduler(tracker)
            yield
        finally:
            stop_scheduler()
            if tracker is not None:
                tracker.cancel()
            if client is not None:
                await client.aclose()
            logger.info("API server shut down.")

    # ── App ───────────────────────────────────────────────────────────

    app = FastAPI(
        title="Weather Target API",
        description="Random, plausibly inhabited places to guess the temperature of",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Endpoints ─────────────────────────────────────────────────────

    @app.get("/target", response_model=TargetResponse)
    async def get_target(request: Request):
        tracker: TargetTracker = request.app.state.tracker
        if tracker.current is None:
            raise HTTPException(status_code=404, detail="No target selected yet")
        return TargetResponse.from_target(tracker.current)

    @app.post("/target/new", response_model=TargetResponse)
    async def new_target(request: Request):
        tracker: TargetTracker = request.app.state.tracker
        target = await tracker.refresh()
        if target is None:
            raise HTTPException(status_code=409, detail="Selection superseded by a newer request")
        return TargetResponse.from_target(target)

    @app.put("/target", response_model=TargetResponse)
    async def set_target(body: ManualTargetRequest, request: Request):
        tracker: TargetTracker = request.app.state.tracker
        coordinate = Coordinate(latitude=body.latitude, longitude=body.longitude)
        name = (body.name or "").strip()
        if not name:
            resolver = tracker.selector.resolver
            name = describe_place(await resolver.lookup(coordinate))
        return TargetResponse.from_target(tracker.set_manual(coordinate, name))

    @app.get("/place", response_model=PlaceResponse)
    async def describe(
        request: Request,
        lat: float = Query(..., ge=-90.0, le=90.0, description="Latitude"),
        lon: float = Query(..., ge=-180.0, le=180.0, description="Longitude"),
    ):
        tracker: TargetTracker = request.app.state.tracker
        resolver = tracker.selector.resolver
        coordinate = Coordinate(latitude=lat, longitude=lon)
        result = await resolver.lookup(coordinate)
        habitable = result is not None and not is_likely_uninhabited(result, resolver.keywords)
        return PlaceResponse(
            latitude=lat,
            longitude=lon,
            name=describe_place(result),
            habitable=habitable,
            target_name=resolver.target_name(result),
        )

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request):
        tracker: TargetTracker = request.app.state.tracker
        return HealthResponse(
            geocoder=getattr(request.app.state.geocoder, "source", "unknown"),
            has_target=tracker.current is not None,
            catalog_version=get_catalog().version,
            last_selection=tracker.updated_at,
        )

    return app


app = create_app()


def serve() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "weather_target.api:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=(settings.env == "development"),
        log_level=settings.log_level.lower(),
    )
