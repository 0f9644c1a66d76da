"""
Target selection loop.

    sample -> resolve -> accept | retry ... -> fallback

Attempts run strictly one after another so at most one geocoding request is
in flight. The loop is bounded by ``max_attempts``; when every attempt fails a
random entry from the curated fallback catalog is returned, so selection
always produces a target.
"""

from __future__ import annotations

import logging
import random
import time
from enum import Enum
from typing import Optional, Sequence

from weather_target.catalog import Catalog, get_catalog
from weather_target.config import Settings, get_settings
from weather_target.geocode import ReverseGeocoder, get_geocoder
from weather_target.models import FallbackEntry, TargetLocation, TargetSource
from weather_target.resolver import HabitabilityResolver
from weather_target.sampler import WeightedCoordinateSampler, tiers_from_config

logger = logging.getLogger(__name__)


class SelectionState(str, Enum):
    IDLE = "idle"
    SAMPLING = "sampling"
    RESOLVING = "resolving"
    ACCEPTED = "accepted"
    RETRY = "retry"
    FALLBACK = "fallback"
    DONE = "done"


class LocationSelector:
    """Picks a new game target from weighted random sampling plus reverse geocoding."""

    def __init__(self, sampler: WeightedCoordinateSampler, resolver: HabitabilityResolver,
                 fallback_locations: Sequence[FallbackEntry], max_attempts: int = 15,
                 rng: Optional[random.Random] = None):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not fallback_locations:
            raise ValueError("at least one fallback location is required")

        self.sampler = sampler
        self.resolver = resolver
        self.fallback_locations = tuple(fallback_locations)
        self.max_attempts = max_attempts
        self.rng = rng or sampler.rng

    def _trace(self, state: SelectionState, attempt: int) -> None:
        logger.debug("selection attempt %d/%d: %s", attempt, self.max_attempts, state.value)

    async def select_target(self) -> TargetLocation:
        start_time = time.monotonic()
        self._trace(SelectionState.IDLE, 0)

        for attempt in range(1, self.max_attempts + 1):
            self._trace(SelectionState.SAMPLING, attempt)
            candidate = self.sampler.sample()

            self._trace(SelectionState.RESOLVING, attempt)
            name = await self.resolver.resolve(candidate)

            if name:
                self._trace(SelectionState.ACCEPTED, attempt)
                self._trace(SelectionState.DONE, attempt)
                logger.info("Selected %s at %s after %d attempt(s) in %.2fs",
                            name, candidate, attempt, time.monotonic() - start_time)
                return TargetLocation(
                    coordinate=candidate,
                    name=name,
                    source=TargetSource.RESOLVED,
                    attempts=attempt,
                )

            self._trace(SelectionState.RETRY, attempt)

        self._trace(SelectionState.FALLBACK, self.max_attempts)
        target = self.fallback_target()
        self._trace(SelectionState.DONE, self.max_attempts)
        logger.warning("No usable location after %d attempts (%.2fs), falling back to %s",
                       self.max_attempts, time.monotonic() - start_time, target.name)
        return target

    def fallback_target(self) -> TargetLocation:
        entry = self.rng.choice(self.fallback_locations)
        return entry.to_target(attempts=self.max_attempts)


def build_selector(settings: Optional[Settings] = None,
                   geocoder: Optional[ReverseGeocoder] = None,
                   catalog: Optional[Catalog] = None,
                   rng: Optional[random.Random] = None) -> LocationSelector:
    """Assemble a selector from configuration, allowing any piece to be swapped."""
    settings = settings or get_settings()
    catalog = catalog or get_catalog()

    if rng is None:
        seed = settings.selection.random_seed
        rng = random.Random(int(seed)) if seed else random.Random()

    sampler = WeightedCoordinateSampler(rng=rng, tiers=tiers_from_config(settings.sampler))
    resolver = HabitabilityResolver(
        geocoder=geocoder or get_geocoder(),
        keywords=catalog.ocean_keywords,
        home_country=settings.resolver.home_country,
        timeout=settings.selection.attempt_timeout,
    )
    return LocationSelector(
        sampler=sampler,
        resolver=resolver,
        fallback_locations=catalog.fallback_locations,
        max_attempts=settings.selection.max_attempts,
        rng=rng,
    )
