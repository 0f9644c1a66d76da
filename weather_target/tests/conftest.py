"""
Shared fixtures. Everything here is in-process: no network, no real geocoder.
"""

from __future__ import annotations

import os

# Settings read the environment at import time
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("APP_ENV", "test")

import random
from typing import Callable, Optional

import pytest

from weather_target.catalog import get_catalog
from weather_target.models import Coordinate, GeocodeResult
from weather_target.resolver import HabitabilityResolver
from weather_target.sampler import WeightedCoordinateSampler
from weather_target.selection import LocationSelector


class FakeGeocoder:
    """
    Scripted reverse geocoder. ``answer`` is called with each coordinate and
    may return a GeocodeResult, None, or raise.
    """

    source = "fake"

    def __init__(self, answer: Callable[[Coordinate], Optional[GeocodeResult]]):
        self.answer = answer
        self.calls: list[Coordinate] = []

    async def reverse(self, coordinate: Coordinate) -> Optional[GeocodeResult]:
        self.calls.append(coordinate)
        return self.answer(coordinate)


def _failing(_coordinate: Coordinate):
    raise TimeoutError("geocoder timed out")


@pytest.fixture
def geocoder_returning():
    """Geocoder that gives the same answer for every coordinate."""
    def factory(result: Optional[GeocodeResult]) -> FakeGeocoder:
        return FakeGeocoder(lambda _coordinate: result)

    return factory


@pytest.fixture
def failing_geocoder():
    return FakeGeocoder(_failing)


@pytest.fixture
def scripted_geocoder():
    """Geocoder that walks through a list of answers (exceptions are raised)."""
    def factory(answers: list) -> FakeGeocoder:
        remaining = list(answers)

        def answer(_coordinate):
            item = remaining.pop(0)
            if isinstance(item, BaseException):
                raise item
            return item

        return FakeGeocoder(answer)

    return factory


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def make_selector(catalog):
    def factory(geocoder, max_attempts: int = 10, seed: int = 42,
                home_country: str = "United States",
                timeout: Optional[float] = None) -> LocationSelector:
        rng = random.Random(seed)
        resolver = HabitabilityResolver(
            geocoder=geocoder,
            keywords=catalog.ocean_keywords,
            home_country=home_country,
            timeout=timeout,
        )
        return LocationSelector(
            sampler=WeightedCoordinateSampler(rng=rng),
            resolver=resolver,
            fallback_locations=catalog.fallback_locations,
            max_attempts=max_attempts,
            rng=rng,
        )

    return factory
