"""
Habitability resolution: turn a reverse-geocode answer into a display name,
or reject the point as open water / empty land.

The ocean check is a keyword heuristic over the place fields, not a land mask;
occasional false positives ("Red Sea Governorate") and negatives are accepted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from weather_target.geocode import ReverseGeocoder
from weather_target.models import Coordinate, GeocodeResult

logger = logging.getLogger(__name__)

UNKNOWN_LOCATION = "Unknown Location"


def extract_place_name(result: GeocodeResult, home_country: Optional[str] = None) -> Optional[str]:
    """
    Pick the most specific usable name.
    Priority: locality -> sub-locality -> administrative area -> country.

    Localities in the home country get the state appended ("Springfield, Illinois");
    everywhere else gets the country ("Reykjavik, Iceland").
    """
    if result.locality:
        if result.country and result.country != home_country:
            return f"{result.locality}, {result.country}"
        if result.administrative_area:
            return f"{result.locality}, {result.administrative_area}"
        return result.locality

    for primary in (result.sub_locality, result.administrative_area):
        if primary:
            return f"{primary}, {result.country}" if result.country else primary

    return result.country


def is_likely_uninhabited(result: GeocodeResult, keywords: Iterable[str]) -> bool:
    if not (result.locality or result.sub_locality or result.administrative_area):
        return True

    haystack = " ".join(
        part for part in (result.locality, result.sub_locality,
                          result.administrative_area, result.country)
        if part
    ).lower()
    return any(keyword in haystack for keyword in keywords)


def describe_place(result: Optional[GeocodeResult]) -> str:
    """Full "Locality, Area, Country" label for a coordinate the player chose."""
    if result is None:
        return UNKNOWN_LOCATION
    parts = [p for p in (result.locality, result.administrative_area, result.country) if p]
    return ", ".join(parts) if parts else UNKNOWN_LOCATION


class HabitabilityResolver:
    """Asks the geocoder about a coordinate and decides whether it makes a good target."""

    def __init__(self, geocoder: ReverseGeocoder, keywords: Iterable[str],
                 home_country: Optional[str] = None, timeout: Optional[float] = None):
        self.geocoder = geocoder
        self.keywords = tuple(k.lower() for k in keywords)
        self.home_country = home_country or None
        # None or <= 0 means no limit
        self.timeout = timeout if timeout and timeout > 0 else None

    async def lookup(self, coordinate: Coordinate) -> Optional[GeocodeResult]:
        """Geocode, folding every oracle failure into None. Cancellation still propagates."""
        try:
            return await asyncio.wait_for(self.geocoder.reverse(coordinate), self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Reverse geocoding timed out for %s (limit %ss)", coordinate, self.timeout)
            return None
        except Exception as e:
            logger.warning("Reverse geocoding failed for %s: %s", coordinate, e)
            return None

    def target_name(self, result: Optional[GeocodeResult]) -> Optional[str]:
        """The name to use for a target, or None if the result is not good enough."""
        if result is None or result.is_empty:
            return None

        name = extract_place_name(result, self.home_country)
        if not name:
            return None

        if is_likely_uninhabited(result, self.keywords):
            logger.debug("Rejected %s as uninhabited", name)
            return None

        return name

    async def resolve(self, coordinate: Coordinate) -> Optional[str]:
        return self.target_name(await self.lookup(coordinate))
