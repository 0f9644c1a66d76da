"""
Reverse geocoding clients.

The selector only depends on the ``ReverseGeocoder`` protocol: one async
``reverse(coordinate)`` call returning a ``GeocodeResult`` or ``None``.
Implementations may also raise; the resolver treats both the same way.

Supports Nominatim (free, rate-limited) and Google Geocoding API.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol

import httpx

from weather_target.config import GeocodingConfig, get_settings
from weather_target.models import Coordinate, GeocodeResult

logger = logging.getLogger(__name__)

# Nominatim address keys, most specific first
NOMINATIM_LOCALITY_KEYS = ("city", "town", "village", "hamlet", "municipality")
NOMINATIM_SUB_LOCALITY_KEYS = ("suburb", "neighbourhood", "quarter", "city_district")
NOMINATIM_ADMIN_AREA_KEYS = ("state", "province", "region", "county")


class ReverseGeocoder(Protocol):
    source: str

    async def reverse(self, coordinate: Coordinate) -> Optional[GeocodeResult]: ...


# ── Rate Limiter ───────────────────────────────────────────────────────

class RateLimiter:
    """Minimum-interval rate limiter for geocoding API calls."""

    def __init__(self, rate_per_second: float = 1.0):
        self._interval = 1.0 / rate_per_second if rate_per_second > 0 else 0.0
        self._lock = asyncio.Lock()
        self._last_call: Optional[float] = None

    async def acquire(self):
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_call is not None:
                elapsed = loop.time() - self._last_call
                if elapsed < self._interval:
                    await asyncio.sleep(self._interval - elapsed)
            self._last_call = loop.time()


# ── Response parsing ──────────────────────────────────────────────────

def _first(mapping: dict, keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = mapping.get(key)
        if value:
            return value
    return None


def parse_nominatim_reverse(payload: dict) -> GeocodeResult:
    """
    Map a Nominatim /reverse jsonv2 body onto a GeocodeResult.
    Points in open water come back as {"error": "Unable to geocode"}.
    """
    if not payload or "error" in payload:
        return GeocodeResult(source="nominatim", raw=payload or None)

    address = payload.get("address") or {}
    return GeocodeResult(
        locality=_first(address, NOMINATIM_LOCALITY_KEYS),
        sub_locality=_first(address, NOMINATIM_SUB_LOCALITY_KEYS),
        administrative_area=_first(address, NOMINATIM_ADMIN_AREA_KEYS),
        country=address.get("country"),
        source="nominatim",
        raw=payload,
    )


def parse_google_reverse(payload: dict) -> GeocodeResult:
    """Map the top Google Geocoding result's address components onto a GeocodeResult."""
    results = payload.get("results") or []
    if payload.get("status") != "OK" or not results:
        return GeocodeResult(source="google", raw=payload or None)

    top = results[0]
    by_type: dict[str, str] = {}
    for component in top.get("address_components", []):
        for component_type in component.get("types", []):
            by_type.setdefault(component_type, component.get("long_name", ""))

    return GeocodeResult(
        locality=by_type.get("locality") or by_type.get("postal_town"),
        sub_locality=by_type.get("sublocality") or by_type.get("neighborhood"),
        administrative_area=by_type.get("administrative_area_level_1"),
        country=by_type.get("country"),
        source="google",
        raw=top,
    )


# ── Geocoder Implementations ──────────────────────────────────────────

def _backoff_delay(settings: GeocodingConfig, attempt: int) -> float:
    """Exponential delay before the next retry; nothing to wait for after the last one."""
    if attempt >= settings.max_retries - 1:
        return 0.0
    return settings.backoff_base ** (attempt + 1)


class NominatimReverseGeocoder:
    """Reverse geocode using OpenStreetMap Nominatim (free, 1 req/sec limit)."""

    source = "nominatim"

    def __init__(self, settings: Optional[GeocodingConfig] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings().geocoding
        self.rate_limiter = RateLimiter(self.settings.rate_limit_rps)
        self._client = client

    async def reverse(self, coordinate: Coordinate) -> Optional[GeocodeResult]:
        """
        Reverse geocode a coordinate. Returns None on failure.
        Implements exponential backoff on rate limiting and transport errors.
        """
        await self.rate_limiter.acquire()

        for attempt in range(self.settings.max_retries):
            try:
                resp = await self._get(
                    f"{self.settings.nominatim_url}/reverse",
                    params={
                        "lat": coordinate.latitude,
                        "lon": coordinate.longitude,
                        "format": "jsonv2",
                        "addressdetails": 1,
                        "zoom": 10,
                        "accept-language": self.settings.language,
                    },
                    headers={"User-Agent": self.settings.nominatim_user_agent},
                )
                resp.raise_for_status()
                result = parse_nominatim_reverse(resp.json())
                if result.is_empty:
                    logger.debug("Nominatim: nothing at %s", coordinate)
                return result

            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429:
                    wait = self._backoff(attempt)
                    logger.warning("Nominatim rate limited, backing off %.1fs", wait)
                    if wait:
                        await asyncio.sleep(wait)
                    continue
                logger.error("Nominatim HTTP error: %s", e)
                return None

            except httpx.RequestError as e:
                wait = self._backoff(attempt)
                logger.warning("Nominatim request error (attempt %d/%d): %s, backing off %.1fs",
                               attempt + 1, self.settings.max_retries, e, wait)
                if wait:
                    await asyncio.sleep(wait)
                continue

        logger.error("Nominatim: all %d retries exhausted for %s",
                     self.settings.max_retries, coordinate)
        return None

    def _backoff(self, attempt: int) -> float:
        return _backoff_delay(self.settings, attempt)

    async def _get(self, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, timeout=self.settings.request_timeout, **kwargs)
        async with httpx.AsyncClient() as client:
            return await client.get(url, timeout=self.settings.request_timeout, **kwargs)


class GoogleReverseGeocoder:
    """Reverse geocode using Google Maps Geocoding API (paid, high rate limits)."""

    source = "google"
    url = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, settings: Optional[GeocodingConfig] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings().geocoding
        self.rate_limiter = RateLimiter(min(self.settings.rate_limit_rps, 50.0))
        self._client = client

    async def reverse(self, coordinate: Coordinate) -> Optional[GeocodeResult]:
        if not self.settings.google_api_key:
            logger.error("Google Geocoding API key not configured")
            return None

        await self.rate_limiter.acquire()

        params = {
            "latlng": f"{coordinate.latitude},{coordinate.longitude}",
            "key": self.settings.google_api_key,
            "language": self.settings.language,
        }
        for attempt in range(self.settings.max_retries):
            try:
                if self._client is not None:
                    resp = await self._client.get(self.url, params=params,
                                                  timeout=self.settings.request_timeout)
                else:
                    async with httpx.AsyncClient() as client:
                        resp = await client.get(self.url, params=params,
                                                timeout=self.settings.request_timeout)
                resp.raise_for_status()
                data = resp.json()
                if data.get("status") not in ("OK", "ZERO_RESULTS"):
                    logger.warning("Google Geocoding status=%s for %s", data.get("status"), coordinate)
                return parse_google_reverse(data)

            except httpx.HTTPError as e:
                wait = _backoff_delay(self.settings, attempt)
                logger.warning("Google Geocoding error (attempt %d): %s", attempt + 1, e)
                if wait:
                    await asyncio.sleep(wait)
                continue

        return None


def get_geocoder(client: Optional[httpx.AsyncClient] = None) -> ReverseGeocoder:
    """Factory: return the configured reverse geocoder instance."""
    provider = get_settings().geocoding.provider
    if provider == "google":
        return GoogleReverseGeocoder(client=client)
    return NominatimReverseGeocoder(client=client)
