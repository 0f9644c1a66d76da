"""
Pydantic models shared by the sampler, resolver, selector and API.
These are pure data objects — no network coupling.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────

class TargetSource(str, Enum):
    RESOLVED = "resolved"
    FALLBACK = "fallback"
    MANUAL = "manual"


# ── Geography ─────────────────────────────────────────────────────────

class Coordinate(BaseModel):
    """A point on the globe in decimal degrees."""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"({self.latitude:.4f}, {self.longitude:.4f})"


class GeocodeResult(BaseModel):
    """What a reverse geocoder knows about a coordinate. Every field is optional."""
    locality: Optional[str] = None
    sub_locality: Optional[str] = None
    administrative_area: Optional[str] = None
    country: Optional[str] = None
    source: str = "nominatim"
    raw: Optional[dict] = None

    @field_validator("locality", "sub_locality", "administrative_area", "country", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        """Geocoders sometimes send "" for a missing component."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @property
    def is_empty(self) -> bool:
        return not any((self.locality, self.sub_locality, self.administrative_area, self.country))


# ── Targets ───────────────────────────────────────────────────────────

class TargetLocation(BaseModel):
    """A named coordinate the players have to guess the temperature of."""
    coordinate: Coordinate
    name: str = Field(..., min_length=1)
    source: TargetSource = TargetSource.RESOLVED
    # Oracle attempts spent producing this target (0 for manual picks)
    attempts: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("target name must not be blank")
        return v


class FallbackEntry(BaseModel):
    """A curated known-good location from the fallback catalog."""
    name: str = Field(..., min_length=1)
    coordinate: Coordinate

    model_config = ConfigDict(frozen=True)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("fallback name must not be blank")
        return v

    def to_target(self, attempts: int = 0) -> TargetLocation:
        return TargetLocation(
            coordinate=self.coordinate,
            name=self.name,
            source=TargetSource.FALLBACK,
            attempts=attempts,
        )


# ── API models ────────────────────────────────────────────────────────

class ManualTargetRequest(BaseModel):
    """A spot the player picked on the map. Name is looked up when omitted."""
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    name: Optional[str] = None


class TargetResponse(BaseModel):
    name: str
    latitude: float
    longitude: float
    source: str
    attempts: int

    @classmethod
    def from_target(cls, target: TargetLocation) -> "TargetResponse":
        return cls(
            name=target.name,
            latitude=target.coordinate.latitude,
            longitude=target.coordinate.longitude,
            source=target.source.value,
            attempts=target.attempts,
        )


class PlaceResponse(BaseModel):
    latitude: float
    longitude: float
    name: str
    habitable: bool
    # Set only when the place would be accepted as a random target
    target_name: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    geocoder: str
    has_target: bool = False
    catalog_version: str
    last_selection: Optional[datetime] = None
