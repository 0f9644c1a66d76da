"""
Weighted coordinate sampling.

Uniform sampling over the sphere lands mostly on ocean or ice, so latitude is
drawn from a mixture of bands weighted toward where people actually live.
Longitude stays uniform.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from weather_target.config import SamplerConfig, get_settings
from weather_target.models import Coordinate


@dataclass(frozen=True)
class LatitudeTier:
    probability: float
    low: float
    high: float


def tiers_from_config(config: SamplerConfig) -> tuple[LatitudeTier, ...]:
    return (
        LatitudeTier(config.temperate_probability, config.temperate_low, config.temperate_high),
        LatitudeTier(config.tropical_probability, config.tropical_low, config.tropical_high),
        LatitudeTier(config.anywhere_probability, -90.0, 90.0),
    )


def validate_tiers(tiers: Sequence[LatitudeTier]) -> None:
    if not tiers:
        raise ValueError("at least one latitude tier is required")

    total = math.fsum(t.probability for t in tiers)
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"tier probabilities must sum to 1.0, got {total}")

    for t in tiers:
        if t.probability < 0:
            raise ValueError(f"negative tier probability: {t}")
        if not -90.0 <= t.low <= t.high <= 90.0:
            raise ValueError(f"tier band out of range: {t}")

    first = tiers[0].probability
    if any(t.probability >= first for t in tiers[1:]):
        raise ValueError("the first (temperate) tier must be the most probable")


class WeightedCoordinateSampler:
    """Draws candidate coordinates biased toward populated latitude bands."""

    def __init__(self, rng: Optional[random.Random] = None,
                 tiers: Optional[Sequence[LatitudeTier]] = None):
        self.rng = rng or random.Random()
        self.tiers = tuple(tiers) if tiers is not None else tiers_from_config(get_settings().sampler)
        validate_tiers(self.tiers)

    def sample_latitude(self) -> float:
        u = self.rng.random()
        cumulative = 0.0
        for tier in self.tiers:
            cumulative += tier.probability
            if u < cumulative:
                return self.rng.uniform(tier.low, tier.high)
        # Float rounding can leave u just above the accumulated total
        last = self.tiers[-1]
        return self.rng.uniform(last.low, last.high)

    def sample(self) -> Coordinate:
        latitude = self.sample_latitude()
        longitude = self.rng.uniform(-180.0, 180.0)
        return Coordinate(latitude=latitude, longitude=longitude)
