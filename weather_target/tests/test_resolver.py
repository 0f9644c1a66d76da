"""
Tests for place-name extraction and the habitability filter.
Pure unit tests; the geocoder is a scripted fake.
"""

from __future__ import annotations

import asyncio

import pytest

from weather_target.models import Coordinate, GeocodeResult
from weather_target.resolver import (
    UNKNOWN_LOCATION,
    HabitabilityResolver,
    describe_place,
    extract_place_name,
    is_likely_uninhabited,
)

KEYWORDS = ("ocean", "sea", "pacific", "atlantic", "indian", "arctic", "southern")
HOME = "United States"
POINT = Coordinate(latitude=10.0, longitude=20.0)


def resolve(geocoder, home_country=HOME):
    resolver = HabitabilityResolver(geocoder, keywords=KEYWORDS, home_country=home_country)
    return asyncio.run(resolver.resolve(POINT))


# ── Name extraction ───────────────────────────────────────────────────

class TestExtractPlaceName:
    def test_foreign_locality_gets_country(self):
        r = GeocodeResult(locality="Reykjavik", country="Iceland")
        assert extract_place_name(r, HOME) == "Reykjavik, Iceland"

    def test_home_locality_gets_state(self):
        r = GeocodeResult(locality="Springfield", administrative_area="Illinois",
                          country="United States")
        assert extract_place_name(r, HOME) == "Springfield, Illinois"

    def test_home_locality_without_state(self):
        r = GeocodeResult(locality="Springfield", country="United States")
        assert extract_place_name(r, HOME) == "Springfield"

    def test_locality_without_country_uses_state(self):
        r = GeocodeResult(locality="Lyon", administrative_area="Auvergne-Rhône-Alpes")
        assert extract_place_name(r, HOME) == "Lyon, Auvergne-Rhône-Alpes"

    def test_locality_alone(self):
        assert extract_place_name(GeocodeResult(locality="Nowhere"), HOME) == "Nowhere"

    def test_sub_locality_with_country(self):
        r = GeocodeResult(sub_locality="Shibuya", administrative_area="Tokyo", country="Japan")
        assert extract_place_name(r, HOME) == "Shibuya, Japan"

    def test_sub_locality_in_home_country_still_gets_country(self):
        r = GeocodeResult(sub_locality="Brooklyn", country="United States")
        assert extract_place_name(r, HOME) == "Brooklyn, United States"

    def test_admin_area_with_country(self):
        r = GeocodeResult(administrative_area="Nunavut", country="Canada")
        assert extract_place_name(r, HOME) == "Nunavut, Canada"

    def test_admin_area_alone(self):
        assert extract_place_name(GeocodeResult(administrative_area="Nunavut"), HOME) == "Nunavut"

    def test_country_only(self):
        assert extract_place_name(GeocodeResult(country="France"), HOME) == "France"

    def test_nothing(self):
        assert extract_place_name(GeocodeResult(), HOME) is None

    def test_no_home_country_always_appends_country(self):
        r = GeocodeResult(locality="Springfield", administrative_area="Illinois",
                          country="United States")
        assert extract_place_name(r, None) == "Springfield, United States"


# ── Habitability filter ───────────────────────────────────────────────

class TestIsLikelyUninhabited:
    def test_country_only_is_uninhabited(self):
        assert is_likely_uninhabited(GeocodeResult(country="France"), KEYWORDS)

    def test_city_is_inhabited(self):
        r = GeocodeResult(locality="Reykjavik", country="Iceland")
        assert not is_likely_uninhabited(r, KEYWORDS)

    def test_ocean_keyword_case_insensitive(self):
        r = GeocodeResult(administrative_area="North PACIFIC Ocean")
        assert is_likely_uninhabited(r, KEYWORDS)

    def test_keyword_in_country_counts(self):
        r = GeocodeResult(administrative_area="Somewhere", country="Southern Territories")
        assert is_likely_uninhabited(r, KEYWORDS)

    def test_keyword_matches_substrings(self):
        # Heuristic: "Seattle" contains "sea"
        r = GeocodeResult(locality="Seattle", country="United States")
        assert is_likely_uninhabited(r, KEYWORDS)


# ── Resolver ──────────────────────────────────────────────────────────

class TestHabitabilityResolver:
    def test_country_only_returns_none(self, geocoder_returning):
        assert resolve(geocoder_returning(GeocodeResult(country="France"))) is None

    def test_reykjavik(self, geocoder_returning):
        geocoder = geocoder_returning(GeocodeResult(locality="Reykjavik", country="Iceland"))
        assert resolve(geocoder) == "Reykjavik, Iceland"
        assert geocoder.calls == [POINT]

    def test_springfield_home_country(self, geocoder_returning):
        geocoder = geocoder_returning(GeocodeResult(
            locality="Springfield", country="United States", administrative_area="Illinois",
        ))
        assert resolve(geocoder) == "Springfield, Illinois"

    @pytest.mark.parametrize("field", ["locality", "sub_locality", "administrative_area", "country"])
    def test_pacific_anywhere_rejects(self, geocoder_returning, field):
        fields = {
            "locality": "Hilo",
            "sub_locality": "Downtown",
            "administrative_area": "Hawaii",
            "country": "United States",
        }
        fields[field] = f"Near the Pacific {fields[field]}"
        assert resolve(geocoder_returning(GeocodeResult(**fields))) is None

    def test_none_result(self, geocoder_returning):
        assert resolve(geocoder_returning(None)) is None

    def test_empty_result(self, geocoder_returning):
        assert resolve(geocoder_returning(GeocodeResult())) is None

    def test_oracle_failure_is_swallowed(self, failing_geocoder):
        assert resolve(failing_geocoder) is None
        assert len(failing_geocoder.calls) == 1

    def test_cancellation_propagates(self, scripted_geocoder):
        geocoder = scripted_geocoder([asyncio.CancelledError()])
        with pytest.raises(asyncio.CancelledError):
            resolve(geocoder)

    def test_slow_oracle_times_out(self):
        class Stalled:
            source = "stalled"

            async def reverse(self, coordinate):
                await asyncio.sleep(3600)

        resolver = HabitabilityResolver(Stalled(), keywords=KEYWORDS, timeout=0.05)
        assert asyncio.run(resolver.lookup(POINT)) is None

    def test_non_positive_timeout_means_unlimited(self):
        assert HabitabilityResolver(None, keywords=KEYWORDS, timeout=0).timeout is None
        assert HabitabilityResolver(None, keywords=KEYWORDS).timeout is None

    def test_home_country_override(self, geocoder_returning):
        geocoder = geocoder_returning(GeocodeResult(
            locality="Toronto", administrative_area="Ontario", country="Canada",
        ))
        assert resolve(geocoder, home_country="Canada") == "Toronto, Ontario"

    def test_target_name_without_lookup(self):
        resolver = HabitabilityResolver(None, keywords=KEYWORDS, home_country=HOME)
        assert resolver.target_name(GeocodeResult(locality="Cairo", country="Egypt")) == "Cairo, Egypt"
        assert resolver.target_name(None) is None


class TestDescribePlace:
    def test_full_label(self):
        r = GeocodeResult(locality="Springfield", administrative_area="Illinois",
                          country="United States")
        assert describe_place(r) == "Springfield, Illinois, United States"

    def test_partial_label(self):
        assert describe_place(GeocodeResult(country="France")) == "France"

    def test_unknown(self):
        assert describe_place(GeocodeResult()) == UNKNOWN_LOCATION
        assert describe_place(None) == UNKNOWN_LOCATION
