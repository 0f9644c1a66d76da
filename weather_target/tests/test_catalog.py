"""
Tests for the fallback catalog / keyword data file.
"""

from __future__ import annotations

import json

import pytest

from weather_target.catalog import CatalogError, load_catalog, parse_catalog


class TestBundledCatalog:
    def test_loads(self, catalog):
        names = [e.name for e in catalog.fallback_locations]
        assert names == [
            "London, UK", "Tokyo, Japan", "Sydney, Australia",
            "New York, NY", "Paris, France", "Cairo, Egypt",
        ]
        assert "pacific" in catalog.ocean_keywords
        assert catalog.version == "1"

    def test_entries_are_valid(self, catalog):
        for entry in catalog.fallback_locations:
            assert entry.name.strip()
            assert -90 <= entry.coordinate.latitude <= 90
            assert -180 <= entry.coordinate.longitude <= 180


class TestParsing:
    def _doc(self, **overrides):
        doc = {
            "version": "7",
            "fallback_locations": [
                {"name": "Lima, Peru", "coordinate": {"latitude": -12.05, "longitude": -77.04}},
            ],
            "ocean_keywords": [" Ocean ", "SEA", ""],
        }
        doc.update(overrides)
        return doc

    def test_keywords_normalized(self):
        catalog = parse_catalog(self._doc())
        assert catalog.ocean_keywords == ("ocean", "sea")
        assert catalog.version == "7"

    def test_empty_fallbacks(self):
        with pytest.raises(CatalogError, match="no fallback"):
            parse_catalog(self._doc(fallback_locations=[]))

    def test_bad_coordinate(self):
        bad = [{"name": "Nowhere", "coordinate": {"latitude": 123, "longitude": 0}}]
        with pytest.raises(CatalogError, match="invalid fallback"):
            parse_catalog(self._doc(fallback_locations=bad))

    def test_empty_name(self):
        bad = [{"name": "", "coordinate": {"latitude": 0, "longitude": 0}}]
        with pytest.raises(CatalogError):
            parse_catalog(self._doc(fallback_locations=bad))

    def test_whitespace_name(self):
        bad = [{"name": "   ", "coordinate": {"latitude": 0, "longitude": 0}}]
        with pytest.raises(CatalogError, match="invalid fallback"):
            parse_catalog(self._doc(fallback_locations=bad))

    def test_no_keywords(self):
        with pytest.raises(CatalogError, match="keywords"):
            parse_catalog(self._doc(ocean_keywords=[]))

    def test_not_an_object(self):
        with pytest.raises(CatalogError):
            parse_catalog([])


class TestLoadFromPath:
    def test_custom_file(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({
            "version": "2",
            "fallback_locations": [
                {"name": "Oslo, Norway", "coordinate": {"latitude": 59.91, "longitude": 10.75}},
            ],
            "ocean_keywords": ["fjord"],
        }), encoding="utf-8")
        catalog = load_catalog(path)
        assert catalog.fallback_locations[0].name == "Oslo, Norway"
        assert catalog.ocean_keywords == ("fjord",)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="not found"):
            load_catalog(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="not valid JSON"):
            load_catalog(path)
