"""
Fallback catalog and ocean keywords.

Both live in a versioned JSON file (``data/catalog.json``) rather than in the
selection code, so the curated city list or the keyword heuristic can be
extended or swapped (``WT_CATALOG_PATH``) without touching the algorithm.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from weather_target.config import get_settings
from weather_target.models import FallbackEntry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.json"


class CatalogError(ValueError):
    """The catalog file is missing, malformed, or empty."""


@dataclass(frozen=True)
class Catalog:
    version: str
    fallback_locations: tuple[FallbackEntry, ...]
    ocean_keywords: tuple[str, ...]


def parse_catalog(data: dict) -> Catalog:
    """Validate a decoded catalog document."""
    if not isinstance(data, dict):
        raise CatalogError("catalog must be a JSON object")

    try:
        entries = tuple(FallbackEntry.model_validate(e) for e in data.get("fallback_locations") or [])
    except ValidationError as e:
        raise CatalogError(f"invalid fallback entry: {e}") from e
    if not entries:
        raise CatalogError("catalog has no fallback locations")

    keywords = tuple(
        k.strip().lower() for k in data.get("ocean_keywords") or []
        if isinstance(k, str) and k.strip()
    )
    if not keywords:
        raise CatalogError("catalog has no ocean keywords")

    return Catalog(
        version=str(data.get("version", "0")),
        fallback_locations=entries,
        ocean_keywords=keywords,
    )


def load_catalog(path: Path | str | None = None) -> Catalog:
    file_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"catalog file not found: {file_path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"catalog file is not valid JSON: {file_path}: {e}") from e

    catalog = parse_catalog(data)
    logger.debug("Loaded catalog v%s from %s: %d fallback locations, %d keywords",
                 catalog.version, file_path,
                 len(catalog.fallback_locations), len(catalog.ocean_keywords))
    return catalog


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Process-wide read-only catalog."""
    return load_catalog(get_settings().selection.catalog_path or None)
