"""CLI entrypoint for weather_target."""

from __future__ import annotations

import argparse
import asyncio
import json
import random

from weather_target.logging_config import setup_logging


def main() -> None:
    setup_logging()

    parser = argparse.ArgumentParser(prog="weather-target")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("serve")

    pick_parser = sub.add_parser("pick")
    pick_parser.add_argument("--seed", type=int, default=None)

    sample_parser = sub.add_parser("sample")
    sample_parser.add_argument("--count", type=int, default=10)
    sample_parser.add_argument("--seed", type=int, default=None)

    name_parser = sub.add_parser("name")
    name_parser.add_argument("--lat", type=float, required=True)
    name_parser.add_argument("--lon", type=float, required=True)

    args = parser.parse_args()

    if args.command == "serve":
        from weather_target.api import serve

        serve()
    elif args.command == "pick":
        asyncio.run(_pick(args.seed))
    elif args.command == "sample":
        _sample(args.count, args.seed)
    elif args.command == "name":
        asyncio.run(_name(args.lat, args.lon))


async def _pick(seed: int | None) -> None:
    import httpx

    from weather_target.geocode import get_geocoder
    from weather_target.selection import build_selector

    rng = random.Random(seed) if seed is not None else None
    async with httpx.AsyncClient() as client:
        selector = build_selector(geocoder=get_geocoder(client), rng=rng)
        target = await selector.select_target()
    print(json.dumps(target.model_dump(mode="json"), ensure_ascii=False, indent=2))


def _sample(count: int, seed: int | None) -> None:
    from weather_target.sampler import WeightedCoordinateSampler

    sampler = WeightedCoordinateSampler(rng=random.Random(seed))
    for _ in range(count):
        c = sampler.sample()
        print(f"{c.latitude:9.4f} {c.longitude:10.4f}")


async def _name(lat: float, lon: float) -> None:
    from weather_target.catalog import get_catalog
    from weather_target.config import get_settings
    from weather_target.geocode import get_geocoder
    from weather_target.models import Coordinate
    from weather_target.resolver import HabitabilityResolver, describe_place

    coordinate = Coordinate(latitude=lat, longitude=lon)
    resolver = HabitabilityResolver(
        geocoder=get_geocoder(),
        keywords=get_catalog().ocean_keywords,
        home_country=get_settings().resolver.home_country,
        timeout=get_settings().selection.attempt_timeout,
    )
    result = await resolver.lookup(coordinate)
    print(f"Place:       {describe_place(result)}")
    print(f"Target name: {resolver.target_name(result) or '(not usable)'}")


if __name__ == "__main__":
    main()
