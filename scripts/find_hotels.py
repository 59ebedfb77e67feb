"""Entry point for manual runs."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from bike_hotels.config.settings import Settings
from bike_hotels.core.logging import configure_logging
from bike_hotels.errors import HotelDataError, InvalidQueryError
from bike_hotels.geo.bbox import BoundingBox
from bike_hotels.hotels.models import HotelQuery
from bike_hotels.services.hotel_search import HotelSearchService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find hotels with indoor bikes")
    parser.add_argument("--log-level", help="Override BIKE_HOTELS_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Search around a point")
    search.add_argument("--lat", type=float, required=True)
    search.add_argument("--lng", type=float, required=True)
    search.add_argument("--term", required=True, help="Search term used for the upstream handshake")
    search.add_argument("--poi", action="store_true", help="Treat the point as a named venue")
    search.add_argument("--free-text", help="Venue name to match against the results")
    search.add_argument(
        "--bbox",
        help="Either a canonical bbox JSON string or minLng,minLat,maxLng,maxLat",
    )

    city = sub.add_parser("city", help="Search a configured city")
    city.add_argument("name")

    check = sub.add_parser("check", help="Check whether a booked hotel has bikes")
    check.add_argument("city")
    check.add_argument("free_text")

    invalidate = sub.add_parser("invalidate", help="Drop cached hotel data")
    invalidate.add_argument("--bbox", help="Canonical bbox JSON string; omit to drop everything")
    return parser


def _parse_bbox_arg(value: Optional[str]):
    if not value:
        return None
    if value.lstrip().startswith("{"):
        return value
    parts = [part.strip() for part in value.split(",")]
    try:
        return [float(part) for part in parts]
    except ValueError as exc:
        raise InvalidQueryError(f"Could not parse bbox '{value}'") from exc


async def run(settings: Settings, args: argparse.Namespace) -> dict[str, object]:
    async with await HotelSearchService.create(settings) as service:
        if args.command == "search":
            query = HotelQuery(
                lat=args.lat,
                lng=args.lng,
                search_term=args.term,
                feature_type="poi" if args.poi else "place",
                free_text=args.free_text,
                external_bbox=_parse_bbox_arg(args.bbox),
            )
            return (await service.search(query)).to_dict()
        if args.command == "city":
            return (await service.search_city(args.name)).to_dict()
        if args.command == "check":
            return (await service.check_booking(args.city, args.free_text)).to_dict()
        bbox = BoundingBox.from_json(args.bbox) if args.bbox else None
        removed = await service.invalidate(bbox=bbox)
        return {"invalidated": removed}


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    if args.log_level:
        settings.log_level = args.log_level
    configure_logging(settings.log_level, settings.log_dir)
    settings.ensure_directories()

    try:
        payload = asyncio.run(run(settings, args))
    except InvalidQueryError as exc:
        logging.getLogger(__name__).error("Invalid query: %s", exc)
        print(json.dumps({"error": str(exc), "status": exc.http_status}), file=sys.stderr)
        sys.exit(2)
    except HotelDataError as exc:
        logging.getLogger(__name__).error("Failed to retrieve hotel data: %s", exc)
        print(
            json.dumps({"error": "Failed to retrieve hotel data.", "details": str(exc), "status": exc.http_status}),
            file=sys.stderr,
        )
        sys.exit(1)
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
