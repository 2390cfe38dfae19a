"""Extract property listings from a text file and print them as JSON.

Usage:
    python3 extract_listings.py listings.txt
    python3 extract_listings.py listings.txt --geocode
    python3 extract_listings.py listings.txt --format blocks
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

import structlog

from propmap.config import settings
from propmap.services.export_service import export_properties, export_properties_csv, format_listing_block
from propmap.services.geocoding_service import get_geocoding_service
from propmap.services.listing_service import ListingService

# Logs go to stderr so stdout stays machine-readable
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
    logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
)

logger = structlog.get_logger()


async def main(args: argparse.Namespace) -> int:
    for warning in settings.validate_production():
        logger.warning("Configuration warning", warning=warning)

    text = Path(args.file).read_text(encoding="utf-8")
    results = ListingService().parse_with_report(text, keep_ambiguous=args.keep_ambiguous)
    properties = [r.property for r in results]

    if not properties:
        logger.warning("No listings found", file=args.file)
        return 1

    if args.geocode:
        properties, stats = await get_geocoding_service().geocode_properties(properties)
        logger.info("Geocoding finished", **stats)

    if args.format == "csv":
        print(export_properties_csv(properties), end="")
    elif args.format == "blocks":
        print("\n\n".join(format_listing_block(p) for p in properties))
    else:
        print(export_properties(properties))

    defaulted = [r.property.address for r in results if r.price_defaulted or r.area_defaulted]
    if defaulted:
        logger.info("Listings with display defaults", count=len(defaulted), addresses=defaulted)
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Extract property listings from a text file")
    parser.add_argument("file", help="UTF-8 text file with one or more listings")
    parser.add_argument("--geocode", action="store_true", help="Resolve coordinates via Nominatim")
    parser.add_argument("--format", choices=["json", "csv", "blocks"], default="json")
    parser.add_argument(
        "--keep-ambiguous",
        action="store_true",
        help="Keep a listing whose address only resolved to a prefecture",
    )
    sys.exit(asyncio.run(main(parser.parse_args())))
