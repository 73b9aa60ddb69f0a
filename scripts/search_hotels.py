"""Run a pet-friendly hotel search from the command line and dump the cards as JSON."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from petotel.config.settings import Settings
from petotel.core.logging import configure_logging
from petotel.hotels import build_places
from petotel.search import SearchCriteria, search_pet_friendly_hotels
from petotel.services import LiteApiClient

logger = logging.getLogger("search_hotels")


async def run_search(
    settings: Settings,
    *,
    place_query: Optional[str],
    vibe_query: Optional[str],
    checkin: date,
    checkout: date,
    adults: int,
    output: Optional[Path],
) -> int:
    async with LiteApiClient(settings) as client:
        place_id = None
        place_name = None
        if place_query:
            places = build_places(await client.search_places(place_query))
            if not places:
                logger.error("No places matched '%s'", place_query)
                return 1
            place_id, place_name = places[0].place_id, places[0].display_name
            logger.info("Using place %s (%s)", place_name, place_id)

        criteria = SearchCriteria(
            checkin=checkin,
            checkout=checkout,
            adults=adults,
            place_id=place_id,
            place_name=place_name,
            vibe_query=vibe_query,
        )
        outcome = await search_pet_friendly_hotels(client, criteria, settings)

    rendered = json.dumps(outcome.to_dict(), indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(rendered)
        logger.info("Wrote %s hotels to %s", len(outcome.cards), output)
    else:
        print(rendered)
    if outcome.error:
        logger.warning(outcome.error)
    return 0 if outcome.cards else 2


def main() -> None:
    parser = argparse.ArgumentParser(description="Search pet-friendly hotels")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--place", help="Destination text resolved through place search")
    target.add_argument("--vibe", help="Free-text vibe search")
    parser.add_argument("--checkin", type=date.fromisoformat, default=date.today() + timedelta(days=14))
    parser.add_argument("--nights", type=int, default=2)
    parser.add_argument("--adults", type=int, default=None)
    parser.add_argument("--output", type=Path)
    args = parser.parse_args()

    settings = Settings()
    configure_logging(settings.log_level, settings.log_dir)
    if args.nights <= 0:
        parser.error("--nights must be positive")

    exit_code = asyncio.run(
        run_search(
            settings,
            place_query=args.place,
            vibe_query=args.vibe,
            checkin=args.checkin,
            checkout=args.checkin + timedelta(days=args.nights),
            adults=args.adults or settings.default_adults,
            output=args.output,
        )
    )
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
