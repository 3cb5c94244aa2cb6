#!/usr/bin/env python3
"""Print the image URL of every printing of a card.

Example:
    scryfall-prints "Lightning Bolt" --image-type large

"""

import argparse
import logging
import sys
from typing import Dict, Iterable, Iterator, List, Optional

from scryfall_fetch.client import GatedClient, RateLimit, build_client
from scryfall_fetch.endpoints import search
from scryfall_fetch.errors import ScryfallError, describe
from scryfall_fetch.rate_limiter import DEFAULT_INTERVAL

log = logging.getLogger(__name__)


def image_url(card: Dict, image_type: str = "normal") -> Optional[str]:
    """Extract an image URL from a card object.

    Double-faced cards have no top-level image_uris, so the front face is
    used instead.
    """
    image_uris = card.get("image_uris")
    if not image_uris:
        faces = card.get("card_faces") or []
        if faces:
            image_uris = faces[0].get("image_uris")
    if not image_uris:
        return None
    return image_uris.get(image_type)


def iter_print_images(
    cards: Iterable[Dict], image_type: str = "normal"
) -> Iterator[str]:
    for card in cards:
        url = image_url(card, image_type)
        if url:
            yield url
        else:
            log.debug("No %s image for %s", image_type, card.get("id"))


def fetch_prints(client: GatedClient, card_name: str, eager: bool = False) -> Iterable[Dict]:
    """Search for every printing of ``card_name``.

    Args:
        client: Gated client to fetch through
        card_name: Exact card name
        eager: Fetch all pages up front instead of page by page

    """
    uri = search(f'!"{card_name}" unique:prints')
    if eager:
        return uri.fetch_all(client)
    return uri.fetch_iter(client)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Print image URLs for all printings of a card."
    )
    parser.add_argument("card_name", help="Exact card name")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in RateLimit],
        default=RateLimit.TOKEN_BUCKET.value,
        help="Rate limiting strategy (default: token-bucket)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL,
        help=f"Seconds between requests (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "--image-type",
        default="normal",
        help="Image size: small, normal, large, png, art_crop (default: normal)",
    )
    parser.add_argument(
        "--eager",
        action="store_true",
        help="Fetch every page before printing anything",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    args = parser.parse_args(argv)

    from scryfall_fetch.logging_utils import setup_cli_logging

    setup_cli_logging(verbose=args.verbose)

    client = build_client(RateLimit(args.strategy), interval=args.interval)
    count = 0
    try:
        with client:
            cards = fetch_prints(client, args.card_name, eager=args.eager)
            for url in iter_print_images(cards, args.image_type):
                print(url)
                count += 1
    except ScryfallError as e:
        log.error("Error: %s", e)
        log.debug("Error details: %s", describe(e))
        return 1

    log.info("Found %d image(s)", count)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
