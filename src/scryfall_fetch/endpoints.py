"""Scryfall API endpoints."""

from typing import Any, Callable, TypeVar
from urllib.parse import urlencode, urljoin

from scryfall_fetch.listing import ListUri
from scryfall_fetch.uri import identity

T = TypeVar("T")

ROOT_URL = "https://api.scryfall.com/"
CARDS_URL = urljoin(ROOT_URL, "cards/")
SETS_URL = urljoin(ROOT_URL, "sets/")
BULK_DATA_URL = urljoin(ROOT_URL, "bulk-data/")
CATALOG_URL = urljoin(ROOT_URL, "catalog/")

# Goes on the end of a card URL
API_RULING = "rulings/"


def search(
    query: str, item_decode: Callable[[Any], T] = identity, **params: Any
) -> ListUri[T]:
    """Build a link to a card search.

    Args:
        query: Scryfall search syntax, e.g. ``!"Lightning Bolt" unique:prints``
        item_decode: Converts each card object
        **params: Extra query parameters (``unique``, ``order``, ...)

    Returns:
        Link to the first page of results

    """
    query_params = {"q": query}
    query_params.update({k: str(v) for k, v in params.items() if v is not None})
    return ListUri(f"{urljoin(CARDS_URL, 'search')}?{urlencode(query_params)}", item_decode)


def rulings(card_url: str, item_decode: Callable[[Any], T] = identity) -> ListUri[T]:
    """Build a link to the rulings of the card at ``card_url``."""
    if not card_url.endswith("/"):
        card_url += "/"
    return ListUri(urljoin(card_url, API_RULING), item_decode)
