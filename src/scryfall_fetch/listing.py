"""Paginated list objects and iteration across their pages."""

import logging
from collections import deque
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Deque, Generic, Iterator, List, Optional, TypeVar

from scryfall_fetch.client import GatedClient
from scryfall_fetch.errors import ScryfallError
from scryfall_fetch.uri import Uri, identity

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ScryfallList(Generic[T]):
    """One page of a paginated collection."""

    data: List[T]
    has_more: bool
    next_page: Optional["ListUri[T]"] = None
    total_cards: Optional[int] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_json(
        cls, payload: Any, item_decode: Callable[[Any], T] = identity
    ) -> "ScryfallList[T]":
        """Decode a list object.

        Args:
            payload: Decoded JSON body of one page
            item_decode: Converts each entry of ``data``

        Returns:
            The page with its items decoded

        Raises:
            KeyError: If ``data`` or ``has_more`` is missing
            TypeError: If ``data`` is not a list

        """
        items = payload["data"]
        if not isinstance(items, list):
            raise TypeError("list data is not an array")

        next_url = payload.get("next_page")
        next_page = ListUri(next_url, item_decode) if next_url else None

        total_cards = payload.get("total_cards")
        warnings = list(payload.get("warnings") or [])
        for warning in warnings:
            log.warning("Scryfall: %s", warning)

        return cls(
            data=[item_decode(item) for item in items],
            has_more=bool(payload["has_more"]),
            next_page=next_page,
            total_cards=int(total_cards) if total_cards is not None else None,
            warnings=warnings,
        )

    def into_iter(self, client: GatedClient) -> "ListIter[T]":
        return ListIter(self, client)


class ListIter(Iterator[T]):
    """Lazy iterator over the items of every page of a list.

    The next page is only requested once the current one is used up. Page
    links come from the API itself, so a failure to fetch one is treated as
    an anomaly: it is logged and iteration simply stops.
    """

    def __init__(self, page: ScryfallList[T], client: GatedClient):
        self._client = client
        self._items: Deque[T] = deque(page.data)
        self._next_page = page.next_page
        self._total = page.total_cards

    def __iter__(self) -> "ListIter[T]":
        return self

    def __next__(self) -> T:
        while not self._items:
            if self._next_page is None:
                raise StopIteration
            self._advance()
        return self._items.popleft()

    def _advance(self) -> None:
        uri = self._next_page
        try:
            page = uri.fetch(self._client)
        except ScryfallError as e:
            log.error("Failed to fetch next page %s: %s", uri, e)
            self._next_page = None
            return

        self._items.extend(page.data)
        self._next_page = page.next_page
        if page.total_cards is not None:
            self._total = page.total_cards

    def size_hint(self) -> Optional[int]:
        """Total number of items in the list, if the API reported it."""
        return self._total


class ListUri(Uri[ScryfallList[T]]):
    """Link to the first page of a paginated list of ``T``."""

    __slots__ = ()

    def __init__(self, url: str, item_decode: Callable[[Any], T] = identity):
        super().__init__(url, partial(ScryfallList.from_json, item_decode=item_decode))

    def fetch_iter(self, client: GatedClient) -> ListIter[T]:
        """Lazily iterate over the items of all pages.

        Errors fetching the first page are raised; failures on later pages
        are logged and end the iteration.
        """
        return self.fetch(client).into_iter(client)

    def fetch_all(self, client: GatedClient) -> List[T]:
        """Eagerly fetch the items of all pages.

        Raises:
            ScryfallError: If any page fails; nothing is returned in that case

        """
        items: List[T] = []
        page: Optional[ScryfallList[T]] = self.fetch(client)
        while page is not None:
            items.extend(page.data)
            page = page.next_page.fetch(client) if page.next_page else None
        return items
