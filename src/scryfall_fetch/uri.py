"""Unresolved URLs returned by the Scryfall API.

Several API fields hold URLs for queries that return more data (a card's
rulings, the next page of a search, ...). ``Uri`` pairs such a URL with the
function that decodes its response, and handles fetching it.
"""

import json
import logging
from typing import Any, Callable, Generic, TypeVar
from urllib.parse import urlsplit

import requests

from scryfall_fetch.client import GatedClient
from scryfall_fetch.errors import (
    ApiError,
    ApiErrorPayload,
    DecodeError,
    TransportError,
)

log = logging.getLogger(__name__)

T = TypeVar("T")


def identity(payload: Any) -> Any:
    return payload


def _parse_json(response: requests.Response, url: str) -> Any:
    try:
        return json.loads(response.content)
    except ValueError as e:
        raise DecodeError(f"Invalid JSON in response body: {e}", url) from e


class Uri(Generic[T]):
    """An absolute URL annotated with how to decode what it points to.

    Equality and hashing only look at the URL.
    """

    __slots__ = ("_url", "_decode")

    def __init__(self, url: str, decode: Callable[[Any], T] = identity):
        """Create a link.

        Args:
            url: Absolute http(s) URL
            decode: Converts the decoded JSON body into a ``T``

        Raises:
            ValueError: If the URL is not absolute

        """
        parts = urlsplit(str(url))
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Not an absolute http(s) URL: {url!r}")
        object.__setattr__(self, "_url", str(url))
        object.__setattr__(self, "_decode", decode)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def url(self) -> str:
        return self._url

    def __str__(self) -> str:
        return self._url

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._url!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Uri):
            return NotImplemented
        return self._url == other._url

    def __hash__(self) -> int:
        return hash(self._url)

    def __copy__(self) -> "Uri[T]":
        return self

    def __deepcopy__(self, memo: dict) -> "Uri[T]":
        return self

    def fetch(self, client: GatedClient) -> T:
        """Fetch the resource through ``client`` and decode it.

        No retries are made here.

        Args:
            client: Client whose gate every request passes through

        Returns:
            The decoded resource

        Raises:
            DecodeError: If the body does not match the expected shape
            ApiError: If the API answered 4xx with an error object
            TransportError: On connection failures and other statuses

        """
        url = self._url
        try:
            response = client.request("GET", url).call()
        except requests.RequestException as e:
            raise TransportError(str(e), url, cause=e) from e

        status = response.status_code
        if 200 <= status <= 299:
            payload = _parse_json(response, url)
            try:
                return self._decode(payload)
            except Exception as e:
                raise DecodeError(f"Unexpected response shape: {e!r}", url) from e

        if 400 <= status <= 499:
            payload = _parse_json(response, url)
            try:
                error = ApiErrorPayload.from_json(payload)
            except ValueError as e:
                raise DecodeError(f"Malformed error body: {e}", url) from e
            log.debug("API error %d for %s: %s", error.status, url, error.details)
            raise ApiError(error, url)

        raise TransportError(response.reason or "Unexpected status", url, status=status)
