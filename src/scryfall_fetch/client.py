"""HTTP client that passes every request through a rate gate."""

import enum
import logging
from typing import Optional, Protocol

import requests

from scryfall_fetch import __version__
from scryfall_fetch.rate_limiter import DEFAULT_INTERVAL, Limiter, Throttler

log = logging.getLogger(__name__)

USER_AGENT = f"scryfall-fetch/{__version__}"


class Gate(Protocol):
    def wait(self) -> float: ...


class RateLimit(enum.Enum):
    """How a client built by ``build_client`` is rate limited."""

    NONE = "none"
    THROTTLE = "throttle"
    TOKEN_BUCKET = "token-bucket"


class GatedRequest:
    """A prepared request that waits on the gate when called."""

    def __init__(self, client: "GatedClient", method: str, url: str):
        self.client = client
        self.method = method
        self.url = url

    def call(self) -> requests.Response:
        """Wait for the gate, then send the request.

        Raises:
            requests.RequestException: If the transport fails

        """
        client = self.client
        if client.gate is not None:
            client.gate.wait()

        log.debug("%s %s", self.method, self.url)
        return client.session.request(self.method, self.url, timeout=client.timeout)


class GatedClient:
    """Wraps a requests session so each request first passes the gate.

    The gate is any object with a ``wait()`` method: a Throttler, a Limiter,
    a LimiterHandle, or None for no rate limiting at all.
    """

    def __init__(
        self,
        gate: Optional[Gate] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
        user_agent: str = USER_AGENT,
        owned_limiter: Optional[Limiter] = None,
    ):
        self.gate = gate
        # Stopped together with the session; shared limiters are left alone
        self.owned_limiter = owned_limiter
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            session.headers.update(
                {"Accept": "application/json", "User-Agent": user_agent}
            )
        self.session = session

    def request(self, method: str, url: str) -> GatedRequest:
        return GatedRequest(self, method.upper(), url)

    def get(self, url: str) -> requests.Response:
        return self.request("GET", url).call()

    def close(self) -> None:
        self.session.close()
        if self.owned_limiter is not None:
            self.owned_limiter.close()

    def __enter__(self) -> "GatedClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def build_client(
    strategy: RateLimit = RateLimit.TOKEN_BUCKET,
    interval: float = DEFAULT_INTERVAL,
    capacity: int = 1,
    session: Optional[requests.Session] = None,
    limiter: Optional[Limiter] = None,
) -> GatedClient:
    """Build a client for the given rate limiting strategy.

    Args:
        strategy: Which gate to put in front of the session
        interval: Seconds between requests (ignored for RateLimit.NONE)
        capacity: Token bucket burst size (RateLimit.TOKEN_BUCKET only)
        session: Session to use instead of a fresh one
        limiter: Existing Limiter to share (RateLimit.TOKEN_BUCKET only).
            When omitted a new one is created and closed with the client

    Returns:
        The configured client

    """
    strategy = RateLimit(strategy)
    gate: Optional[Gate]
    owned: Optional[Limiter] = None

    if strategy is RateLimit.NONE:
        gate = None
    elif strategy is RateLimit.THROTTLE:
        gate = Throttler(interval)
    else:
        if limiter is None:
            limiter = owned = Limiter(interval, capacity)
        gate = limiter.start().get_handle()

    log.debug("Building %s client", strategy.value)
    return GatedClient(gate=gate, session=session, owned_limiter=owned)
