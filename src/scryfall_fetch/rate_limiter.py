"""Rate limiters for outbound Scryfall API requests.

Scryfall asks clients to keep to roughly 10 requests/second, so the default
interval everywhere in this package is 100ms.

Two gates are provided:

* Throttler: a single timestamp behind a lock. At most one call per interval,
  no burst capacity. Good enough for one thread with one client.
* Limiter: a token bucket owned by a background thread. Callers talk to it
  through LimiterHandle objects, which may be shared freely across threads.
"""

import copy
import logging
import queue
import threading
import time
from typing import Callable, Optional, Tuple

from scryfall_fetch.errors import LimiterDisconnected

log = logging.getLogger(__name__)

DEFAULT_INTERVAL = 0.1

# How often a blocked handle checks that the limiter thread is still alive
_LIVENESS_POLL = 0.5

_Request = Tuple[int, "queue.Queue[Optional[float]]"]


class TokenBucket:
    """Token ledger for the Limiter.

    ``available`` may go negative: that debt is paid back one token per
    interval by ``replenish``. Not thread-safe; the Limiter loop is its only
    user.
    """

    def __init__(
        self,
        interval: float,
        capacity: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize a full bucket.

        Args:
            interval: Seconds between replenishment ticks
            capacity: Maximum number of tokens held
            clock: Monotonic time source

        """
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")

        self.interval = interval
        self.capacity = capacity
        self.available = capacity
        self._clock = clock
        self.last_replenish = clock()

    def request(self, count: int = 1) -> Optional[float]:
        """Take ``count`` tokens and return how long the caller must wait.

        Returns:
            Seconds to wait, or None when the tokens were already available

        """
        if count < 1:
            raise ValueError("count must be >= 1")

        self.available -= count
        if self.available >= 0:
            return None

        # Missing tokens arrive one per interval, and part of the current
        # interval has already elapsed.
        elapsed = self._clock() - self.last_replenish
        return max(0.0, self.interval * -self.available - elapsed)

    def replenish(self) -> None:
        """Add one token, capped at capacity, and start the next interval.

        The interval starts at the scheduled tick rather than at the moment
        the loop woke up, so wake-up latency does not slow the rate down.
        """
        self.available = min(self.available + 1, self.capacity)
        self.last_replenish = min(self.last_replenish + self.interval, self._clock())

    def time_until_replenish(self) -> float:
        return max(0.0, self.last_replenish + self.interval - self._clock())


class Limiter:
    """Token bucket rate limiter driven by a dedicated thread.

    The thread is the single owner of the ledger. Every other thread, the
    one that created the Limiter included, asks for tokens by sending a
    request over a queue and waiting on a private reply queue.
    """

    def __init__(self, interval: float = DEFAULT_INTERVAL, capacity: int = 1):
        """Create a limiter; the loop starts on first use or on ``start()``.

        Args:
            interval: Seconds between replenishment ticks
            capacity: Maximum burst size in tokens

        """
        self._bucket = TokenBucket(interval, capacity)
        self._requests: "queue.Queue[_Request]" = queue.Queue()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._start_lock = threading.Lock()

    @property
    def interval(self) -> float:
        return self._bucket.interval

    @property
    def capacity(self) -> int:
        return self._bucket.capacity

    @property
    def running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stopped.is_set()
        )

    def start(self) -> "Limiter":
        """Start the loop thread if it is not already running."""
        with self._start_lock:
            if self._stopped.is_set():
                raise LimiterDisconnected("limiter has been closed")
            if self._thread is None:
                self._thread = threading.Thread(
                    target=self._run, name="scryfall-limiter", daemon=True
                )
                self._thread.start()
                log.debug(
                    "Started limiter: interval=%.3fs capacity=%d",
                    self.interval,
                    self.capacity,
                )
        return self

    def close(self) -> None:
        """Stop the loop thread. Handles fail from now on."""
        self._stopped.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval + 1.0)

    def __enter__(self) -> "Limiter":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_handle(self) -> "LimiterHandle":
        return LimiterHandle(self)

    def wait(self) -> float:
        return self.wait_for(1)

    def wait_for(self, count: int) -> float:
        return self.get_handle().wait_for(count)

    def _run(self) -> None:
        bucket = self._bucket
        while not self._stopped.is_set():
            # Serve requests until the next tick is due
            timeout = bucket.time_until_replenish()
            try:
                count, reply = self._requests.get(timeout=timeout)
            except queue.Empty:
                bucket.replenish()
                continue

            try:
                delay = bucket.request(count)
            except ValueError:
                log.error("Rejected token request for count=%r", count)
                delay = None
            reply.put(delay)

            if bucket.time_until_replenish() <= 0:
                bucket.replenish()

        log.debug("Limiter loop stopped")


class LimiterHandle:
    """Thread-safe proxy used to request tokens from a Limiter."""

    def __init__(self, limiter: Limiter):
        self._limiter = limiter

    def clone(self) -> "LimiterHandle":
        return copy.copy(self)

    def wait(self) -> float:
        return self.wait_for(1)

    def wait_for(self, count: int) -> float:
        """Block until ``count`` tokens are granted.

        Args:
            count: Number of tokens to take

        Returns:
            Seconds spent sleeping (0.0 if no wait was needed)

        Raises:
            ValueError: If count is not positive
            LimiterDisconnected: If the limiter loop is not running

        """
        if count < 1:
            raise ValueError("count must be >= 1")

        delay = self._request(count)
        if delay is None:
            return 0.0

        log.debug("Rate limited: sleeping %.3fs for %d token(s)", delay, count)
        time.sleep(delay)
        return delay

    def _request(self, count: int) -> Optional[float]:
        limiter = self._limiter
        if limiter._thread is None:
            limiter.start()
        if not limiter.running:
            raise LimiterDisconnected("Failed to send to limiter: loop is not running")

        reply: "queue.Queue[Optional[float]]" = queue.Queue(maxsize=1)
        limiter._requests.put((count, reply))

        while True:
            try:
                return reply.get(timeout=_LIVENESS_POLL)
            except queue.Empty:
                if not limiter.running:
                    raise LimiterDisconnected(
                        "Didn't receive a response from the limiter"
                    ) from None


class Throttler:
    """Simple rate gate: at most one call per interval.

    Calls are serialized on one shared timestamp; there is no burst capacity
    and no fairness between waiting threads.
    """

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.interval = interval
        self.last_call_time: Optional[float] = None
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()

    @classmethod
    def per_second(cls, max_calls_per_second: float) -> "Throttler":
        return cls(interval=1.0 / max_calls_per_second)

    def wait(self) -> float:
        """Wait if necessary to respect the interval.

        Returns:
            Seconds spent sleeping

        """
        with self._lock:
            sleep_time = 0.0
            if self.last_call_time is not None:
                time_since_last_call = self._clock() - self.last_call_time
                if time_since_last_call < self.interval:
                    sleep_time = self.interval - time_since_last_call
                    self._sleep(sleep_time)

            self.last_call_time = self._clock()
            return sleep_time
