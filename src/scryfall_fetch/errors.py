"""Error types raised while fetching resources from the Scryfall API."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ApiErrorPayload:
    """Error object returned by Scryfall alongside a 4xx status."""

    status: int
    code: str
    details: str
    type: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, payload: Any) -> "ApiErrorPayload":
        """Build an error payload from a decoded JSON body.

        Args:
            payload: Decoded JSON body of the error response

        Returns:
            The structured error payload

        Raises:
            ValueError: If the body is not an error object

        """
        if not isinstance(payload, dict):
            raise ValueError("error body is not a JSON object")
        if "status" not in payload:
            raise ValueError("error body has no status")

        try:
            status = int(payload["status"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"error body has an invalid status: {e}") from e

        # Some endpoints send "message" instead of "details"
        details = payload.get("details", payload.get("message"))
        if details is None:
            raise ValueError("error body has no details")

        return cls(
            status=status,
            code=str(payload.get("code", "")),
            details=str(details),
            type=payload.get("type"),
            warnings=list(payload.get("warnings") or []),
        )


class ScryfallError(Exception):
    """Base class for every error on the fetch path."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url


class DecodeError(ScryfallError):
    """The response body does not match the expected shape."""


class ApiError(ScryfallError):
    """The API answered with a 4xx status and a structured error."""

    def __init__(self, payload: ApiErrorPayload, url: Optional[str] = None):
        super().__init__(payload.details, url)
        self.payload = payload

    @property
    def status(self) -> int:
        return self.payload.status

    @property
    def details(self) -> str:
        return self.payload.details


class TransportError(ScryfallError):
    """A connection failure or a status outside the 2xx and 4xx ranges."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, url)
        self.status = status
        self.cause = cause

    def __str__(self) -> str:
        if self.status is not None:
            return f"HTTP {self.status} {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


class LimiterDisconnected(RuntimeError):
    """The limiter loop is gone while handles are still in use.

    This is a lifecycle bug rather than a fetch failure, so it does not
    derive from ScryfallError.
    """


def describe(error: ScryfallError) -> Dict[str, Any]:
    """Flatten an error into a dict suitable for structured log output."""
    info: Dict[str, Any] = {"kind": type(error).__name__, "url": error.url}
    if isinstance(error, ApiError):
        info["status"] = error.status
        info["code"] = error.payload.code
    elif isinstance(error, TransportError):
        info["status"] = error.status
    info["message"] = error.message
    return info
