"""Error types for netlib.

Two families live here:

* :class:`RequestError` -- the flat, closed set of request outcomes that the
  client hands back inside a :class:`~netlib.result.Result`. The client
  never raises it; :meth:`~netlib.result.Result.unwrap` does.
* :class:`NetlibError` and its subclasses -- raised for library misuse or
  internal plumbing (an endpoint that cannot become a URL, a task submitted
  to an invalidated session).

Request outcome kinds::

    INVALID_URL                      descriptor does not assemble into a URL
    NO_RESPONSE                      exchange finished without an HTTP status
    BAD_REQUEST(message)             HTTP 400 with server-provided message
    UNAUTHORIZED                     HTTP 401
    UNEXPECTED_STATUS_CODE(message)  any other non-2xx status
    UNEXPECTED_ERROR(message)        JSON decoding failed
    INTERNET_CONNECTION(message)     offline / connection lost / timed out
    UNKNOWN                          any other transport failure
"""

from __future__ import annotations

import enum
from typing import Optional


class RequestErrorKind(str, enum.Enum):
    """The closed set of request failure kinds."""

    INVALID_URL = "invalid_url"
    NO_RESPONSE = "no_response"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    UNEXPECTED_STATUS_CODE = "unexpected_status_code"
    UNEXPECTED_ERROR = "unexpected_error"
    INTERNET_CONNECTION = "internet_connection"
    UNKNOWN = "unknown"


class RequestError(Exception):
    """A classified request failure.

    Instances compare equal when both ``kind`` and ``message`` match, so
    tests and callers can write
    ``assert result.error == RequestError.bad_request("missing field")``.

    Args:
        kind: Which failure occurred.
        message: Human-readable detail for the kinds that carry one
            (``BAD_REQUEST``, ``UNEXPECTED_STATUS_CODE``,
            ``UNEXPECTED_ERROR``, ``INTERNET_CONNECTION``).
    """

    def __init__(self, kind: RequestErrorKind, message: Optional[str] = None) -> None:
        super().__init__(message if message is not None else kind.value)
        self.kind = kind
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RequestError):
            return NotImplemented
        return self.kind == other.kind and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.kind, self.message))

    def __repr__(self) -> str:
        if self.message is None:
            return f"RequestError({self.kind.name})"
        return f"RequestError({self.kind.name}, {self.message!r})"

    @classmethod
    def invalid_url(cls) -> RequestError:
        return cls(RequestErrorKind.INVALID_URL)

    @classmethod
    def no_response(cls) -> RequestError:
        return cls(RequestErrorKind.NO_RESPONSE)

    @classmethod
    def bad_request(cls, message: str) -> RequestError:
        return cls(RequestErrorKind.BAD_REQUEST, message)

    @classmethod
    def unauthorized(cls) -> RequestError:
        return cls(RequestErrorKind.UNAUTHORIZED)

    @classmethod
    def unexpected_status_code(cls, message: str) -> RequestError:
        return cls(RequestErrorKind.UNEXPECTED_STATUS_CODE, message)

    @classmethod
    def unexpected_error(cls, message: str) -> RequestError:
        return cls(RequestErrorKind.UNEXPECTED_ERROR, message)

    @classmethod
    def internet_connection(cls, message: str) -> RequestError:
        return cls(RequestErrorKind.INTERNET_CONNECTION, message)

    @classmethod
    def unknown(cls) -> RequestError:
        return cls(RequestErrorKind.UNKNOWN)


class NetlibError(Exception):
    """Base exception for netlib usage and plumbing errors."""


class InvalidEndpointError(NetlibError):
    """Raised when an endpoint's fields cannot be assembled into an absolute URL."""


class SessionInvalidatedError(NetlibError):
    """Raised when a task is requested from a session that has been invalidated."""


class TaskCancelledError(NetlibError):
    """Delivered to ``did_complete`` when a download task was cancelled before finishing."""
