"""Response classification -- maps a status code and body to a :class:`Result`.

Both client paths funnel through here so that an in-memory body (foreground)
and a body spooled to disk (background) are classified identically:

======== ============================================================
Status   Outcome
======== ============================================================
200-299  body decoded into the caller's type, or ``UNEXPECTED_ERROR``
400      ``BAD_REQUEST(message)`` from :class:`ErrorResponse`, or
         ``UNEXPECTED_ERROR`` when that body does not decode
401      ``UNAUTHORIZED`` (body ignored)
other    ``UNEXPECTED_STATUS_CODE`` with a fixed user-facing message
======== ============================================================

Transport failures are classified separately by
:func:`classify_transport_error`.
"""

from __future__ import annotations

import asyncio
import errno
import functools
from typing import Any, Callable, Iterator, Optional, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from netlib.config import UNEXPECTED_STATUS_MESSAGE
from netlib.exceptions import RequestError
from netlib.models import ErrorResponse
from netlib.output import get_output
from netlib.result import Result

T = TypeVar("T")

# Connection lost or timed out.
_CONNECTIVITY_ERRORS = (
    httpx.TimeoutException,
    httpx.ReadError,
    httpx.WriteError,
    httpx.CloseError,
    httpx.RemoteProtocolError,
    asyncio.TimeoutError,
)

# A connect attempt that failed because the machine is offline.
_OFFLINE_ERRNOS = frozenset({errno.ENETDOWN, errno.ENETUNREACH, errno.EHOSTUNREACH})


def response_status(response: Any) -> Optional[int]:
    """Return the HTTP status of *response*, or ``None`` if it has none."""
    if not isinstance(response, httpx.Response):
        return None
    status = response.status_code
    if not isinstance(status, int) or not 100 <= status <= 599:
        return None
    return status


def _chained_os_errors(error: BaseException) -> Iterator[OSError]:
    """Yield every :class:`OSError` chained beneath *error*.

    Follows ``__cause__`` and ``__context__``, and the members of exception
    groups (the async backend groups one error per attempted address).
    """
    seen: set[int] = set()
    pending: list[Any] = [error]
    while pending:
        current = pending.pop()
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, OSError):
            yield current
        pending.append(current.__cause__)
        pending.append(current.__context__)
        nested = getattr(current, "exceptions", None)
        if isinstance(nested, (list, tuple)):
            pending.extend(nested)


def _is_offline(error: BaseException) -> bool:
    for exc in _chained_os_errors(error):
        if isinstance(exc, (ConnectionResetError, ConnectionAbortedError)):
            return True
        if exc.errno in _OFFLINE_ERRNOS:
            return True
    return False


def classify_transport_error(error: BaseException) -> RequestError:
    """Map a failed exchange to ``INTERNET_CONNECTION`` or ``UNKNOWN``.

    Only offline, connection-lost and timed-out failures count as
    connectivity problems. A refused connection or a host that does not
    resolve is ``UNKNOWN``.
    """
    if isinstance(error, _CONNECTIVITY_ERRORS) or (
        isinstance(error, httpx.ConnectError) and _is_offline(error)
    ):
        message = str(error) or type(error).__name__
        return RequestError.internet_connection(message)
    return RequestError.unknown()


@functools.lru_cache(maxsize=128)
def _adapter(response_model: Any) -> TypeAdapter:
    return TypeAdapter(response_model)


def decode_body(data: bytes, response_model: Any) -> Any:
    """Validate JSON *data* into *response_model* in strict mode.

    Raises:
        pydantic.ValidationError: If *data* is not valid JSON for the type,
            including values that would need coercion (``"1"`` for ``int``).
    """
    return _adapter(response_model).validate_json(data, strict=True)


def decode_response(
    status: int,
    read_body: Callable[[], bytes],
    response_model: Any,
    prefix: str = "[Client]",
) -> Result[T]:
    """Classify *status* and decode the body where the status calls for it.

    Args:
        status: HTTP status code of the response.
        read_body: Returns the raw body. Only called for 2xx and 400, so a
            file-backed body is never read for other statuses.
        response_model: Any type pydantic can validate (model, dataclass,
            ``TypedDict``, ``list[Model]``, ...).
        prefix: Trace prefix identifying the calling path.
    """
    output = get_output()

    if 200 <= status <= 299:
        try:
            value = decode_body(read_body(), response_model)
        except (ValidationError, OSError) as exc:
            output.debug(f"{prefix} Decode error: {exc}")
            return Result.failure(RequestError.unexpected_error(str(exc)))
        output.debug(f"{prefix} Response: {value!r}")
        return Result.success(value)

    if status == 400:
        try:
            error_response = ErrorResponse.model_validate_json(read_body(), strict=True)
        except (ValidationError, OSError) as exc:
            output.debug(f"{prefix} Decode error: {exc}")
            return Result.failure(RequestError.unexpected_error(str(exc)))
        output.debug(f"{prefix} Error Response: {error_response!r}")
        return Result.failure(RequestError.bad_request(error_response.message))

    if status == 401:
        output.debug(f"{prefix} Unauthorized")
        return Result.failure(RequestError.unauthorized())

    output.debug(f"{prefix} Unexpected StatusCode: {status}")
    return Result.failure(RequestError.unexpected_status_code(UNEXPECTED_STATUS_MESSAGE))
