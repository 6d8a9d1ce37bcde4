"""Success-or-failure container returned by every client call."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from netlib.exceptions import RequestError

T = TypeVar("T")


class Result(Generic[T]):
    """Either a decoded value or a :class:`~netlib.exceptions.RequestError`.

    Build instances with :meth:`success` or :meth:`failure`; the constructor
    is not meant to be called directly.

    Example::

        result = await client.send_request(endpoint, User)
        if result.is_success:
            print(result.value.name)
        else:
            print(result.error.kind)
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: Optional[T] = None, error: Optional[RequestError] = None) -> None:
        self._value = value
        self._error = error

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: RequestError) -> Result[T]:
        return cls(error=error)

    @property
    def is_success(self) -> bool:
        return self._error is None

    @property
    def is_failure(self) -> bool:
        return self._error is not None

    @property
    def value(self) -> Optional[T]:
        """The decoded value, or ``None`` for a failure."""
        return self._value

    @property
    def error(self) -> Optional[RequestError]:
        """The failure, or ``None`` for a success."""
        return self._error

    def unwrap(self) -> T:
        """Return the value or raise the stored :class:`RequestError`."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        if self._error is not None:
            return default
        return self._value  # type: ignore[return-value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._value == other._value and self._error == other._error

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.failure({self._error!r})"
        return f"Result.success({self._value!r})"
