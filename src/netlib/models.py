"""Pydantic models and protocols shared across netlib.

This is the single source of truth for data shapes in the package:

**Endpoint description** -- what a caller hands to the client:
    :class:`HTTPMethod`, :class:`QueryItem`, the structural
    :class:`Endpoint` protocol, and :class:`EndpointSpec`, a frozen model
    that satisfies the protocol for callers who do not bring their own
    class.

**Wire shapes** -- what the server sends back on failure:
    :class:`ErrorResponse`.

The session configuration model lives in :mod:`netlib.session` next to the
session it configures.
"""

from __future__ import annotations

import enum
from typing import Mapping, NamedTuple, Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class HTTPMethod(str, enum.Enum):
    """HTTP verbs an endpoint may use. The value is the wire verb."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class QueryItem(NamedTuple):
    """One ``name=value`` pair of a query string.

    A ``None`` value renders as a bare ``name`` with no ``=``.
    """

    name: str
    value: Optional[str] = None


@runtime_checkable
class Endpoint(Protocol):
    """Everything needed to build one HTTP request.

    Any object exposing these attributes is accepted by
    :class:`~netlib.client.Client`; subclassing is not required.

    Attributes:
        scheme: URL scheme, e.g. ``"https"``.
        host: Host name, e.g. ``"api.example.com"``.
        version: Path prefix placed before :attr:`path`, e.g. ``"/v1"``.
        path: Resource path, e.g. ``"/users"``.
        method: The HTTP verb.
        header: Headers sent verbatim, or ``None``.
        parameters: Ordered query items, or ``None``.
        body: Raw request payload, or ``None``.
        boundary: Multipart boundary for ``multipart/form-data`` bodies.
    """

    @property
    def scheme(self) -> str: ...

    @property
    def host(self) -> str: ...

    @property
    def version(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def method(self) -> HTTPMethod: ...

    @property
    def header(self) -> Optional[Mapping[str, str]]: ...

    @property
    def parameters(self) -> Optional[Sequence[QueryItem]]: ...

    @property
    def body(self) -> Optional[bytes]: ...

    @property
    def boundary(self) -> Optional[str]: ...


class EndpointSpec(BaseModel):
    """Immutable, ready-made :class:`Endpoint`.

    Example::

        EndpointSpec(
            host="api.example.com",
            version="/v1",
            path="/users",
            parameters=[QueryItem("page", "2")],
        )
    """

    model_config = ConfigDict(frozen=True)

    scheme: str = Field(default="https", description="URL scheme")
    host: str = Field(description="Host name")
    version: str = Field(default="", description="Path prefix, e.g. /v1")
    path: str = Field(default="", description="Resource path, e.g. /users")
    method: HTTPMethod = HTTPMethod.GET
    header: Optional[dict[str, str]] = None
    parameters: Optional[list[QueryItem]] = None
    body: Optional[bytes] = None
    boundary: Optional[str] = Field(
        default=None, description="Multipart boundary for form-data bodies"
    )


class ErrorResponse(BaseModel):
    """JSON body the server returns with HTTP 400.

    Only ``message`` is required; any other fields are kept in
    ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    message: str
