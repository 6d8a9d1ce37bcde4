"""Turn an :class:`~netlib.models.Endpoint` into an :class:`httpx.Request`.

Both client paths share this module, so the foreground and background
requests for the same endpoint are byte-for-byte identical. URL assembly
fails with :class:`~netlib.exceptions.InvalidEndpointError` before any
network activity when the endpoint's fields cannot form an absolute URL.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence
from urllib.parse import quote

import httpx

from netlib.exceptions import InvalidEndpointError
from netlib.models import Endpoint, HTTPMethod, QueryItem

_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_HOST_FORBIDDEN = re.compile(r"[\s/?#@]")
_HOST_PORT = re.compile(r"^([^:\[\]]+):(\d{1,5})$")

# RFC 3986 query characters that may stay unescaped inside a name or value.
# "&", "=" and "+" are escaped so they cannot change the pair structure.
_QUERY_SAFE = "!$'()*,;:/?@-._~"


def build_url(endpoint: Endpoint) -> httpx.URL:
    """Assemble the absolute URL for *endpoint*.

    ``version`` and ``path`` are concatenated as-is; the result must be
    empty or begin with ``/``. Query items keep their order; a ``None``
    value renders as a bare name.

    Raises:
        InvalidEndpointError: If the scheme, host, or path cannot form a
            valid absolute URL.
    """
    scheme = endpoint.scheme or ""
    host = endpoint.host or ""
    path = f"{endpoint.version or ''}{endpoint.path or ''}"

    if not _SCHEME.match(scheme):
        raise InvalidEndpointError(f"Invalid URL scheme: {scheme!r}")
    if not host or _HOST_FORBIDDEN.search(host):
        raise InvalidEndpointError(f"Invalid URL host: {host!r}")
    if path and not path.startswith("/"):
        raise InvalidEndpointError(f"URL path must start with '/': {path!r}")

    port: Optional[int] = None
    match = _HOST_PORT.match(host)
    if match:
        host, port = match.group(1), int(match.group(2))
        if not 0 < port < 65536:
            raise InvalidEndpointError(f"Invalid URL port: {port}")

    try:
        url = httpx.URL(scheme=scheme.lower(), host=host, port=port, path=path or "/")
        query = encode_query(endpoint.parameters)
        if query is not None:
            url = url.copy_with(query=query.encode("ascii"))
    except (httpx.InvalidURL, ValueError, TypeError) as exc:
        raise InvalidEndpointError(str(exc)) from exc
    return url


def encode_query(parameters: Optional[Sequence[QueryItem]]) -> Optional[str]:
    """Percent-encode *parameters* into a query string, or ``None`` when absent."""
    if parameters is None:
        return None
    pairs = []
    for item in parameters:
        name, value = QueryItem(*item)
        encoded = quote(str(name), safe=_QUERY_SAFE)
        if value is not None:
            encoded = f"{encoded}={quote(str(value), safe=_QUERY_SAFE)}"
        pairs.append(encoded)
    return "&".join(pairs)


def build_request(endpoint: Endpoint) -> httpx.Request:
    """Build the request for *endpoint*: method, verbatim headers, optional body.

    When the endpoint declares a multipart ``boundary`` and sets no
    ``Content-Type`` header, ``multipart/form-data; boundary=...`` is added.

    Raises:
        InvalidEndpointError: Propagated from :func:`build_url`.
    """
    url = build_url(endpoint)
    method = endpoint.method
    verb = method.value if isinstance(method, HTTPMethod) else str(method).upper()

    headers: dict[str, str] = dict(endpoint.header or {})
    if endpoint.boundary and not any(k.lower() == "content-type" for k in headers):
        headers["Content-Type"] = f"multipart/form-data; boundary={endpoint.boundary}"

    return httpx.Request(
        verb,
        url,
        headers=headers,
        content=endpoint.body if endpoint.body is not None else None,
    )


def describe_request(request: httpx.Request) -> str:
    """One-line description used in request traces."""
    return f"{request.method} {request.url}"
