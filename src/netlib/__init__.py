"""netlib -- a thin, typed HTTP client over endpoint descriptors.

Describe a request once as an :class:`~netlib.models.Endpoint` (scheme,
host, version, path, method, headers, query items, body) and let
:class:`~netlib.client.Client` run it:

    result = await Client().send_request(endpoint, User)

Every call returns a :class:`~netlib.result.Result` holding either the
decoded value or one :class:`~netlib.exceptions.RequestError` kind.
Background downloads are submitted with
:meth:`~netlib.client.Client.send_background_request` and complete through a
:class:`~netlib.session.SessionDelegate` such as
:class:`~netlib.client.FutureDelegate`.

Modules:
    models: Endpoint protocol, ``EndpointSpec``, ``HTTPMethod``, ``ErrorResponse``.
    request: URL and request assembly.
    session: Session configuration and the background download session.
    client: The client, response classification, and ``FutureDelegate``.
    result: The ``Result`` container.
    exceptions: ``RequestError`` and library errors.
    config: Fixed timeouts and the downloads directory.
    output: stderr diagnostics built on Rich.
"""

from netlib.client import Client, FutureDelegate
from netlib.exceptions import RequestError, RequestErrorKind
from netlib.models import Endpoint, EndpointSpec, ErrorResponse, HTTPMethod, QueryItem
from netlib.result import Result
from netlib.session import (
    BackgroundSession,
    DownloadDelegate,
    DownloadTask,
    SessionConfiguration,
    SessionDelegate,
)

__version__ = "0.1.0"

__all__ = [
    "BackgroundSession",
    "Client",
    "DownloadDelegate",
    "DownloadTask",
    "Endpoint",
    "EndpointSpec",
    "ErrorResponse",
    "FutureDelegate",
    "HTTPMethod",
    "QueryItem",
    "RequestError",
    "RequestErrorKind",
    "Result",
    "SessionConfiguration",
    "SessionDelegate",
]
