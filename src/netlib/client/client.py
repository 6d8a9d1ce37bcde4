"""The netlib client: foreground requests, background downloads, and decoding.

:class:`Client` carries the default behaviour for every call mode. Nothing
about it is shared between calls -- each foreground request opens and
closes its own :class:`httpx.AsyncClient`, and each background request
creates its own :class:`~netlib.session.BackgroundSession` -- so one
instance can be used from any number of coroutines and threads.

Subclass it to override a single mode; the three entry points do not call
each other.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, TypeVar, Union

import httpx

from netlib.client.classify import (
    classify_transport_error,
    decode_response,
    response_status,
)
from netlib.exceptions import InvalidEndpointError, RequestError
from netlib.models import Endpoint
from netlib.output import get_output
from netlib.request import build_request, describe_request
from netlib.result import Result
from netlib.session import (
    BackgroundSession,
    DownloadTask,
    SessionConfiguration,
    SessionDelegate,
)

T = TypeVar("T")


class Client:
    """Builds requests from endpoints, runs them, and classifies the outcome.

    Args:
        transport: Optional transport for foreground requests. Tests pass
            :class:`httpx.MockTransport`; production code leaves it unset.
        background_transport: Optional transport for background downloads.
        downloads_dir: Where background downloads are spooled. Defaults to
            the per-identifier cache directory.

    Example::

        client = Client()
        result = await client.send_request(
            EndpointSpec(host="api.example.com", version="/v1", path="/users/1"),
            User,
        )
    """

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        background_transport: Optional[httpx.BaseTransport] = None,
        downloads_dir: Optional[Path] = None,
    ) -> None:
        self._transport = transport
        self._background_transport = background_transport
        self._downloads_dir = downloads_dir

    # ------------------------------------------------------------------ #
    # Foreground
    # ------------------------------------------------------------------ #

    async def send_request(self, endpoint: Endpoint, response_model: type[T]) -> Result[T]:
        """Perform one exchange for *endpoint* and decode the body into *response_model*.

        Never raises for request failures; they come back as
        :class:`~netlib.exceptions.RequestError` inside the result.

        Returns:
            ``Result.success(value)`` for a 2xx body that decodes, otherwise
            ``Result.failure(error)``.
        """
        output = get_output()

        try:
            request = build_request(endpoint)
        except InvalidEndpointError as exc:
            output.debug(f"[Client] Invalid URL: {exc}")
            return Result.failure(RequestError.invalid_url())

        configuration = SessionConfiguration.ephemeral()
        try:
            response = await asyncio.wait_for(
                self._execute(request, configuration),
                timeout=configuration.timeout_for_resource,
            )
        except (httpx.HTTPError, asyncio.TimeoutError) as exc:
            output.debug(f"[Client] Request: {describe_request(request)}, Error: {exc!r}")
            return Result.failure(classify_transport_error(exc))

        status = response_status(response)
        if status is None:
            output.debug(f"[Client] Request: {describe_request(request)}, no HTTP response")
            return Result.failure(RequestError.no_response())

        output.debug(f"[Client] Request: {describe_request(request)}, Code: {status}")
        return decode_response(status, lambda: response.content, response_model, "[Client]")

    async def _execute(
        self, request: httpx.Request, configuration: SessionConfiguration
    ) -> httpx.Response:
        """Send *request* on a fresh client that is closed before returning."""
        async with httpx.AsyncClient(
            timeout=configuration.httpx_timeout(),
            follow_redirects=True,
            transport=self._transport,
        ) as session:
            return await session.send(request)

    # ------------------------------------------------------------------ #
    # Background
    # ------------------------------------------------------------------ #

    def send_background_request(
        self,
        delegate: SessionDelegate,
        identifier: str,
        endpoint: Endpoint,
        response_model: type[T],
    ) -> None:
        """Submit *endpoint* as a background download and return immediately.

        Completion is delivered to *delegate* on a worker thread; a delegate
        typically calls :meth:`get_model_from_location` from
        ``did_finish_downloading`` with the same *response_model*.

        If the endpoint cannot form a URL the request is dropped without
        notifying the delegate.
        """
        output = get_output()
        configuration = SessionConfiguration.background(identifier)

        try:
            request = build_request(endpoint)
        except InvalidEndpointError as exc:
            output.debug(f"[Client-Background] Invalid URL, request dropped: {exc}")
            return

        output.debug(f"[Client-Background] Request: {describe_request(request)}")
        session = BackgroundSession(
            configuration,
            delegate=delegate,
            transport=self._background_transport,
            downloads_dir=self._downloads_dir,
        )
        session.download_task(request).resume()

    def get_model_from_location(
        self,
        session: BackgroundSession,
        download_task: DownloadTask,
        location: Union[str, Path],
        response_model: type[T],
    ) -> Result[T]:
        """Classify a finished download and decode the body stored at *location*.

        Tears the session down as a side effect: ``invalidate_and_cancel``
        when the task has no HTTP response, ``finish_tasks_and_invalidate``
        otherwise.
        """
        status = response_status(download_task.response)
        if status is None:
            session.invalidate_and_cancel()
            return Result.failure(RequestError.no_response())

        session.finish_tasks_and_invalidate()
        path = Path(location)
        return decode_response(status, path.read_bytes, response_model, "[Client-Background]")

    def handle_error(self, session: BackgroundSession, error: Optional[BaseException]) -> None:
        """Log *error* and tear down *session*. Does nothing when *error* is ``None``."""
        if error is None:
            return
        identifier = session.configuration.identifier or "UNKNOWN"
        get_output().debug(f"[Client-Background] {identifier} fetch error: {error}")
        session.invalidate_and_cancel()
