"""A ready-made delegate that turns a background download into a future.

Example::

    delegate = FutureDelegate(client, User)
    client.send_background_request(delegate, "com.example.sync", endpoint, User)
    result = delegate.future.result(timeout=30)
"""

from __future__ import annotations

from concurrent.futures import Future
from pathlib import Path
from typing import TYPE_CHECKING, Generic, Optional, TypeVar

from netlib.client.classify import classify_transport_error
from netlib.exceptions import RequestError
from netlib.result import Result
from netlib.session import BackgroundSession, DownloadDelegate, DownloadTask

if TYPE_CHECKING:
    from netlib.client.client import Client

T = TypeVar("T")


class FutureDelegate(DownloadDelegate, Generic[T]):
    """Resolves :attr:`future` with the :class:`Result` of one background download.

    * body downloaded -- :meth:`Client.get_model_from_location` decides;
    * task failed -- the error is classified like a foreground transport
      failure and the session is torn down via :meth:`Client.handle_error`.

    If the decode callback itself fails, the future resolves to
    ``UNKNOWN`` when the task completes. Only the first outcome is kept.
    """

    def __init__(self, client: Client, response_model: type[T]) -> None:
        self._client = client
        self._response_model = response_model
        self.future: Future[Result[T]] = Future()

    def did_finish_downloading(
        self, session: BackgroundSession, task: DownloadTask, location: Path
    ) -> None:
        result = self._client.get_model_from_location(
            session, task, location, self._response_model
        )
        self._resolve(result)

    def did_complete(
        self,
        session: BackgroundSession,
        task: DownloadTask,
        error: Optional[BaseException],
    ) -> None:
        if error is not None:
            self._resolve(Result.failure(classify_transport_error(error)))
            self._client.handle_error(session, error)
        elif not self.future.done():
            # did_finish_downloading raised before producing a result.
            self._resolve(Result.failure(RequestError.unknown()))
            session.finish_tasks_and_invalidate()

    def did_become_invalid(
        self, session: BackgroundSession, error: Optional[BaseException]
    ) -> None:
        self._client.handle_error(session, error)

    def _resolve(self, result: Result[T]) -> None:
        if not self.future.done():
            self.future.set_result(result)
