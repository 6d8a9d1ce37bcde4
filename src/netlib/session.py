"""Session configuration and the background download session.

The foreground client only needs :class:`SessionConfiguration`: it turns
the ephemeral configuration into the settings of a short-lived
:class:`httpx.AsyncClient`.

The background path needs more. :class:`BackgroundSession` runs
:class:`DownloadTask` objects on a thread pool, spools each response body
to a file, and reports progress to a :class:`SessionDelegate`:

1. ``did_finish_downloading(session, task, location)`` -- the body is on
   disk at *location*. The file is deleted once the callback returns, so
   the delegate must read (or move) it before returning.
2. ``did_complete(session, task, error)`` -- always called last for every
   task. *error* is ``None`` on success.
3. ``did_become_invalid(session, error)`` -- once per session, after
   :meth:`BackgroundSession.finish_tasks_and_invalidate` has let every
   task finish, or right after :meth:`BackgroundSession.invalidate_and_cancel`.

Callbacks run on pool threads. An exception escaping a callback is logged
and does not stop the session.
"""

from __future__ import annotations

import enum
import itertools
import os
import tempfile
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field

from netlib.config import (
    DOWNLOAD_CHUNK_SIZE,
    REQUEST_TIMEOUT,
    RESOURCE_TIMEOUT,
    get_downloads_dir,
)
from netlib.exceptions import SessionInvalidatedError, TaskCancelledError
from netlib.output import get_output


class SessionConfiguration(BaseModel):
    """Settings shared by every task a session runs.

    Use :meth:`ephemeral` for foreground requests and :meth:`background`
    for download sessions rather than building one by hand.
    """

    model_config = ConfigDict(frozen=True)

    identifier: Optional[str] = Field(
        default=None, description="Background session identifier"
    )
    timeout_for_request: float = Field(
        default=REQUEST_TIMEOUT, description="Per-phase timeout in seconds"
    )
    timeout_for_resource: float = Field(
        default=RESOURCE_TIMEOUT, description="Whole-exchange timeout in seconds"
    )
    is_discretionary: bool = Field(
        default=False, description="Whether the session may defer tasks"
    )
    sends_launch_events: bool = Field(
        default=True, description="Whether completion may relaunch the host app"
    )
    is_ephemeral: bool = Field(
        default=False, description="No cookies or cache shared beyond the session"
    )

    @classmethod
    def ephemeral(cls) -> SessionConfiguration:
        """Configuration for one foreground exchange."""
        return cls(is_ephemeral=True, sends_launch_events=False)

    @classmethod
    def background(cls, identifier: str) -> SessionConfiguration:
        """Configuration for a background download session keyed by *identifier*."""
        return cls(identifier=identifier, is_discretionary=False)

    def httpx_timeout(self) -> httpx.Timeout:
        """Per-phase timeout for an httpx client."""
        return httpx.Timeout(self.timeout_for_request)


class TaskState(str, enum.Enum):
    SUSPENDED = "suspended"
    RUNNING = "running"
    CANCELING = "canceling"
    COMPLETED = "completed"


class SessionDelegate(Protocol):
    """Callbacks a :class:`BackgroundSession` delivers on its worker threads."""

    def did_finish_downloading(
        self, session: BackgroundSession, task: DownloadTask, location: Path
    ) -> None: ...

    def did_complete(
        self,
        session: BackgroundSession,
        task: DownloadTask,
        error: Optional[BaseException],
    ) -> None: ...

    def did_become_invalid(
        self, session: BackgroundSession, error: Optional[BaseException]
    ) -> None: ...


class DownloadDelegate:
    """:class:`SessionDelegate` with no-op callbacks; override what you need."""

    def did_finish_downloading(
        self, session: BackgroundSession, task: DownloadTask, location: Path
    ) -> None:
        pass

    def did_complete(
        self,
        session: BackgroundSession,
        task: DownloadTask,
        error: Optional[BaseException],
    ) -> None:
        pass

    def did_become_invalid(
        self, session: BackgroundSession, error: Optional[BaseException]
    ) -> None:
        pass


class DownloadTask:
    """One download run by a :class:`BackgroundSession`.

    Created suspended by :meth:`BackgroundSession.download_task`; nothing
    happens until :meth:`resume` is called.

    Attributes:
        task_identifier: Unique within the owning session.
        original_request: The request the task was created with.
        response: The HTTP response (status and headers; the body is on
            disk), or ``None`` until headers arrive.
        error: The failure delivered to ``did_complete``, if any.
        state: Current :class:`TaskState`.
    """

    def __init__(
        self,
        session: BackgroundSession,
        task_identifier: int,
        request: httpx.Request,
    ) -> None:
        self._session = session
        self.task_identifier = task_identifier
        self.original_request = request
        self.response: Optional[httpx.Response] = None
        self.error: Optional[BaseException] = None
        self.state = TaskState.SUSPENDED
        self._cancelled = threading.Event()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    def resume(self) -> None:
        """Start the download. Calling it again has no effect."""
        with self._session._lock:
            if self.state != TaskState.SUSPENDED or self.is_cancelled:
                return
            self.state = TaskState.RUNNING
        self._session._submit(self)

    def cancel(self) -> None:
        """Ask the task to stop; ``did_complete`` receives :class:`TaskCancelledError`."""
        with self._session._lock:
            if self.state == TaskState.COMPLETED or self.is_cancelled:
                return
            was_suspended = self.state == TaskState.SUSPENDED
            self._cancelled.set()
            self.state = TaskState.CANCELING
        if was_suspended:
            # Never submitted, so no worker will report it.
            self._session._submit(self)

    def __repr__(self) -> str:
        return (
            f"DownloadTask(id={self.task_identifier}, "
            f"{self.original_request.method} {self.original_request.url}, "
            f"state={self.state.value})"
        )


class BackgroundSession:
    """Runs download tasks off the caller's thread and reports via a delegate.

    Args:
        configuration: Usually :meth:`SessionConfiguration.background`.
        delegate: Receives task and session callbacks. May be ``None``.
        transport: Optional httpx transport (tests pass
            :class:`httpx.MockTransport`).
        downloads_dir: Where response bodies are spooled. Defaults to
            :func:`~netlib.config.get_downloads_dir` for the identifier.
        max_workers: Size of the worker pool.
    """

    def __init__(
        self,
        configuration: SessionConfiguration,
        delegate: Optional[SessionDelegate] = None,
        transport: Optional[httpx.BaseTransport] = None,
        downloads_dir: Optional[Path] = None,
        max_workers: int = 4,
    ) -> None:
        self.configuration = configuration
        self.delegate = delegate
        self._transport = transport
        self._downloads_dir = downloads_dir
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=f"netlib-{configuration.identifier or 'session'}",
        )
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._tasks: dict[int, DownloadTask] = {}
        self._invalidated = False
        self._invalidation_reported = False

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def is_invalidated(self) -> bool:
        return self._invalidated

    @property
    def tasks(self) -> list[DownloadTask]:
        """Tasks that have not yet delivered ``did_complete``."""
        with self._lock:
            return list(self._tasks.values())

    def download_task(self, request: httpx.Request) -> DownloadTask:
        """Create a suspended download task for *request*.

        Raises:
            SessionInvalidatedError: If the session has been invalidated.
        """
        with self._lock:
            if self._invalidated:
                raise SessionInvalidatedError(
                    f"Session {self.configuration.identifier!r} has been invalidated"
                )
            task = DownloadTask(self, next(self._ids), request)
            self._tasks[task.task_identifier] = task
        return task

    def finish_tasks_and_invalidate(self) -> None:
        """Refuse new tasks; let outstanding ones finish, then report invalidation."""
        with self._lock:
            self._invalidated = True
            idle = not self._tasks
        self._executor.shutdown(wait=False)
        if idle:
            self._report_invalidation()

    def invalidate_and_cancel(self) -> None:
        """Refuse new tasks, cancel outstanding ones, and report invalidation."""
        with self._lock:
            self._invalidated = True
            outstanding = list(self._tasks.values())
        for task in outstanding:
            task.cancel()
        self._executor.shutdown(wait=False)
        self._report_invalidation()

    # ------------------------------------------------------------------ #
    # Worker side
    # ------------------------------------------------------------------ #

    def _submit(self, task: DownloadTask) -> None:
        try:
            self._executor.submit(self._run, task)
        except RuntimeError:
            # Pool already shut down: finish the task on the caller's thread.
            self._run(task)

    def _run(self, task: DownloadTask) -> None:
        error: Optional[BaseException] = None
        location: Optional[Path] = None
        try:
            if task.is_cancelled:
                raise TaskCancelledError(f"Task {task.task_identifier} was cancelled")
            location = self._download(task)
        except Exception as exc:
            # Worker thread boundary: every failure is reported to did_complete.
            error = exc

        if location is not None:
            try:
                self._deliver("did_finish_downloading", task, location)
            finally:
                location.unlink(missing_ok=True)

        with self._lock:
            task.error = error
            task.state = TaskState.COMPLETED
        self._deliver("did_complete", task, error)

        with self._lock:
            self._tasks.pop(task.task_identifier, None)
            finished = self._invalidated and not self._tasks
        if finished:
            self._report_invalidation()

    def _download(self, task: DownloadTask) -> Path:
        """Send the task's request and spool the body to a file."""
        config = self.configuration
        request = task.original_request
        deadline = time.monotonic() + config.timeout_for_resource
        directory = self._downloads_dir or get_downloads_dir(config.identifier or "default")
        directory.mkdir(parents=True, exist_ok=True)

        with httpx.Client(
            timeout=config.httpx_timeout(),
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = client.send(request, stream=True)
            try:
                task.response = response
                fd, name = tempfile.mkstemp(prefix="download-", suffix=".tmp", dir=directory)
                location = Path(name)
                try:
                    with os.fdopen(fd, "wb") as fh:
                        for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                            if task.is_cancelled:
                                raise TaskCancelledError(
                                    f"Task {task.task_identifier} was cancelled"
                                )
                            if time.monotonic() > deadline:
                                raise httpx.ReadTimeout(
                                    f"Resource timeout after {config.timeout_for_resource}s",
                                    request=request,
                                )
                            fh.write(chunk)
                except BaseException:
                    location.unlink(missing_ok=True)
                    raise
            finally:
                response.close()
        return location

    def _deliver(self, callback: str, *args: Any) -> None:
        if self.delegate is None:
            return
        method: Callable[..., None] = getattr(self.delegate, callback)
        try:
            method(self, *args)
        except Exception as exc:
            get_output().error(
                f"[Client-Background] Delegate {callback} failed: {exc}"
            )

    def _report_invalidation(self) -> None:
        with self._lock:
            if self._invalidation_reported:
                return
            self._invalidation_reported = True
        if self.delegate is None:
            return
        try:
            self.delegate.did_become_invalid(self, None)
        except Exception as exc:
            get_output().error(
                f"[Client-Background] Delegate did_become_invalid failed: {exc}"
            )

    def __repr__(self) -> str:
        return (
            f"BackgroundSession(identifier={self.configuration.identifier!r}, "
            f"invalidated={self._invalidated})"
        )
