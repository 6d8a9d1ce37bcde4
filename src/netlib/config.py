"""Fixed request settings and download-directory resolution.

netlib has no user-facing configuration: timeouts and the fallback error
message are constants. The only filesystem location it touches is the
directory where background downloads are spooled before they are handed to
a delegate. It follows the XDG Base Directory convention on Linux/BSD and
falls back to ``~/.netlib/cache`` elsewhere. Spooled files are deleted as
soon as the delegate callback returns.
"""

from __future__ import annotations

import os
import platform
import re
from pathlib import Path

_APP_NAME = "netlib"

REQUEST_TIMEOUT = 15.0
"""Seconds allowed for each phase of a request (connect, read, write, pool)."""

RESOURCE_TIMEOUT = 15.0
"""Seconds allowed for the whole exchange, body included."""

DOWNLOAD_CHUNK_SIZE = 64 * 1024
"""Bytes read per iteration when spooling a background download to disk."""

UNEXPECTED_STATUS_MESSAGE = (
    "We are unable to retrieve your information at this time, please try again later."
)
"""User-facing message carried by ``UNEXPECTED_STATUS_CODE`` failures."""

_UNSAFE_SEGMENT = re.compile(r"[^A-Za-z0-9._-]+")


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform supports XDG Base Directory spec (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CACHE_HOME/netlib/`` (default ``~/.cache/netlib/``).
    On macOS/Windows: ``~/.netlib/cache/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CACHE_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".cache"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}" / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_downloads_dir(identifier: str) -> Path:
    """Return the spool directory for background session *identifier*.

    The identifier is reduced to a filesystem-safe segment, so two sessions
    with the same identifier share a directory (file names stay unique).

    Returns:
        Absolute path to the directory (guaranteed to exist).
    """
    segment = _UNSAFE_SEGMENT.sub("_", identifier).strip("._") or "default"
    path = get_cache_dir() / "downloads" / segment
    path.mkdir(parents=True, exist_ok=True)
    return path
