"""HTTP client module for netlib.

Provides :class:`Client`, which turns an :class:`~netlib.models.Endpoint`
into one HTTP exchange and classifies the outcome into a
:class:`~netlib.result.Result`, and :class:`FutureDelegate`, a session
delegate that resolves a future when a background download completes.

Example::

    from netlib.client import Client

    result = await Client().send_request(endpoint, User)
"""

from netlib.client.client import Client
from netlib.client.delegate import FutureDelegate

__all__ = ["Client", "FutureDelegate"]
