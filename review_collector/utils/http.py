"""
HTTP transport.

Thin wrapper around a requests session that admits one request at a time.
"""

import logging
import threading
from typing import Optional

import requests

import config.settings as settings

logger = logging.getLogger(__name__)


class RequestGate:
    """
    Shared HTTP transport for a collector run.

    Wraps a single requests.Session (redirects are followed) behind a
    bounded semaphore so at most `max_connections` requests are in flight
    at any time, whoever issues them.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        max_connections: int = settings.MAX_CONNECTIONS,
        timeout_seconds: float = settings.REQUEST_TIMEOUT_SECONDS
    ):
        """
        Initialize the request gate.

        Args:
            session: Session to send requests with (a new one if omitted)
            max_connections: Maximum concurrent in-flight requests
            timeout_seconds: Per-request timeout
        """
        if max_connections < 1:
            raise ValueError(f"Invalid max_connections: {max_connections}. Must be >= 1")

        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self._slots = threading.BoundedSemaphore(max_connections)

        logger.debug(
            f"Initialized RequestGate with max_connections={max_connections}, "
            f"timeout={timeout_seconds}s"
        )

    def post(self, url: str, **kwargs) -> requests.Response:
        """
        Send a POST request once a connection slot is free.

        Raises:
            requests.RequestException: If the request could not complete
        """
        kwargs.setdefault("timeout", self.timeout_seconds)
        kwargs.setdefault("allow_redirects", True)
        with self._slots:
            return self.session.post(url, **kwargs)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestGate":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
