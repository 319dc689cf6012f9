"""
Remote API Client

Forwards finished test results to the practice backend. Forwarding is
best-effort: failures are logged and never interrupt practice.
"""

import logging
from typing import Any, Dict, Optional

import requests

from models.test_result import TestResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3001"
DEFAULT_TIMEOUT = 3.0  # seconds


class RemoteApiError(Exception):
    """Raised when the backend cannot be reached or rejects a request."""

    def __init__(self, message: str = "Remote API request failed") -> None:
        """Initialize the exception with a message."""
        self.message = message
        super().__init__(self.message)


class RemoteApiClient:
    """Thin HTTP client for the practice backend."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Args:
            base_url: Backend root URL, without the ``/api`` prefix.
            timeout: Request timeout in seconds.
            session: HTTP session to use; a new one is created if omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/api{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            raise RemoteApiError(f"POST {url} failed: {e}") from e
        if not isinstance(body, dict):
            raise RemoteApiError(f"POST {url} returned a non-object body")
        return body

    def submit_test_result(self, user_id: str, result: TestResult) -> bool:
        """Send ``result`` for ``user_id``; returns False instead of raising on failure."""
        payload = {"userId": user_id, **result.to_dict()}
        try:
            self._post("/test-results", payload)
        except RemoteApiError as e:
            logger.warning("Could not forward test result: %s", e.message)
            return False
        logger.debug("Forwarded test result for user %s", user_id)
        return True
