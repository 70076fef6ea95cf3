"""Jira REST API client wrapper"""
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from ticketlink.services.events import RemoteLink

logger = logging.getLogger(__name__)


class JiraError(Exception):
    """Jira request failed."""

    def __init__(self, message: str, response_code: Optional[int] = None):
        super().__init__(message)
        self.response_code = response_code


class JiraNotFoundError(JiraError):
    """Jira answered 404 for the requested issue."""


class JiraClient:
    """Wrapper for the Jira operations the linker needs"""

    API_PREFIX = "/rest/api/2"

    def __init__(
        self,
        url: str,
        token: str,
        username: Optional[str] = None,
        timeout_s: float = 30.0,
    ):
        """Initialize Jira client"""
        self.url = (url or "").rstrip("/")
        self.timeout_s = timeout_s
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if username:
            self.session.auth = (username, token)
        else:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @property
    def base_url(self) -> str:
        """Base URL used to build /browse links"""
        return self.url

    @staticmethod
    def _should_retry(exc: Exception) -> bool:
        """Best-effort retry predicate for transient Jira failures."""
        if isinstance(exc, (requests.ConnectionError, requests.Timeout)):
            return True
        rc = getattr(exc, "response_code", None)
        return rc in (429, 500, 502, 503, 504)

    def _with_retries(self, fn, *, max_attempts: int = 3, base_delay_s: float = 0.5):
        """Run callable with small exponential backoff on transient errors."""
        attempt = 1
        while True:
            try:
                return fn()
            except Exception as e:
                if attempt >= max_attempts or not self._should_retry(e):
                    raise
                time.sleep(base_delay_s * (2 ** (attempt - 1)))
                attempt += 1

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Send one request and decode the JSON answer (None for empty bodies)."""
        resp = self.session.request(
            method, f"{self.url}{self.API_PREFIX}{path}", timeout=self.timeout_s, **kwargs
        )
        if resp.status_code == 404:
            raise JiraNotFoundError(f"{method} {path}: not found", response_code=404)
        if resp.status_code >= 400:
            raise JiraError(
                f"{method} {path} failed with {resp.status_code}: {resp.text[:200]}",
                response_code=resp.status_code,
            )
        if not resp.content:
            return None
        return resp.json()

    @staticmethod
    def _issue_path(issue_id: str) -> str:
        return f"/issue/{quote(issue_id, safe='')}"

    def get_issue(self, issue_id: str) -> Dict[str, Any]:
        """Get an issue by key; raises JiraNotFoundError if it does not exist"""
        return self._with_retries(
            lambda: self._request("GET", self._issue_path(issue_id), params={"fields": "summary"})
        )

    def get_remote_links(self, issue_id: str) -> List[RemoteLink]:
        """Get all remote links of an issue"""
        try:
            data = self._with_retries(
                lambda: self._request("GET", f"{self._issue_path(issue_id)}/remotelink")
            )
        except Exception as e:
            logger.error(f"Failed to get remote links for {issue_id}: {e}")
            raise
        return [RemoteLink.from_payload(item) for item in data or [] if isinstance(item, dict)]

    def add_remote_link(self, issue_id: str, link: RemoteLink) -> Any:
        """Create a remote link on an issue"""
        try:
            result = self._with_retries(
                lambda: self._request(
                    "POST", f"{self._issue_path(issue_id)}/remotelink", json=link.to_payload()
                )
            )
            logger.info(f"Created remote link on {issue_id} -> {link.url}")
            return result
        except Exception as e:
            logger.error(f"Failed to add remote link to {issue_id}: {e}")
            raise
