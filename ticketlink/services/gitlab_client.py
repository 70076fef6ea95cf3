"""GitLab API client wrapper"""
import gitlab
import logging
import time
from typing import Any

from ticketlink.services.events import RemoteLinkIcon

logger = logging.getLogger(__name__)


class GitLabClient:
    """Wrapper for the GitLab discussion operations the linker needs"""

    def __init__(self, url: str, access_token: str):
        """Initialize GitLab client"""
        self.url = (url or "").rstrip("/")
        self.gl = gitlab.Gitlab(self.url, private_token=access_token)
        self.gl.auth()
        self.link_icon = RemoteLinkIcon(url16x16=f"{self.url}/favicon.ico", title="GitLab")

    @staticmethod
    def _should_retry(exc: Exception) -> bool:
        """Best-effort retry predicate for transient GitLab failures."""
        # python-gitlab exceptions often carry an HTTP response code
        rc = getattr(exc, "response_code", None)
        if rc in (429, 500, 502, 503, 504):
            return True
        # If we can't classify, don't retry to avoid hiding real issues.
        return False

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

    def get_project(self, project_id: str):
        """Get project by ID or path"""
        try:
            return self._with_retries(lambda: self.gl.projects.get(project_id))
        except gitlab.exceptions.GitlabGetError as e:
            logger.error(f"Failed to get project {project_id}: {e}")
            raise

    def get_thread(self, project_id: str, iid: int, is_merge_request: bool = False) -> Any:
        """Get an issue or merge request by IID"""
        project = self.get_project(project_id)
        manager = project.mergerequests if is_merge_request else project.issues
        return self._with_retries(lambda: manager.get(iid))

    def edit_comment(
        self,
        repo: str,
        number: int,
        comment_id: int,
        body: str,
        is_pull_request: bool = False,
        review_comment: bool = False,
    ) -> None:
        """Replace the body of a note on an issue or merge request"""
        try:
            thread = self.get_thread(repo, number, is_merge_request=is_pull_request)
            note = self._with_retries(lambda: thread.notes.get(comment_id))
            note.body = body
            self._with_retries(lambda: note.save())
            logger.info(f"Edited note {comment_id} on {repo}#{number}")
        except Exception as e:
            logger.error(f"Failed to edit note {comment_id} on {repo}#{number}: {e}")
            raise

    def get_thread_body(self, repo: str, number: int, is_pull_request: bool = False) -> str:
        """Get the description of an issue or merge request"""
        try:
            thread = self.get_thread(repo, number, is_merge_request=is_pull_request)
            return getattr(thread, "description", None) or ""
        except Exception as e:
            logger.error(f"Failed to get {repo}#{number}: {e}")
            raise

    def edit_thread_body(
        self, repo: str, number: int, body: str, is_pull_request: bool = False
    ) -> None:
        """Replace the description of an issue or merge request"""
        try:
            thread = self.get_thread(repo, number, is_merge_request=is_pull_request)
            thread.description = body
            self._with_retries(lambda: thread.save())
            logger.info(f"Edited description of {repo}#{number}")
        except Exception as e:
            logger.error(f"Failed to edit description of {repo}#{number}: {e}")
            raise
