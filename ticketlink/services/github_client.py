"""GitHub API client wrapper"""
import logging
import time

from github import Auth, Github, GithubException

from ticketlink.services.events import GITHUB_ICON

logger = logging.getLogger(__name__)


class GitHubClient:
    """Wrapper for the GitHub discussion operations the linker needs"""

    link_icon = GITHUB_ICON

    def __init__(self, access_token: str, base_url: str = "https://api.github.com"):
        """Initialize GitHub client"""
        self.gh = Github(base_url=base_url, auth=Auth.Token(access_token))

    @staticmethod
    def _should_retry(exc: Exception) -> bool:
        """Best-effort retry predicate for transient GitHub failures."""
        return getattr(exc, "status", None) in (429, 500, 502, 503, 504)

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

    def _get_issue(self, repo: str, number: int):
        # Pull requests are issues too; body and comments live on the issues API.
        repository = self._with_retries(lambda: self.gh.get_repo(repo))
        return self._with_retries(lambda: repository.get_issue(number))

    def edit_comment(
        self,
        repo: str,
        number: int,
        comment_id: int,
        body: str,
        is_pull_request: bool = False,
        review_comment: bool = False,
    ) -> None:
        """Replace the body of an issue/PR comment or an inline review comment"""
        try:
            if review_comment:
                repository = self._with_retries(lambda: self.gh.get_repo(repo))
                pull = self._with_retries(lambda: repository.get_pull(number))
                comment = self._with_retries(lambda: pull.get_review_comment(comment_id))
            else:
                issue = self._get_issue(repo, number)
                comment = self._with_retries(lambda: issue.get_comment(comment_id))
            self._with_retries(lambda: comment.edit(body))
            logger.info(f"Edited comment {comment_id} on {repo}#{number}")
        except GithubException as e:
            logger.error(f"Failed to edit comment {comment_id} on {repo}#{number}: {e}")
            raise

    def get_thread_body(self, repo: str, number: int, is_pull_request: bool = False) -> str:
        """Get the body of an issue or pull request"""
        try:
            return self._get_issue(repo, number).body or ""
        except GithubException as e:
            logger.error(f"Failed to get {repo}#{number}: {e}")
            raise

    def edit_thread_body(
        self, repo: str, number: int, body: str, is_pull_request: bool = False
    ) -> None:
        """Replace the body of an issue or pull request"""
        try:
            issue = self._get_issue(repo, number)
            self._with_retries(lambda: issue.edit(body=body))
            logger.info(f"Edited body of {repo}#{number}")
        except GithubException as e:
            logger.error(f"Failed to edit body of {repo}#{number}: {e}")
            raise
