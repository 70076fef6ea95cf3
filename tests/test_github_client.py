import unittest
from unittest.mock import Mock, patch
import logging

from github import GithubException

logging.disable(logging.CRITICAL)


class GitHubClientApiCallTests(unittest.TestCase):
    def _client(self):
        from ticketlink.services.github_client import GitHubClient

        # Avoid running GitHubClient.__init__; patch the PyGithub handle.
        client = GitHubClient.__new__(GitHubClient)
        client.gh = Mock()
        return client

    def test_init_builds_token_auth(self):
        from ticketlink.services.github_client import GitHubClient

        with patch("ticketlink.services.github_client.Github") as github_ctor, patch(
            "ticketlink.services.github_client.Auth.Token"
        ) as token_ctor:
            client = GitHubClient("tok", base_url="https://ghe.example/api/v3")

        token_ctor.assert_called_once_with("tok")
        github_ctor.assert_called_once_with(
            base_url="https://ghe.example/api/v3", auth=token_ctor.return_value
        )
        self.assertIs(client.gh, github_ctor.return_value)
        self.assertEqual(client.link_icon.title, "GitHub")

    def test_edit_comment_goes_through_issue_comment(self):
        client = self._client()
        repo = client.gh.get_repo.return_value
        issue = repo.get_issue.return_value
        comment = issue.get_comment.return_value

        client.edit_comment("o/r", 5, 77, "new text", is_pull_request=True)

        client.gh.get_repo.assert_called_once_with("o/r")
        repo.get_issue.assert_called_once_with(5)
        issue.get_comment.assert_called_once_with(77)
        comment.edit.assert_called_once_with("new text")

    def test_edit_review_comment_goes_through_pull_request(self):
        client = self._client()
        repo = client.gh.get_repo.return_value
        pull = repo.get_pull.return_value
        comment = pull.get_review_comment.return_value

        client.edit_comment("o/r", 5, 77, "new text", is_pull_request=True, review_comment=True)

        repo.get_pull.assert_called_once_with(5)
        pull.get_review_comment.assert_called_once_with(77)
        comment.edit.assert_called_once_with("new text")
        repo.get_issue.assert_not_called()

    def test_get_thread_body_returns_empty_string_for_null_body(self):
        client = self._client()
        client.gh.get_repo.return_value.get_issue.return_value.body = None

        self.assertEqual(client.get_thread_body("o/r", 5), "")

    def test_edit_thread_body_edits_issue(self):
        client = self._client()
        issue = client.gh.get_repo.return_value.get_issue.return_value

        client.edit_thread_body("o/r", 5, "annotated")

        issue.edit.assert_called_once_with(body="annotated")

    def test_transient_errors_are_retried(self):
        client = self._client()
        repo = Mock()
        client.gh.get_repo.side_effect = [GithubException(502, "bad gateway", None), repo]
        repo.get_issue.return_value.body = "hello"

        with patch("ticketlink.services.github_client.time.sleep") as sleep:
            self.assertEqual(client.get_thread_body("o/r", 1), "hello")
        sleep.assert_called_once()

    def test_non_transient_errors_propagate(self):
        client = self._client()
        client.gh.get_repo.side_effect = GithubException(404, "not found", None)

        with self.assertRaises(GithubException):
            client.edit_thread_body("o/r", 1, "x")
        self.assertEqual(client.gh.get_repo.call_count, 1)


if __name__ == "__main__":
    unittest.main()
