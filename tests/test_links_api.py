import unittest
from unittest.mock import Mock, patch
import logging

from fastapi import HTTPException
from pydantic import ValidationError

from ticketlink.api.links import DiscussionEventRequest, process_event
from ticketlink.services.clients import ClientNotConfiguredError

logging.disable(logging.CRITICAL)


class ProcessEventTests(unittest.TestCase):
    def test_unknown_platform_fails_validation(self):
        with self.assertRaises(ValidationError):
            DiscussionEventRequest(repo="org/repo", number=1, html_url="u", platform="bitbucket")

    def test_unknown_platform_is_a_client_error_even_without_jira(self):
        payload = DiscussionEventRequest.model_construct(
            repo="org/repo",
            number=1,
            html_url="u",
            body="ABC-1",
            title=None,
            action="created",
            comment_id=None,
            is_pull_request=False,
            review_comment=False,
            platform="bitbucket",
        )

        with patch(
            "ticketlink.api.links.get_jira_client",
            side_effect=ClientNotConfiguredError("Jira is not configured"),
        ):
            with self.assertRaises(HTTPException) as ctx:
                process_event(payload, db=Mock())

        self.assertEqual(ctx.exception.status_code, 400)

    def test_missing_jira_configuration_returns_503(self):
        payload = DiscussionEventRequest(repo="org/repo", number=1, html_url="u", body="ABC-1")

        with patch("ticketlink.api.links.get_discussion_client", return_value=Mock()), patch(
            "ticketlink.api.links.get_jira_client",
            side_effect=ClientNotConfiguredError("Jira is not configured"),
        ):
            with self.assertRaises(HTTPException) as ctx:
                process_event(payload, db=Mock())

        self.assertEqual(ctx.exception.status_code, 503)

    def test_discussion_client_failure_returns_503(self):
        payload = DiscussionEventRequest(
            repo="g/p", number=1, html_url="u", body="ABC-1", platform="gitlab"
        )

        with patch(
            "ticketlink.api.links.get_discussion_client",
            side_effect=RuntimeError("connection refused"),
        ), patch("ticketlink.api.links.get_jira_client") as get_jira:
            with self.assertRaises(HTTPException) as ctx:
                process_event(payload, db=Mock())

        self.assertEqual(ctx.exception.status_code, 503)
        get_jira.assert_not_called()

    def test_event_is_handled_with_configured_clients(self):
        payload = DiscussionEventRequest(
            repo="org/repo", number=2, html_url="https://github.com/org/repo/issues/2", body="no keys"
        )

        with patch("ticketlink.api.links.get_discussion_client", return_value=Mock()), patch(
            "ticketlink.api.links.get_jira_client", return_value=Mock()
        ):
            result = process_event(payload, db=Mock())

        self.assertEqual(result["status"], "skipped")
        self.assertEqual(result["reason"], "no_candidates")


if __name__ == "__main__":
    unittest.main()
