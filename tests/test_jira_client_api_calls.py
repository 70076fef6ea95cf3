import unittest
from types import SimpleNamespace
from unittest.mock import Mock, patch
import logging

import requests

logging.disable(logging.CRITICAL)


def _response(status_code=200, payload=None):
    content = b"" if payload is None else b"x"
    return SimpleNamespace(
        status_code=status_code,
        content=content,
        text="" if payload is None else str(payload),
        json=lambda: payload,
    )


class JiraClientApiCallTests(unittest.TestCase):
    def _client(self, *responses, **kwargs):
        from ticketlink.services.jira_client import JiraClient

        client = JiraClient("https://jira.example/", "token", **kwargs)
        client.session = Mock()
        client.session.request = Mock(side_effect=list(responses))
        return client

    def test_init_uses_bearer_token_without_username(self):
        from ticketlink.services.jira_client import JiraClient

        client = JiraClient("https://jira.example/", "pat")

        self.assertEqual(client.base_url, "https://jira.example")
        self.assertEqual(client.session.headers["Authorization"], "Bearer pat")
        self.assertIsNone(client.session.auth)

    def test_init_uses_basic_auth_with_username(self):
        from ticketlink.services.jira_client import JiraClient

        client = JiraClient("https://jira.example", "api-token", username="me@example.com")

        self.assertEqual(client.session.auth, ("me@example.com", "api-token"))
        self.assertNotIn("Authorization", client.session.headers)

    def test_get_issue_calls_issue_endpoint(self):
        client = self._client(_response(200, {"key": "ABC-1"}))

        self.assertEqual(client.get_issue("ABC-1"), {"key": "ABC-1"})
        client.session.request.assert_called_once_with(
            "GET",
            "https://jira.example/rest/api/2/issue/ABC-1",
            timeout=30.0,
            params={"fields": "summary"},
        )

    def test_get_issue_raises_not_found_on_404(self):
        from ticketlink.services.jira_client import JiraNotFoundError

        client = self._client(_response(404))

        with self.assertRaises(JiraNotFoundError):
            client.get_issue("QWE-1")
        self.assertEqual(client.session.request.call_count, 1)

    def test_get_issue_raises_jira_error_on_403_without_retry(self):
        from ticketlink.services.jira_client import JiraError, JiraNotFoundError

        client = self._client(_response(403, {"errorMessages": ["no"]}))

        with self.assertRaises(JiraError) as ctx:
            client.get_issue("ABC-1")
        self.assertNotIsInstance(ctx.exception, JiraNotFoundError)
        self.assertEqual(ctx.exception.response_code, 403)
        self.assertEqual(client.session.request.call_count, 1)

    def test_retries_transient_failures(self):
        client = self._client(
            _response(503, {"e": 1}),
            requests.ConnectionError("reset"),
            _response(200, {"key": "ABC-1"}),
        )

        with patch("ticketlink.services.jira_client.time.sleep") as sleep:
            self.assertEqual(client.get_issue("ABC-1"), {"key": "ABC-1"})

        self.assertEqual(client.session.request.call_count, 3)
        self.assertEqual(sleep.call_count, 2)

    def test_gives_up_after_max_attempts(self):
        from ticketlink.services.jira_client import JiraError

        client = self._client(*[_response(502, {"e": 1})] * 3)

        with patch("ticketlink.services.jira_client.time.sleep"):
            with self.assertRaises(JiraError):
                client.get_issue("ABC-1")
        self.assertEqual(client.session.request.call_count, 3)

    def test_get_remote_links_parses_objects(self):
        payload = [
            {
                "id": 10,
                "object": {
                    "url": "https://github.com/o/r/pull/1",
                    "title": "o/r#1: t",
                    "icon": {"url16x16": "https://github.com/favicon.ico", "title": "GitHub"},
                },
            },
            {"id": 11, "object": {"url": "https://elsewhere"}},
        ]
        client = self._client(_response(200, payload))

        links = client.get_remote_links("ABC-1")

        self.assertEqual([link.url for link in links], ["https://github.com/o/r/pull/1", "https://elsewhere"])
        self.assertEqual(links[0].icon.title, "GitHub")
        self.assertIsNone(links[1].icon)
        self.assertEqual(
            client.session.request.call_args[0],
            ("GET", "https://jira.example/rest/api/2/issue/ABC-1/remotelink"),
        )

    def test_add_remote_link_posts_payload(self):
        from ticketlink.services.events import GITHUB_ICON, RemoteLink

        client = self._client(_response(201, {"id": 12}))
        link = RemoteLink(url="https://github.com/o/r/issues/2", title="o/r#2: x", icon=GITHUB_ICON)

        client.add_remote_link("ABC-1", link)

        client.session.request.assert_called_once_with(
            "POST",
            "https://jira.example/rest/api/2/issue/ABC-1/remotelink",
            timeout=30.0,
            json={
                "object": {
                    "url": "https://github.com/o/r/issues/2",
                    "title": "o/r#2: x",
                    "icon": {"url16x16": "https://github.com/favicon.ico", "title": "GitHub"},
                }
            },
        )


if __name__ == "__main__":
    unittest.main()
