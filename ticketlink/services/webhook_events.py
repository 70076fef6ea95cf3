"""Mapping of GitHub/GitLab webhook payloads to discussion events"""

from typing import Any, Dict, Optional

from ticketlink.services.events import (
    ACTION_CREATED,
    ACTION_DELETED,
    ACTION_EDITED,
    PLATFORM_GITHUB,
    PLATFORM_GITLAB,
    DiscussionEvent,
)

_GITHUB_ISSUE_ACTIONS = {"opened": ACTION_CREATED, "edited": ACTION_EDITED, "deleted": ACTION_DELETED}
_GITHUB_COMMENT_ACTIONS = {"created": ACTION_CREATED, "edited": ACTION_EDITED, "deleted": ACTION_DELETED}
_GITHUB_PR_ACTIONS = {"opened": ACTION_CREATED, "edited": ACTION_EDITED}
_GITHUB_REVIEW_ACTIONS = {"submitted": ACTION_CREATED, "edited": ACTION_EDITED, "dismissed": ACTION_DELETED}

_GITLAB_THREAD_ACTIONS = {"open": ACTION_CREATED, "update": ACTION_EDITED}
_GITLAB_NOTEABLE_TYPES = {"Issue": "issue", "MergeRequest": "merge_request"}


def _as_int(value: Any) -> Optional[int]:
    """Parse a numeric payload field; None when missing or malformed."""
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _section(payload: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def github_event_from_payload(event_type: str, payload: Dict[str, Any]) -> Optional[DiscussionEvent]:
    """Build a DiscussionEvent from a GitHub delivery; None for events we don't handle.

    Truncated or malformed payloads (missing numbers/ids) are treated as unhandled.
    """
    action = payload.get("action")
    repo = _section(payload, "repository").get("full_name")
    if not repo:
        return None

    if event_type == "issue_comment":
        mapped = _GITHUB_COMMENT_ACTIONS.get(action)
        issue = _section(payload, "issue")
        comment = _section(payload, "comment")
        number = _as_int(issue.get("number"))
        comment_id = _as_int(comment.get("id"))
        if mapped is None or number is None or comment_id is None:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=comment.get("html_url") or "",
            body=comment.get("body") or "",
            title=issue.get("title"),
            action=mapped,
            comment_id=comment_id,
            is_pull_request="pull_request" in issue,
            platform=PLATFORM_GITHUB,
        )

    if event_type == "pull_request_review_comment":
        # Inline review comments live on the pulls API, not the issues API.
        mapped = _GITHUB_COMMENT_ACTIONS.get(action)
        pr = _section(payload, "pull_request")
        comment = _section(payload, "comment")
        number = _as_int(pr.get("number"))
        comment_id = _as_int(comment.get("id"))
        if mapped is None or number is None or comment_id is None:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=comment.get("html_url") or "",
            body=comment.get("body") or "",
            title=pr.get("title"),
            action=mapped,
            comment_id=comment_id,
            is_pull_request=True,
            review_comment=True,
            platform=PLATFORM_GITHUB,
        )

    if event_type == "issues":
        mapped = _GITHUB_ISSUE_ACTIONS.get(action)
        issue = _section(payload, "issue")
        number = _as_int(issue.get("number"))
        if mapped is None or number is None:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=issue.get("html_url") or "",
            body=issue.get("body") or "",
            title=issue.get("title"),
            action=mapped,
            platform=PLATFORM_GITHUB,
        )

    if event_type == "pull_request":
        mapped = _GITHUB_PR_ACTIONS.get(action)
        pr = _section(payload, "pull_request")
        number = _as_int(pr.get("number"))
        if mapped is None or number is None:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=pr.get("html_url") or "",
            body=pr.get("body") or "",
            title=pr.get("title"),
            action=mapped,
            is_pull_request=True,
            platform=PLATFORM_GITHUB,
        )

    if event_type == "pull_request_review":
        # Reviews have no editable comment id; the PR body is annotated instead.
        mapped = _GITHUB_REVIEW_ACTIONS.get(action)
        pr = _section(payload, "pull_request")
        review = _section(payload, "review")
        number = _as_int(pr.get("number"))
        if mapped is None or number is None or not review:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=review.get("html_url") or pr.get("html_url") or "",
            body=review.get("body") or "",
            title=pr.get("title"),
            action=mapped,
            is_pull_request=True,
            platform=PLATFORM_GITHUB,
        )

    return None


def gitlab_event_from_payload(payload: Dict[str, Any]) -> Optional[DiscussionEvent]:
    """Build a DiscussionEvent from a GitLab delivery; None for events we don't handle."""
    kind = payload.get("object_kind")
    attrs = _section(payload, "object_attributes")
    repo = _section(payload, "project").get("path_with_namespace")
    if not repo or not attrs:
        return None

    if kind == "note":
        thread_key = _GITLAB_NOTEABLE_TYPES.get(attrs.get("noteable_type"))
        if thread_key is None:
            # Commit and snippet notes have no thread we could annotate.
            return None
        thread = _section(payload, thread_key)
        number = _as_int(thread.get("iid"))
        comment_id = _as_int(attrs.get("id"))
        if number is None or comment_id is None:
            return None
        action = ACTION_EDITED if attrs.get("action") == "update" else ACTION_CREATED
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=attrs.get("url") or "",
            body=attrs.get("note") or "",
            title=thread.get("title"),
            action=action,
            comment_id=comment_id,
            is_pull_request=thread_key == "merge_request",
            platform=PLATFORM_GITLAB,
        )

    if kind in ("issue", "merge_request"):
        mapped = _GITLAB_THREAD_ACTIONS.get(attrs.get("action"))
        number = _as_int(attrs.get("iid"))
        if mapped is None or number is None:
            return None
        return DiscussionEvent(
            repo=repo,
            number=number,
            html_url=attrs.get("url") or "",
            body=attrs.get("description") or "",
            title=attrs.get("title"),
            action=mapped,
            is_pull_request=kind == "merge_request",
            platform=PLATFORM_GITLAB,
        )

    return None
