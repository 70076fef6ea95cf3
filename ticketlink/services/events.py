"""Discussion events and Jira remote links"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

ACTION_CREATED = "created"
ACTION_EDITED = "edited"
ACTION_DELETED = "deleted"

PLATFORM_GITHUB = "github"
PLATFORM_GITLAB = "gitlab"


@dataclass(frozen=True)
class DiscussionEvent:
    """A unit of discussion content (comment or thread body) to process."""

    repo: str
    number: int
    html_url: str
    body: str = ""
    title: Optional[str] = None
    action: str = ACTION_CREATED
    comment_id: Optional[int] = None
    is_pull_request: bool = False
    # GitHub inline review comment (pulls/comments API, not issues/comments).
    review_comment: bool = False
    platform: str = PLATFORM_GITHUB

    @property
    def is_deleted(self) -> bool:
        return self.action == ACTION_DELETED

    @property
    def canonical_url(self) -> str:
        """Thread URL without its fragment (e.g. '#issuecomment-1')."""
        return canonical_url(self.html_url)


def canonical_url(url: str) -> str:
    idx = (url or "").find("#")
    if idx == -1:
        return url or ""
    return url[:idx]


@dataclass(frozen=True)
class RemoteLinkIcon:
    url16x16: str
    title: str


GITHUB_ICON = RemoteLinkIcon(url16x16="https://github.com/favicon.ico", title="GitHub")


@dataclass(frozen=True)
class RemoteLink:
    """Jira remote link pointing at an external URL."""

    url: str
    title: str = ""
    icon: Optional[RemoteLinkIcon] = None

    def to_payload(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {"url": self.url, "title": self.title}
        if self.icon is not None:
            obj["icon"] = {"url16x16": self.icon.url16x16, "title": self.icon.title}
        return {"object": obj}

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "RemoteLink":
        obj = data.get("object") or {}
        icon_data = obj.get("icon") or None
        icon = None
        if icon_data:
            icon = RemoteLinkIcon(
                url16x16=str(icon_data.get("url16x16") or ""),
                title=str(icon_data.get("title") or ""),
            )
        return cls(url=str(obj.get("url") or ""), title=str(obj.get("title") or ""), icon=icon)
