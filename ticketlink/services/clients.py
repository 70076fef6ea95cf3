"""Construction of the remote API clients from settings"""

from functools import lru_cache

from ticketlink.config import settings
from ticketlink.services.events import PLATFORM_GITHUB, PLATFORM_GITLAB
from ticketlink.services.github_client import GitHubClient
from ticketlink.services.gitlab_client import GitLabClient
from ticketlink.services.jira_client import JiraClient


class ClientNotConfiguredError(RuntimeError):
    """Credentials/endpoint for a remote service are missing."""


@lru_cache(maxsize=1)
def get_jira_client() -> JiraClient:
    if not settings.jira_url or not settings.jira_token:
        raise ClientNotConfiguredError("Jira is not configured (JIRA_URL, JIRA_TOKEN)")
    return JiraClient(settings.jira_url, settings.jira_token, username=settings.jira_username)


@lru_cache(maxsize=1)
def get_github_client() -> GitHubClient:
    if not settings.github_token:
        raise ClientNotConfiguredError("GitHub is not configured (GITHUB_TOKEN)")
    return GitHubClient(settings.github_token, base_url=settings.github_base_url)


@lru_cache(maxsize=1)
def get_gitlab_client() -> GitLabClient:
    if not settings.gitlab_url or not settings.gitlab_token:
        raise ClientNotConfiguredError("GitLab is not configured (GITLAB_URL, GITLAB_TOKEN)")
    return GitLabClient(settings.gitlab_url, settings.gitlab_token)


def get_discussion_client(platform: str):
    if platform == PLATFORM_GITHUB:
        return get_github_client()
    if platform == PLATFORM_GITLAB:
        return get_gitlab_client()
    raise ValueError(f"Unknown platform '{platform}'")
