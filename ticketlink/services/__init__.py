"""Services"""

from ticketlink.services.github_client import GitHubClient
from ticketlink.services.gitlab_client import GitLabClient
from ticketlink.services.jira_client import JiraClient
from ticketlink.services.link_service import LinkService

__all__ = ["GitHubClient", "GitLabClient", "JiraClient", "LinkService"]
