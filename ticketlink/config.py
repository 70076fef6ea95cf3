"""Application configuration"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database (link audit log)
    database_url: str = "sqlite:///./ticketlink.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"

    # Jira
    # With a username the token is sent as basic auth (Jira Cloud API token),
    # otherwise as a bearer personal access token (Jira Server/Data Center).
    jira_url: str | None = None
    jira_username: str | None = None
    jira_token: str | None = None

    # GitHub
    github_token: str | None = None
    github_base_url: str = "https://api.github.com"
    github_webhook_secret: str | None = None

    # GitLab
    gitlab_url: str | None = None
    gitlab_token: str | None = None
    gitlab_webhook_secret: str | None = None

    # Upper bound on concurrent remote-link upserts per event.
    link_workers: int = 8

    # Auth (optional)
    # When enabled, the management API is protected by HTTP Basic auth.
    # /health and the webhook endpoints stay open; webhooks carry their own signature.
    auth_enabled: bool = False
    auth_username: str | None = None
    auth_password: str | None = None

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
