"""Main FastAPI application"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ticketlink.api import links, webhooks
from ticketlink.config import settings
from ticketlink.models.base import init_db
from ticketlink.security import BasicAuthMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting TicketLink service")
    init_db()
    yield
    # Shutdown
    logger.info("Stopping TicketLink service")


app = FastAPI(
    title="TicketLink",
    description="Link Jira issues mentioned in GitHub/GitLab discussions",
    version="1.0.0",
    lifespan=lifespan,
)

# Optional built-in auth for the management API (webhooks verify their own signatures)
if settings.auth_enabled:
    if not settings.auth_username or not settings.auth_password:
        raise RuntimeError("AUTH_ENABLED=true requires AUTH_USERNAME and AUTH_PASSWORD to be set")
    app.add_middleware(
        BasicAuthMiddleware,
        username=settings.auth_username,
        password=settings.auth_password,
        allow_paths={"/health", "/webhooks/github", "/webhooks/gitlab"},
    )

# Include API routers
app.include_router(webhooks.router)
app.include_router(links.router)


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "TicketLink"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ticketlink.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
