"""API routes"""

from ticketlink.api import links, webhooks

__all__ = ["links", "webhooks"]
