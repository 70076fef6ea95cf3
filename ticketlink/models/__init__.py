"""Database models"""

from ticketlink.models.base import Base
from ticketlink.models.link_log import LinkLog

__all__ = [
    "Base",
    "LinkLog",
]
