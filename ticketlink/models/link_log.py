"""Link log model"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Enum
from datetime import datetime
import enum
from ticketlink.models.base import Base


class LinkStatus(str, enum.Enum):
    """Link run status enumeration"""
    SUCCESS = "success"
    PARTIAL = "partial"
    SKIPPED = "skipped"


class LinkLog(Base):
    """Audit log of processed discussion events"""

    __tablename__ = "link_logs"

    id = Column(Integer, primary_key=True, index=True)

    # Discussion thread
    platform = Column(String(20), nullable=False)
    repo = Column(String(500), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    comment_id = Column(Integer, nullable=True)
    event_url = Column(String(1000), nullable=True)

    # Outcome
    status = Column(Enum(LinkStatus), nullable=False)
    issue_keys = Column(Text, nullable=True)  # comma-separated validated Jira keys
    message = Column(Text, nullable=True)

    # Timestamp
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<LinkLog(repo={self.repo}, number={self.number}, status={self.status})>"
