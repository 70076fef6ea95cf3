"""Link management endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List, Literal, Optional
import logging
from pydantic import BaseModel
from datetime import datetime

from ticketlink.config import settings
from ticketlink.models.base import get_db
from ticketlink.models import LinkLog
from ticketlink.models.link_log import LinkStatus
from ticketlink.services.clients import (
    ClientNotConfiguredError,
    get_discussion_client,
    get_jira_client,
)
from ticketlink.services.events import ACTION_CREATED, PLATFORM_GITHUB, DiscussionEvent
from ticketlink.services.link_service import LinkService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/links", tags=["links"])


class DiscussionEventRequest(BaseModel):
    repo: str
    number: int
    html_url: str
    body: str = ""
    title: Optional[str] = None
    action: str = ACTION_CREATED
    comment_id: Optional[int] = None
    is_pull_request: bool = False
    review_comment: bool = False
    platform: Literal["github", "gitlab"] = PLATFORM_GITHUB


class LinkLogResponse(BaseModel):
    id: int
    platform: str
    repo: str
    number: int
    comment_id: Optional[int] = None
    event_url: Optional[str] = None
    status: str
    issue_keys: Optional[str] = None
    message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


@router.post("/process")
def process_event(payload: DiscussionEventRequest, db: Session = Depends(get_db)):
    """Link one discussion event synchronously (manual replay)"""
    event = DiscussionEvent(**payload.model_dump())
    try:
        discussion = get_discussion_client(event.platform)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ClientNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set up {event.platform} client: {e}")
        raise HTTPException(status_code=503, detail=f"{event.platform} client unavailable: {e}")

    try:
        tracker = get_jira_client()
    except ClientNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))

    service = LinkService(tracker, discussion, db=db, max_workers=settings.link_workers)
    return service.handle_event(event)


@router.get("/logs", response_model=List[LinkLogResponse])
def list_link_logs(
    limit: int = 100,
    repo: Optional[str] = None,
    status: Optional[LinkStatus] = None,
    db: Session = Depends(get_db)
):
    """List link logs"""
    query = db.query(LinkLog).order_by(LinkLog.created_at.desc())
    if repo:
        query = query.filter(LinkLog.repo == repo)
    if status is not None:
        query = query.filter(LinkLog.status == status)
    return query.limit(limit).all()
