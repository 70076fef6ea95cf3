"""Webhook endpoints (GitHub, GitLab)"""
import json
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.concurrency import run_in_threadpool

from ticketlink.config import settings
from ticketlink.models.base import SessionLocal
from ticketlink.security import verify_github_signature, verify_gitlab_token
from ticketlink.services.clients import (
    ClientNotConfiguredError,
    get_discussion_client,
    get_jira_client,
)
from ticketlink.services.events import DiscussionEvent
from ticketlink.services.link_service import LinkService
from ticketlink.services.webhook_events import github_event_from_payload, gitlab_event_from_payload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


def process_event_job(event: DiscussionEvent, tracker, discussion):
    """Background job: link one discussion event"""
    db = SessionLocal()
    try:
        service = LinkService(tracker, discussion, db=db, max_workers=settings.link_workers)
        result = service.handle_event(event)
        logger.info(f"Linking finished for {event.repo}#{event.number}: {result['status']}")
    except Exception as e:
        logger.error(f"Linking failed for {event.repo}#{event.number}: {e}")
    finally:
        db.close()


def _decode_json(raw: bytes) -> dict:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    return payload


def _build_clients(platform: str):
    return get_jira_client(), get_discussion_client(platform)


async def _accept(event: DiscussionEvent, background_tasks: BackgroundTasks) -> dict:
    # Client construction may hit the network (GitLab authenticates eagerly).
    try:
        tracker, discussion = await run_in_threadpool(_build_clients, event.platform)
    except ClientNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to set up {event.platform} clients: {e}")
        raise HTTPException(status_code=503, detail=f"{event.platform} client unavailable: {e}")
    background_tasks.add_task(process_event_job, event, tracker, discussion)
    return {"status": "accepted"}


@router.post("/github", status_code=202)
async def github_webhook(request: Request, background_tasks: BackgroundTasks):
    """Receive a GitHub webhook delivery"""
    raw = await request.body()
    if settings.github_webhook_secret and not verify_github_signature(
        settings.github_webhook_secret, raw, request.headers.get("X-Hub-Signature-256")
    ):
        raise HTTPException(status_code=401, detail="Invalid signature")

    event_type = request.headers.get("X-GitHub-Event", "")
    event = github_event_from_payload(event_type, _decode_json(raw))
    if event is None:
        return {"status": "ignored"}
    return await _accept(event, background_tasks)


@router.post("/gitlab", status_code=202)
async def gitlab_webhook(request: Request, background_tasks: BackgroundTasks):
    """Receive a GitLab webhook delivery"""
    if settings.gitlab_webhook_secret and not verify_gitlab_token(
        settings.gitlab_webhook_secret, request.headers.get("X-Gitlab-Token")
    ):
        raise HTTPException(status_code=401, detail="Invalid token")

    event = gitlab_event_from_payload(_decode_json(await request.body()))
    if event is None:
        return {"status": "ignored"}
    return await _accept(event, background_tasks)
