"""Jira reference linking service"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy.orm import Session

from ticketlink.models import LinkLog
from ticketlink.models.link_log import LinkStatus
from ticketlink.services.events import GITHUB_ICON, DiscussionEvent, RemoteLink, RemoteLinkIcon
from ticketlink.services.jira_client import JiraNotFoundError
from ticketlink.services.references import extract_candidates, insert_links

logger = logging.getLogger(__name__)


class TrackerClient(Protocol):
    base_url: str

    def get_issue(self, issue_id: str) -> Any: ...

    def get_remote_links(self, issue_id: str) -> List[RemoteLink]: ...

    def add_remote_link(self, issue_id: str, link: RemoteLink) -> Any: ...


class DiscussionClient(Protocol):
    link_icon: RemoteLinkIcon

    def edit_comment(
        self,
        repo: str,
        number: int,
        comment_id: int,
        body: str,
        is_pull_request: bool = False,
        review_comment: bool = False,
    ) -> None: ...

    def get_thread_body(self, repo: str, number: int, is_pull_request: bool = False) -> str: ...

    def edit_thread_body(
        self, repo: str, number: int, body: str, is_pull_request: bool = False
    ) -> None: ...


class LinkService:
    """Links Jira issues mentioned in a discussion event, in both directions.

    Jira side: one remote link per (issue, thread), pointing at the thread URL.
    Discussion side: mentioned keys are rewritten into markdown browse links.
    Every remote failure is logged and counted; none aborts the run.
    """

    def __init__(
        self,
        tracker: TrackerClient,
        discussion: DiscussionClient,
        db: Optional[Session] = None,
        max_workers: int = 8,
    ):
        self.tracker = tracker
        self.discussion = discussion
        self.db = db
        self.max_workers = max(1, int(max_workers))

    @staticmethod
    def _new_stats() -> Dict[str, Any]:
        return {
            "candidates": 0,
            "validated": 0,
            "not_found": 0,
            "links_created": 0,
            "links_existing": 0,
            "annotated": False,
            "errors": 0,
        }

    def handle_event(self, event: DiscussionEvent) -> Dict[str, Any]:
        """Process one discussion event and return the aggregated outcome"""
        stats = self._new_stats()

        # Nothing to do on deletion
        if event.is_deleted:
            return {"status": "skipped", "reason": "deleted", "stats": stats}

        candidates = extract_candidates(event.body, event.title)
        stats["candidates"] = len(candidates)
        if not candidates:
            return {"status": "skipped", "reason": "no_candidates", "stats": stats}

        validated = self._validate_references(candidates, stats)
        stats["validated"] = len(validated)

        workers = min(self.max_workers, max(1, len(validated)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="remote-link") as executor:
            futures = {
                executor.submit(self._upsert_remote_link, issue_id, event): issue_id
                for issue_id in validated
            }

            try:
                stats["annotated"] = self._update_discussion(event, validated)
            except Exception as e:
                logger.error(f"Failed to insert links into {event.repo}#{event.number}: {e}")
                stats["errors"] += 1

            done, _ = wait(futures)
            for future in done:
                issue_id = futures[future]
                try:
                    created = future.result()
                except Exception as e:
                    logger.error(f"Failed to ensure remote link on {issue_id}: {e}")
                    stats["errors"] += 1
                    continue
                stats["links_created" if created else "links_existing"] += 1

        if stats["errors"]:
            outcome = {"status": "partial", "stats": stats}
            status = LinkStatus.PARTIAL
        elif not validated:
            outcome = {"status": "skipped", "reason": "no_valid_references", "stats": stats}
            status = LinkStatus.SKIPPED
        else:
            outcome = {"status": "success", "stats": stats}
            status = LinkStatus.SUCCESS

        logger.info(f"Processed {event.repo}#{event.number} ({', '.join(validated) or '-'}): {stats}")
        self._log_link(event, status, validated, message=str(stats))
        return outcome

    def _validate_references(self, candidates: Sequence[str], stats: Dict[str, Any]) -> Tuple[str, ...]:
        """Keep unique candidates that exist in Jira, in first-seen order."""
        seen = set()
        validated: List[str] = []
        for candidate in candidates:
            if candidate in seen:
                continue
            seen.add(candidate)
            try:
                self.tracker.get_issue(candidate)
            except JiraNotFoundError:
                logger.debug(f"Ignoring {candidate}: no such Jira issue")
                stats["not_found"] += 1
                continue
            except Exception as e:
                logger.error(f"Failed to get Jira issue {candidate}: {e}")
                stats["errors"] += 1
                continue
            validated.append(candidate)
        return tuple(validated)

    def _upsert_remote_link(self, issue_id: str, event: DiscussionEvent) -> bool:
        """Ensure `issue_id` has a remote link to the event's thread; True if created."""
        links = self.tracker.get_remote_links(issue_id)

        url = event.canonical_url
        if any(link.url == url for link in links):
            return False

        icon = getattr(self.discussion, "link_icon", None) or GITHUB_ICON
        link = RemoteLink(
            url=url,
            title=f"{event.repo}#{event.number}: {event.title or ''}",
            icon=icon,
        )
        self.tracker.add_remote_link(issue_id, link)
        logger.info(f"Created Jira link {issue_id} -> {url}")
        return True

    def _update_discussion(self, event: DiscussionEvent, validated: Sequence[str]) -> bool:
        """Write the annotated text back; True if something was edited."""
        base_url = self.tracker.base_url
        with_links = insert_links(event.body, validated, base_url)
        if with_links == event.body:
            return False

        if event.comment_id is not None:
            self.discussion.edit_comment(
                event.repo,
                event.number,
                event.comment_id,
                with_links,
                is_pull_request=event.is_pull_request,
                review_comment=event.review_comment,
            )
            return True

        # No comment id but not necessarily the thread body either (e.g. a
        # review event): annotate whatever the thread body currently is.
        body = self.discussion.get_thread_body(
            event.repo, event.number, is_pull_request=event.is_pull_request
        )
        with_links = insert_links(body, validated, base_url)
        if with_links == body:
            return False
        self.discussion.edit_thread_body(
            event.repo, event.number, with_links, is_pull_request=event.is_pull_request
        )
        return True

    def _log_link(
        self,
        event: DiscussionEvent,
        status: LinkStatus,
        issue_keys: Sequence[str],
        message: str = "",
    ):
        """Persist a LinkLog row (best effort)"""
        if self.db is None:
            return
        try:
            self.db.add(
                LinkLog(
                    platform=event.platform,
                    repo=event.repo,
                    number=event.number,
                    comment_id=event.comment_id,
                    event_url=event.html_url,
                    status=status,
                    issue_keys=",".join(issue_keys),
                    message=message,
                )
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to persist link log for {event.repo}#{event.number}: {e}")
