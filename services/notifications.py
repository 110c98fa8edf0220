"""
Push alerts for new help requests.

The poller compares the newest help-request id against the last id it saw.
That cursor is plain state owned by the polling loop: it goes into each
poll and the updated value comes back out.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

import requests
from sqlmodel import Session, col, select

from models import Role, User
from services.store import newest_help_request_id

logger = logging.getLogger(__name__)

NEW_REQUEST_TITLE = "New help request!"
NEW_REQUEST_BODY = "A new help request has just come in."


class PushSender(Protocol):
    def send(self, push_token: str, title: str, body: str) -> None: ...


class ExpoPushSender:
    """Sends notifications through the Expo push service."""

    def __init__(self, url: str, timeout: float = 5.0, http: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.http = http or requests.Session()

    def send(self, push_token: str, title: str, body: str) -> None:
        response = self.http.post(
            self.url,
            json={
                "to": push_token,
                "sound": "default",
                "title": title,
                "body": body,
                "data": {"type": "new_help_request"},
            },
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()

    def close(self) -> None:
        self.http.close()


def volunteer_push_tokens(session: Session) -> List[str]:
    """Push tokens of approved volunteers."""
    query = select(User.push_token).where(
        User.role == Role.volunteer,
        col(User.accepted).is_(True),
        col(User.push_token).is_not(None),
    )
    return [token for token in session.exec(query).all() if token]


def notify_volunteers(session: Session, sender: PushSender) -> int:
    """Alert every approved volunteer. Failed sends are logged and skipped."""
    delivered = 0
    for token in volunteer_push_tokens(session):
        try:
            sender.send(token, NEW_REQUEST_TITLE, NEW_REQUEST_BODY)
            delivered += 1
        except requests.RequestException as exc:
            logger.warning("Push notification to %s... failed: %s", token[:12], exc)
    return delivered


def poll_new_help_requests(
    session: Session,
    last_seen_id: Optional[int],
    sender: PushSender,
) -> Optional[int]:
    """
    Run one poll cycle and return the new cursor.

    The first cycle (last_seen_id None) only records the newest id, so a
    restart does not re-announce requests that already existed.
    """
    newest_id = newest_help_request_id(session)
    if newest_id is None:
        return last_seen_id

    if last_seen_id is not None and newest_id != last_seen_id:
        delivered = notify_volunteers(session, sender)
        logger.info("New help request %s announced to %d volunteers", newest_id, delivered)

    return newest_id


async def run_poller(
    session_factory: Callable[[], Session],
    sender: PushSender,
    interval_seconds: float,
) -> None:
    """Poll forever until cancelled."""
    last_seen_id: Optional[int] = None

    def poll_once(cursor: Optional[int]) -> Optional[int]:
        with session_factory() as session:
            return poll_new_help_requests(session, cursor, sender)

    logger.info("Notification poller started (every %ss)", interval_seconds)
    while True:
        try:
            last_seen_id = await asyncio.to_thread(poll_once, last_seen_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            # notifications never affect the request lifecycle; keep polling
            logger.exception("Polling for new help requests failed")
        await asyncio.sleep(interval_seconds)
