"""
Help-request state transitions.

Every transition is one conditional UPDATE/DELETE whose row count decides the
outcome. Reading the row first and writing afterwards would let two volunteers
accept the same request; the WHERE clause makes the database serialize them.
"""

import logging

from sqlalchemy import delete, update
from sqlmodel import Session, col

from errors import AlreadyAccepted, Forbidden, NotFound, NotFoundOrNotOwned
from models import HelpRequest
from services.store import apply_conditional
from services.visibility import CallerContext

logger = logging.getLogger(__name__)


def accept_help_request(session: Session, request_id: int, volunteer_email: str) -> None:
    """
    Claim an open request for a volunteer.

    Raises AlreadyAccepted when no open request has this id; an unknown id and
    a request someone else already holds are reported the same way.
    """
    statement = (
        update(HelpRequest)
        .where(
            col(HelpRequest.id) == request_id,
            col(HelpRequest.accepted).is_not(True),
        )
        .values(accepted=True, accepted_by=volunteer_email)
    )
    if apply_conditional(session, statement) != 1:
        logger.info("Accept of help request %s by %s rejected", request_id, volunteer_email)
        raise AlreadyAccepted()
    logger.info("Help request %s accepted by %s", request_id, volunteer_email)


def cancel_help_request(session: Session, request_id: int, caller: CallerContext) -> None:
    """
    Put an accepted request back to open.

    Coordinators may cancel any accepted request; volunteers only the ones
    they accepted themselves.
    """
    if caller.is_coordinator:
        condition = col(HelpRequest.accepted).is_(True)
    else:
        condition = col(HelpRequest.accepted_by) == caller.email

    statement = (
        update(HelpRequest)
        .where(col(HelpRequest.id) == request_id, condition)
        .values(accepted=False, accepted_by=None)
    )
    if apply_conditional(session, statement) != 1:
        logger.info(
            "Cancel of help request %s by %s (%s) rejected",
            request_id,
            caller.email,
            caller.role.value,
        )
        raise NotFoundOrNotOwned()
    logger.info("Help request %s cancelled by %s (%s)", request_id, caller.email, caller.role.value)


def delete_help_request(session: Session, request_id: int, caller: CallerContext) -> None:
    """Permanently remove a request, whatever its state. Coordinators only."""
    if not caller.is_coordinator:
        raise Forbidden("Only coordinators can delete help requests")

    if apply_conditional(session, delete(HelpRequest).where(col(HelpRequest.id) == request_id)) != 1:
        raise NotFound("Help request not found")
    logger.info("Help request %s deleted by %s", request_id, caller.email)
