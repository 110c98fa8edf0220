"""Storage access for help requests and the other coordinator-managed records."""

import logging
from typing import List, Optional, Type, Union

from sqlalchemy import Delete, Update, delete, func
from sqlmodel import Session, SQLModel, col, select

from errors import NotFound, Unauthorized
from models import HelpRequest
from schemas import HelpRequestCreate
from services.visibility import CallerContext, HelpRequestView

logger = logging.getLogger(__name__)


def create_help_request(session: Session, data: HelpRequestCreate) -> HelpRequest:
    """Insert a new open request. accepted/accepted_by are never taken from input."""
    help_request = HelpRequest(
        **data.model_dump(),
        accepted=False,
        accepted_by=None,
    )
    session.add(help_request)
    session.commit()
    session.refresh(help_request)
    logger.info("Help request %s created (%s)", help_request.id, help_request.kind.value)
    return help_request


def get_help_request(session: Session, request_id: int) -> HelpRequest:
    help_request = session.get(HelpRequest, request_id)
    if help_request is None:
        raise NotFound("Help request not found")
    return help_request


def list_help_requests(
    session: Session,
    view: HelpRequestView = HelpRequestView.all,
    caller: Optional[CallerContext] = None,
) -> List[HelpRequest]:
    """
    List raw help requests for one of the list views.

    - all: every request
    - available: requests nobody has accepted
    - mine: requests accepted by the caller (needs a caller)
    """
    query = select(HelpRequest)

    if view == HelpRequestView.available:
        query = query.where(col(HelpRequest.accepted_by).is_(None))
    elif view == HelpRequestView.mine:
        if caller is None:
            raise Unauthorized("Not logged in")
        query = query.where(HelpRequest.accepted_by == caller.email)

    query = query.order_by(col(HelpRequest.id))
    return list(session.exec(query).all())


def newest_help_request_id(session: Session) -> Optional[int]:
    return session.exec(select(func.max(HelpRequest.id))).one()


def apply_conditional(session: Session, statement: Union[Update, Delete]) -> int:
    """
    Run one UPDATE/DELETE ... WHERE statement, commit, and return the number
    of rows it matched. Callers decide success from that count.
    """
    # plain statement: no RETURNING/refetch, so rowcount is the driver's count
    statement = statement.execution_options(synchronize_session=False)
    result = session.exec(statement)  # type: ignore[call-overload]
    session.commit()
    return result.rowcount


def delete_row(session: Session, model: Type[SQLModel], row_id: int) -> bool:
    """Delete one row by primary key. False if nothing matched."""
    return apply_conditional(session, delete(model).where(model.id == row_id)) == 1  # type: ignore[attr-defined]
