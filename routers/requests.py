from fastapi import APIRouter

from db import SessionDep
from errors import Forbidden
from schemas import CallerEmail, HelpRequestCreate
from services import lifecycle, store
from services.visibility import HelpRequestView, filter_help_requests, redact_help_request
from .auth import CallerDep, CoordinatorDep, OptionalCallerDep, VolunteerDep

router = APIRouter(tags=["help-requests"])


@router.get("")
def list_help_requests(
    session: SessionDep,
    caller: OptionalCallerDep,
    view: HelpRequestView = HelpRequestView.all,
):
    """
    List help requests as the caller is allowed to see them.

    Phone numbers are only included for coordinators and for the volunteer
    who accepted the request.
    """
    records = store.list_help_requests(session, view=view, caller=caller)
    return filter_help_requests(records, caller)


@router.post("", status_code=201)
def create_help_request(request_data: HelpRequestCreate, session: SessionDep, caller: OptionalCallerDep):
    """
    Submit a new help request (public form). It starts open and unaccepted.
    """
    help_request = store.create_help_request(session, request_data)
    return redact_help_request(help_request, caller)


@router.get("/{request_id}")
def get_help_request(request_id: int, session: SessionDep, caller: OptionalCallerDep):
    help_request = store.get_help_request(session, request_id)
    return redact_help_request(help_request, caller)


@router.post("/{request_id}/accept")
def accept_help_request(
    request_id: int,
    body: CallerEmail,
    session: SessionDep,
    caller: VolunteerDep,
):
    if body.email != caller.email:
        raise Forbidden("You can only accept help requests for yourself.")
    lifecycle.accept_help_request(session, request_id, caller.email)
    return {"success": True}


@router.post("/{request_id}/cancel")
def cancel_help_request(
    request_id: int,
    body: CallerEmail,
    session: SessionDep,
    caller: CallerDep,
):
    """
    Coordinators can cancel any accepted request, volunteers only their own.
    """
    if caller.is_volunteer and body.email != caller.email:
        raise Forbidden("You can only cancel your own help requests.")
    lifecycle.cancel_help_request(session, request_id, caller)
    return {"success": True}


@router.delete("/{request_id}")
def delete_help_request(request_id: int, session: SessionDep, caller: CoordinatorDep):
    lifecycle.delete_help_request(session, request_id, caller)
    return {"success": True}
