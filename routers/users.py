# routers/users.py
from typing import List

from fastapi import APIRouter

from db import SessionDep
from schemas import AcceptVolunteer, AddCoordinator, UserRead
from services import identity
from .auth import CoordinatorDep

router = APIRouter(tags=["users"])


@router.get("/pending-volunteers", response_model=List[UserRead])
def list_pending_volunteers(session: SessionDep, caller: CoordinatorDep):
    """
    Volunteers who registered but are not approved yet.
    """
    return identity.list_pending_volunteers(session)


@router.post("/accept-volunteer")
def accept_volunteer(body: AcceptVolunteer, session: SessionDep, caller: CoordinatorDep):
    identity.approve_volunteer(session, body.user_id)
    return {"success": True}


@router.post("/add-coordinator")
def add_coordinator(body: AddCoordinator, session: SessionDep, caller: CoordinatorDep):
    """
    Promote a user to coordinator by email (approves the account as well).
    """
    identity.promote_to_coordinator(session, body.email)
    return {"success": True}


@router.delete("/pending-volunteers/{user_id}")
def delete_pending_volunteer(user_id: int, session: SessionDep, caller: CoordinatorDep):
    identity.delete_pending_volunteer(session, user_id)
    return {"success": True}


@router.get("/users", response_model=List[UserRead])
def list_users(session: SessionDep, caller: CoordinatorDep):
    """
    List all accounts, approved or not.
    """
    return identity.list_users(session)


@router.delete("/users/{user_id}")
def delete_user(user_id: int, session: SessionDep, caller: CoordinatorDep):
    identity.delete_user(session, user_id, caller)
    return {"success": True}
