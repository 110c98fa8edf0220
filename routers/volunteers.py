from typing import List

from fastapi import APIRouter
from sqlmodel import col, select

from db import SessionDep
from errors import NotFound
from models import VolunteerProfile
from schemas import PushTokenUpdate, VolunteerProfileCreate
from services import identity, store
from .auth import CoordinatorDep, VolunteerDep

router = APIRouter(tags=["volunteers"])


@router.get("", response_model=List[VolunteerProfile])
def list_volunteers(session: SessionDep, caller: CoordinatorDep):
    """
    Volunteer applications sent in through the public site.
    """
    return session.exec(select(VolunteerProfile).order_by(col(VolunteerProfile.id))).all()


@router.post("", response_model=VolunteerProfile, status_code=201)
def create_volunteer(profile_in: VolunteerProfileCreate, session: SessionDep):
    profile = VolunteerProfile(**profile_in.model_dump())
    session.add(profile)
    session.commit()
    session.refresh(profile)
    return profile


@router.post("/push-token")
def update_push_token(body: PushTokenUpdate, session: SessionDep, caller: VolunteerDep):
    """
    Register the Expo push token of the logged-in volunteer's device.
    """
    identity.set_push_token(session, caller, body.expo_push_token)
    return {"success": True}


@router.delete("/{volunteer_id}")
def delete_volunteer(volunteer_id: int, session: SessionDep, caller: CoordinatorDep):
    if not store.delete_row(session, VolunteerProfile, volunteer_id):
        raise NotFound("Volunteer not found")
    return {"success": True}
