from typing import List

from fastapi import APIRouter
from sqlmodel import col, select

from db import SessionDep
from errors import NotFound
from models import Contact
from schemas import ContactCreate
from services import store
from .auth import CoordinatorDep

router = APIRouter(tags=["contacts"])


@router.get("", response_model=List[Contact])
def list_contacts(session: SessionDep, caller: CoordinatorDep):
    return session.exec(select(Contact).order_by(col(Contact.id))).all()


@router.post("", response_model=Contact, status_code=201)
def create_contact(contact_in: ContactCreate, session: SessionDep):
    """
    Store a message from the public contact form.
    """
    contact = Contact(**contact_in.model_dump())
    session.add(contact)
    session.commit()
    session.refresh(contact)
    return contact


@router.delete("/{contact_id}")
def delete_contact(contact_id: int, session: SessionDep, caller: CoordinatorDep):
    if not store.delete_row(session, Contact, contact_id):
        raise NotFound("Contact not found")
    return {"success": True}
