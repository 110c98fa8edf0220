"""Registration, login, approval and promotion of user accounts."""

import logging
from typing import List

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from errors import Conflict, NotFound, Unauthorized, ValidationError
from models import Role, User
from security import hash_password, verify_password
from services.store import apply_conditional
from services.visibility import CallerContext

logger = logging.getLogger(__name__)


def register_volunteer(session: Session, email: str, password: str) -> User:
    """
    Create a volunteer account awaiting coordinator approval.
    An existing account with the same email is left untouched.
    """
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        raise Conflict("User already exists.")

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=Role.volunteer,
        accepted=False,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        # lost a race against a concurrent registration of the same email
        session.rollback()
        raise Conflict("User already exists.")
    session.refresh(user)
    logger.info("Registered volunteer %s (awaiting approval)", email)
    return user


def authenticate(session: Session, email: str, password: str, expected_role: Role) -> User:
    """Return the approved user with this email and role, or raise Unauthorized."""
    user = session.exec(
        select(User).where(
            User.email == email,
            User.role == expected_role,
            col(User.accepted).is_(True),
        )
    ).first()

    if user is None:
        logger.info("Login as %s refused for %s", expected_role.value, email)
        raise Unauthorized(f"Invalid credentials or not an approved {expected_role.value}.")

    if not verify_password(password, user.password_hash):
        logger.info("Login as %s refused for %s (bad password)", expected_role.value, email)
        raise Unauthorized("Invalid credentials.")

    return user


def list_pending_volunteers(session: Session) -> List[User]:
    query = select(User).where(User.role == Role.volunteer, col(User.accepted).is_(False))
    return list(session.exec(query.order_by(col(User.id))).all())


def list_users(session: Session) -> List[User]:
    return list(session.exec(select(User).order_by(col(User.id))).all())


def approve_volunteer(session: Session, user_id: int) -> None:
    statement = (
        update(User)
        .where(col(User.id) == user_id, col(User.role) == Role.volunteer)
        .values(accepted=True)
    )
    if apply_conditional(session, statement) != 1:
        raise NotFound("Volunteer not found")
    logger.info("Volunteer %s approved", user_id)


def promote_to_coordinator(session: Session, email: str) -> None:
    """
    Make a user coordinator. Promotion also approves the account: every
    coordinator is accepted.
    """
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing is None:
        raise NotFound("User does not exist")
    if existing.role == Role.coordinator:
        raise Conflict("User is already a coordinator")

    statement = (
        update(User)
        .where(col(User.email) == email, col(User.role) == Role.volunteer)
        .values(role=Role.coordinator, accepted=True)
    )
    if apply_conditional(session, statement) != 1:
        # promoted (or removed) between the read and the update
        raise Conflict("User is already a coordinator")
    logger.info("User %s promoted to coordinator", email)


def delete_pending_volunteer(session: Session, user_id: int) -> None:
    statement = delete(User).where(
        col(User.id) == user_id,
        col(User.role) == Role.volunteer,
        col(User.accepted).is_(False),
    )
    if apply_conditional(session, statement) != 1:
        raise NotFound("Pending volunteer not found")
    logger.info("Pending volunteer %s removed", user_id)


def delete_user(session: Session, user_id: int, caller: CallerContext) -> None:
    if user_id == caller.user_id:
        raise ValidationError("You cannot delete your own account here")

    if apply_conditional(session, delete(User).where(col(User.id) == user_id)) != 1:
        raise NotFound("User not found")
    logger.info("User %s deleted by %s", user_id, caller.email)


def set_push_token(session: Session, caller: CallerContext, token: str) -> None:
    user = session.get(User, caller.user_id)
    if user is None:
        raise NotFound("User not found")
    user.push_token = token
    session.add(user)
    session.commit()
    logger.info("Push token registered for %s", caller.email)
