import logging
from typing import Annotated, Optional, Tuple

from fastapi import APIRouter, Cookie, Depends, Header, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from db import SessionDep
from errors import Forbidden, Unauthorized, ValidationError
from models import Role, User
from schemas import LoginData, UserCreate
from security import create_session_token, verify_session_token
from services import identity
from services.visibility import CallerContext
from settings import get_settings

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def _caller_from_token(session: SessionDep, token: str) -> CallerContext:
    data = verify_session_token(token)
    if not data:
        raise Unauthorized("Invalid or expired session")

    user = session.get(User, data["user_id"])
    if user is None or user.id is None:
        raise Unauthorized("User not found for this session")

    # role changes and revoked approval invalidate older tokens
    if user.role.value != data["role"] or not user.accepted:
        raise Unauthorized("Session no longer valid")

    return CallerContext(user_id=user.id, email=user.email, role=user.role)


def get_optional_caller(
    session: SessionDep,
    authorization: Optional[str] = Header(default=None),
    session_token: Optional[str] = Cookie(default=None, alias="session"),
) -> Optional[CallerContext]:
    """
    Resolve the caller from the bearer token, or else the 'session' cookie.

    A bearer token that does not verify is an error. A stale cookie is
    treated as no session at all, so public endpoints keep working for a
    browser that still carries one.
    """
    bearer = _bearer_token(authorization)
    if bearer is not None:
        return _caller_from_token(session, bearer)
    if session_token is None:
        return None

    try:
        return _caller_from_token(session, session_token)
    except Unauthorized:
        logger.info("Ignoring stale session cookie")
        return None


OptionalCallerDep = Annotated[Optional[CallerContext], Depends(get_optional_caller)]


def get_caller(caller: OptionalCallerDep) -> CallerContext:
    if caller is None:
        raise Unauthorized("Not logged in")
    return caller


CallerDep = Annotated[CallerContext, Depends(get_caller)]


def require_coordinator(caller: CallerDep) -> CallerContext:
    if not caller.is_coordinator:
        raise Forbidden("Only coordinators can do this.")
    return caller


CoordinatorDep = Annotated[CallerContext, Depends(require_coordinator)]


def require_volunteer(caller: CallerDep) -> CallerContext:
    if not caller.is_volunteer:
        raise Forbidden("Only volunteers can do this.")
    return caller


VolunteerDep = Annotated[CallerContext, Depends(require_volunteer)]


async def _read_credentials(request: Request) -> Tuple[str, str]:
    """
    Accepts either JSON (mobile app / API) or form-data (web form).
    Returns (email, password) or raises ValidationError when either is missing.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON.")
        if not isinstance(data, dict):
            raise ValidationError("Email and password are required.")
        raw_email = data.get("email")
        raw_password = data.get("password")
    else:
        form = await request.form()
        raw_email = form.get("email")
        raw_password = form.get("password")

    email = raw_email if isinstance(raw_email, str) else None
    password = raw_password if isinstance(raw_password, str) else None

    if not email or not password:
        raise ValidationError("Email and password are required.")
    return email, password


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="session",
        value=token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=get_settings().session_max_age_seconds,
    )


@router.post("/register", status_code=201)
async def register(request: Request, session: SessionDep):
    """
    Register a new volunteer. The account cannot log in until a
    coordinator approves it.
    """
    email, password = await _read_credentials(request)
    try:
        user_in = UserCreate(email=email, password=password)
    except PydanticValidationError:
        raise ValidationError("A valid email address is required.")

    identity.register_volunteer(session, user_in.email, user_in.password)
    return {"message": "Registration successful. Awaiting approval."}


async def _login(request: Request, session: SessionDep, role: Role) -> Tuple[User, str]:
    email, password = await _read_credentials(request)
    try:
        payload = LoginData(email=email, password=password)
    except PydanticValidationError:
        raise Unauthorized("Invalid credentials.")

    user = identity.authenticate(session, payload.email, payload.password, role)
    if user.id is None:
        raise Unauthorized("Invalid credentials.")
    return user, create_session_token(user.id, role.value)


@router.post("/coordinator-login")
async def coordinator_login(request: Request, session: SessionDep):
    user, token = await _login(request, session, Role.coordinator)
    resp = JSONResponse({"token": token, "role": Role.coordinator.value, "email": user.email})
    _set_session_cookie(resp, token)
    return resp


@router.post("/volunteer-login")
async def volunteer_login(request: Request, session: SessionDep):
    user, token = await _login(request, session, Role.volunteer)
    resp = JSONResponse(
        {
            "token": token,
            "role": Role.volunteer.value,
            "email": user.email,
            "userId": user.id,
        }
    )
    _set_session_cookie(resp, token)
    return resp


@router.post("/logout")
def logout():
    """Clear the session cookie. Bearer tokens simply expire."""
    response = JSONResponse({"success": True})
    response.delete_cookie("session")
    return response


@router.get("/me")
def read_me(caller: CallerDep):
    """Who the current token belongs to."""
    return {"id": caller.user_id, "email": caller.email, "role": caller.role.value}
