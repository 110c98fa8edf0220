from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    volunteer = "volunteer"
    coordinator = "coordinator"


class HelpKind(str, Enum):
    groceries = "groceries"
    transport = "transport"
    company = "company"
    chores = "chores"
    other = "other"


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: Role = Role.volunteer
    accepted: bool = False
    push_token: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class HelpRequest(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    requester_name: str
    kind: HelpKind
    message: str
    date: Optional[str] = None
    time_slot: Optional[str] = None
    region: Optional[str] = None

    street: Optional[str] = None
    house_number: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None

    phone: str
    email: Optional[str] = None

    # accepted is true exactly when accepted_by is set
    accepted: bool = False
    accepted_by: Optional[str] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=_utcnow)


class VolunteerProfile(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    address: str
    phone: str
    email: str
    motivation: str = ""
    created_at: datetime = Field(default_factory=_utcnow)


class Contact(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime = Field(default_factory=_utcnow)
