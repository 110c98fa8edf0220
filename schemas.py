from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from models import HelpKind, Role


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginData(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserRead(BaseModel):
    id: int
    email: EmailStr
    role: Role
    accepted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AcceptVolunteer(BaseModel):
    user_id: int = Field(alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class AddCoordinator(BaseModel):
    email: EmailStr


class CallerEmail(BaseModel):
    email: EmailStr


class PushTokenUpdate(BaseModel):
    expo_push_token: str = Field(alias="expoPushToken", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class HelpRequestCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    requester_name: str = Field(min_length=1)
    kind: HelpKind
    message: str = Field(min_length=1)
    date: Optional[str] = None
    time_slot: Optional[str] = None
    region: Optional[str] = None
    street: Optional[str] = None
    house_number: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    phone: str = Field(min_length=1)
    email: Optional[EmailStr] = None


class VolunteerProfileCreate(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    address: str
    phone: str
    email: EmailStr
    motivation: str = ""


class ContactCreate(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    subject: str
    message: str = Field(min_length=1)


class HelpRequestRead(BaseModel):
    """Wire format of a help request: camelCase keys (requesterName, acceptedBy, ...)."""

    id: int
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
    accepted: bool
    accepted_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)
