"""
Caller-scoped views of help requests.

Every read of a help request passes through here before it leaves the API:
coordinators see everything, the volunteer who accepted a request sees it
in full, everyone else gets it without the requester's phone number.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, List, Optional

from models import HelpRequest, Role
from schemas import HelpRequestRead

SENSITIVE_FIELDS = ("phone",)


@dataclass(frozen=True)
class CallerContext:
    """Identity of the caller, built from a verified session token."""

    user_id: int
    email: str
    role: Role

    @property
    def is_coordinator(self) -> bool:
        return self.role == Role.coordinator

    @property
    def is_volunteer(self) -> bool:
        return self.role == Role.volunteer


class HelpRequestView(str, Enum):
    all = "all"
    available = "available"
    mine = "mine"


def can_see_sensitive(record: HelpRequest, caller: Optional[CallerContext]) -> bool:
    if caller is None:
        return False
    if caller.is_coordinator:
        return True
    return caller.is_volunteer and record.accepted_by is not None and record.accepted_by == caller.email


def redact_help_request(record: HelpRequest, caller: Optional[CallerContext]) -> dict[str, Any]:
    """Return the record as camelCase JSON, without sensitive keys unless the caller may see them."""
    data = HelpRequestRead.model_validate(record).model_dump(mode="json", by_alias=True)
    if not can_see_sensitive(record, caller):
        for field in SENSITIVE_FIELDS:
            data.pop(field, None)
    return data


def filter_help_requests(
    records: Iterable[HelpRequest],
    caller: Optional[CallerContext],
) -> List[dict[str, Any]]:
    return [redact_help_request(record, caller) for record in records]
