# outcomes.py
"""
Results returned by the data access layer.

Every operation answers with exactly one of these values; rejections are
never raised. The transport maps each class to a status code.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from rules import (
    Rejected,
    RejectedConflict,
    RejectedDuplicate,
    RejectedInvalid,
    RejectedNotFound,
    Reason,
)


@dataclass(frozen=True)
class Ok:
    payload: Any = None


@dataclass(frozen=True)
class Created(Ok):
    @property
    def id(self) -> int:
        return self.payload["id"]


@dataclass(frozen=True)
class Updated(Ok):
    pass


@dataclass(frozen=True)
class Deleted(Ok):
    pass


@dataclass(frozen=True)
class Failure:
    message: str
    details: Tuple[Dict[str, str], ...] = ()
    code = "ERROR"


@dataclass(frozen=True)
class NotFound(Failure):
    code = "NOT_FOUND"


@dataclass(frozen=True)
class Invalid(Failure):
    code = "INVALID"

    @property
    def field_errors(self) -> Dict[str, str]:
        return {d["field"]: d["message"] for d in self.details}


@dataclass(frozen=True)
class Duplicate(Failure):
    code = "DUPLICATE"


@dataclass(frozen=True)
class Conflict(Failure):
    code = "CONFLICT"


@dataclass(frozen=True)
class StorageFailure(Failure):
    code = "STORAGE_FAILURE"


Outcome = Union[Ok, Failure]


def describe(reason: Reason) -> Dict[str, str]:
    """One `{field, message}` detail for a rejection reason."""
    if isinstance(reason, RejectedInvalid):
        return {"field": reason.field, "message": f"{reason.field} {reason.reason}"}
    if isinstance(reason, RejectedNotFound):
        return {"field": reason.entity, "message": f"{reason.entity} {reason.id} does not exist"}
    if isinstance(reason, RejectedDuplicate):
        key = " ".join(reason.key)
        return {"field": reason.entity, "message": f"{reason.entity} '{key}' already exists"}
    return {"field": reason.entity, "message": reason.reason}


_FAILURE_FOR = {
    RejectedInvalid: (Invalid, "Invalid input"),
    RejectedNotFound: (NotFound, "Referenced entity not found"),
    RejectedDuplicate: (Duplicate, "Duplicate entity"),
    RejectedConflict: (Conflict, "Entity is still referenced"),
}


def from_rejection(rejected: Rejected) -> Failure:
    """
    Collapse a Rejected verdict into one outcome. The first reason picks the
    outcome class; all reasons are kept as details.
    """
    cls, fallback = _FAILURE_FOR[type(rejected.primary)]
    details = tuple(describe(r) for r in rejected.reasons)
    message = details[0]["message"] if len(details) == 1 else fallback
    return cls(message=message, details=details)
