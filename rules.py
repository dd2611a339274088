# rules.py
"""
Integrity rules for catalog mutations.

Everything here is pure: callers gather facts from the store (which parents
are missing, whether the natural key is taken, which rows depend on the
target) and these functions decide whether the mutation may proceed.

Checks run in a fixed order and every reason found is kept:

    shape -> referenced parents -> duplicates -> dependents

so `Rejected.reasons[0]` is always the most fundamental failure.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from models import constraints_of


class Policy(enum.Enum):
    CASCADE = "cascade"
    PROTECT = "protect"


# (parent kind, child kind) -> what deleting the parent does to the children.
DELETE_POLICIES: Dict[Tuple[str, str], Policy] = {
    ("country", "author"): Policy.PROTECT,
    ("author", "book"): Policy.PROTECT,
    ("category", "book"): Policy.PROTECT,
    ("book", "review"): Policy.CASCADE,
    ("reviewer", "review"): Policy.CASCADE,
}


def policy_for(parent: str, child: str) -> Policy:
    return DELETE_POLICIES.get((parent, child), Policy.PROTECT)


# ---------------------------------------------------------------------------
# Verdicts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RejectedInvalid:
    field: str
    reason: str


@dataclass(frozen=True)
class RejectedNotFound:
    entity: str
    id: Any


@dataclass(frozen=True)
class RejectedDuplicate:
    entity: str
    key: Tuple[str, ...]


@dataclass(frozen=True)
class RejectedConflict:
    entity: str
    reason: str


Reason = Union[RejectedInvalid, RejectedNotFound, RejectedDuplicate, RejectedConflict]


@dataclass(frozen=True)
class CascadeRequired:
    """Children that must be removed before the parent row."""
    child_kind: str
    child_ids: Tuple[int, ...]


@dataclass(frozen=True)
class Allowed:
    cascades: Tuple[CascadeRequired, ...] = ()


@dataclass(frozen=True)
class Rejected:
    reasons: Tuple[Reason, ...]

    @property
    def primary(self) -> Reason:
        return self.reasons[0]


Verdict = Union[Allowed, Rejected]


@dataclass
class Facts:
    """
    What the store said about a candidate.

    - target_exists: the addressed row exists (update/delete)
    - missing: entity kind -> referenced ids that do not exist
    - duplicate_key: the normalized natural key, when another row already has it
    - dependents: child kind -> ids of rows depending on the target
    """
    target_exists: bool = True
    missing: Dict[str, Sequence[int]] = field(default_factory=dict)
    duplicate_key: Optional[Tuple[str, ...]] = None
    dependents: Dict[str, Sequence[int]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def check_shape(model: type, values: Mapping[str, Any]) -> List[RejectedInvalid]:
    """Validate `values` against the constraints declared on `model`."""
    errors: List[RejectedInvalid] = []
    for name, c in constraints_of(model).items():
        value = values.get(name)
        if _blank(value):
            if c.required:
                errors.append(RejectedInvalid(name, "is required"))
            continue

        if c.type_ is not None and not isinstance(value, c.type_):
            errors.append(RejectedInvalid(name, f"must be a {c.type_.__name__}"))
            continue

        if c.min_length is not None or c.max_length is not None:
            if not isinstance(value, str):
                errors.append(RejectedInvalid(name, "must be a string"))
                continue
            n = len(value.strip())
            if c.min_length is not None and c.max_length is not None:
                if not (c.min_length <= n <= c.max_length):
                    errors.append(RejectedInvalid(
                        name, f"must be between {c.min_length} and {c.max_length} characters"
                    ))
            elif c.max_length is not None and n > c.max_length:
                errors.append(RejectedInvalid(name, f"cannot be more than {c.max_length} characters"))
            elif c.min_length is not None and n < c.min_length:
                errors.append(RejectedInvalid(name, f"must be at least {c.min_length} characters"))

        if c.min_value is not None or c.max_value is not None:
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(RejectedInvalid(name, "must be an integer"))
                continue
            lo = c.min_value if c.min_value is not None else value
            hi = c.max_value if c.max_value is not None else value
            if not (lo <= value <= hi):
                errors.append(RejectedInvalid(name, f"must be between {lo} and {hi}"))

        if c.min_items is not None:
            if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple, set)):
                errors.append(RejectedInvalid(name, "must be a list of ids"))
            elif len(value) < c.min_items:
                errors.append(RejectedInvalid(name, f"needs at least {c.min_items} entry"))
    return errors


def check_identity(target_id: int, values: Mapping[str, Any]) -> List[RejectedInvalid]:
    """The payload id must name the addressed row."""
    payload_id = values.get("id")
    if payload_id is None:
        return [RejectedInvalid("id", "is required")]
    if payload_id != target_id:
        return [RejectedInvalid("id", f"does not match the addressed id {target_id}")]
    return []


def check_references(facts: Facts) -> List[RejectedNotFound]:
    return [
        RejectedNotFound(kind, ref_id)
        for kind, ids in facts.missing.items()
        for ref_id in ids
    ]


def check_duplicate(kind: str, facts: Facts) -> List[RejectedDuplicate]:
    if facts.duplicate_key is None:
        return []
    return [RejectedDuplicate(kind, facts.duplicate_key)]


def check_dependents(
    kind: str, target_id: int, facts: Facts
) -> Tuple[List[RejectedConflict], List[CascadeRequired]]:
    conflicts: List[RejectedConflict] = []
    cascades: List[CascadeRequired] = []
    for child, ids in facts.dependents.items():
        if not ids:
            continue
        if policy_for(kind, child) is Policy.CASCADE:
            cascades.append(CascadeRequired(child, tuple(ids)))
        else:
            conflicts.append(RejectedConflict(
                kind, f"{kind} {target_id} is referenced by {len(ids)} {child}(s)"
            ))
    return conflicts, cascades


def natural_key(values: Mapping[str, Any], fields: Sequence[str]) -> Optional[Tuple[str, ...]]:
    """
    Normalized natural key (trimmed, lower-cased), or None when any part is
    missing or not a string.
    """
    parts = []
    for name in fields:
        value = values.get(name)
        if not isinstance(value, str) or not value.strip():
            return None
        parts.append(value.strip().lower())
    return tuple(parts)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------

def _verdict(reasons: Sequence[Reason], cascades: Sequence[CascadeRequired] = ()) -> Verdict:
    if reasons:
        return Rejected(tuple(reasons))
    return Allowed(tuple(cascades))


def evaluate_create(model: type, kind: str, values: Mapping[str, Any], facts: Facts) -> Verdict:
    reasons: List[Reason] = []
    reasons.extend(check_shape(model, values))
    reasons.extend(check_references(facts))
    reasons.extend(check_duplicate(kind, facts))
    return _verdict(reasons)


def evaluate_update(
    model: type, kind: str, target_id: int, values: Mapping[str, Any], facts: Facts
) -> Verdict:
    reasons: List[Reason] = []
    reasons.extend(check_identity(target_id, values))
    reasons.extend(check_shape(model, values))
    if not facts.target_exists:
        reasons.append(RejectedNotFound(kind, target_id))
    reasons.extend(check_references(facts))
    reasons.extend(check_duplicate(kind, facts))
    return _verdict(reasons)


def evaluate_delete(kind: str, target_id: int, facts: Facts) -> Verdict:
    if not facts.target_exists:
        return Rejected((RejectedNotFound(kind, target_id),))
    conflicts, cascades = check_dependents(kind, target_id, facts)
    return _verdict(conflicts, cascades)
