"""Maintainership State Machine — legal transitions and the failures of illegal ones.

Invariants:
    - All functions are PURE: they return verdicts and field changes, storage applies them
    - TRANSITIONS is the single source of truth for (state, operation) -> state
    - Declined and Removed are terminal for a record; Invite creates a new record instead
    - At most one active (Pending or Accepted) record per (namespace, package)

Design Decisions:
    - Invite is checked against the most recent record of the pair, the other operations
      against the active record, mirroring what storage can atomically guard
    - Failures come back as FailureKind values; the shell turns them into exceptions
"""

from datetime import datetime

from maintainership.core.domain_types import (
    MaintainershipRecord, MaintainershipState, NamespaceId, Operation,
    derive_state,
)
from maintainership.core.errors import FailureKind

__all__ = [
    "TRANSITIONS", "derive_state", "next_state", "source_states",
    "check_invite", "check_transition", "transition_changes", "state_flags",
]

S = MaintainershipState

# (from_state, operation) -> to_state. None as from_state means "no record".
TRANSITIONS: dict[tuple[MaintainershipState | None, Operation], MaintainershipState] = {
    (None, Operation.INVITE): S.PENDING,
    (S.DECLINED, Operation.INVITE): S.PENDING,
    (S.REMOVED, Operation.INVITE): S.PENDING,
    (S.PENDING, Operation.ACCEPT): S.ACCEPTED,
    (S.PENDING, Operation.DECLINE): S.DECLINED,
    (S.PENDING, Operation.REMOVE): S.REMOVED,
    (S.ACCEPTED, Operation.REMOVE): S.REMOVED,
}

# Failure reported when an operation finds no record it may act on.
_MISSING_RECORD: dict[Operation, FailureKind] = {
    Operation.ACCEPT: FailureKind.INVITATION_NOT_FOUND,
    Operation.DECLINE: FailureKind.INVITATION_NOT_FOUND,
    Operation.REMOVE: FailureKind.INVITEE_NOT_MAINTAINER,
}

# Stored flags (active, accepted) of the states a conditional update can start from.
_ACTIVE_FLAGS: dict[MaintainershipState, tuple[bool, bool]] = {
    S.PENDING: (True, False),
    S.ACCEPTED: (True, True),
}


def next_state(
    current: MaintainershipState | None, operation: Operation,
) -> MaintainershipState | None:
    """Target state of a transition, or None when it is illegal."""
    return TRANSITIONS.get((current, operation))


def source_states(operation: Operation) -> frozenset[MaintainershipState]:
    """States a record must be in for the operation to apply to it."""
    return frozenset(
        src for (src, op) in TRANSITIONS
        if op is operation and src is not None
    )


def state_flags(state: MaintainershipState) -> tuple[bool, bool]:
    """(active, accepted) for a state that a conditional update may match on."""
    if state not in _ACTIVE_FLAGS:
        raise ValueError(f"{state.value} is terminal and cannot be matched for update")
    return _ACTIVE_FLAGS[state]


def check_invite(
    latest: MaintainershipRecord | None, reinvite_allowed: bool,
) -> FailureKind | None:
    """Rule: invite needs no active record; a declined one needs the re-invite policy.

    A Pending latest record is not a failure: repeating an invite is idempotent and
    the caller returns the existing invitation.
    """
    if latest is None:
        return None
    state = latest.state
    if state is S.ACCEPTED:
        return FailureKind.ALREADY_ACCEPTED
    if state is S.DECLINED and not reinvite_allowed:
        return FailureKind.ALREADY_DECLINED
    return None


def check_transition(
    operation: Operation, record: MaintainershipRecord | None,
) -> FailureKind | None:
    """Rule: accept/decline need a Pending record, remove needs an active one."""
    if operation is Operation.INVITE:
        raise ValueError("use check_invite for invitations")
    current = record.state if record is not None else None
    if next_state(current, operation) is None:
        return _MISSING_RECORD[operation]
    return None


def transition_changes(
    operation: Operation, actor_id: NamespaceId, now: datetime,
) -> dict:
    """Column updates that move a record along a transition."""
    if operation is Operation.ACCEPT:
        return {"accepted": True, "accepted_at": now, "modified": now}
    if operation is Operation.DECLINE:
        return {"active": False, "modified": now}
    if operation is Operation.REMOVE:
        return {"active": False, "removed_by_id": actor_id, "modified": now}
    raise ValueError(f"{operation.value} does not update an existing record")
