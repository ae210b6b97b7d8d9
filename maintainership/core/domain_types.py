"""Domain Types — identities, states and immutable records for maintainership.

Invariants:
    - NamespaceId, PackageId, MaintainershipId wrap UUIDs — never use bare UUID in domain logic
    - PackageRef is the owning scope of a package (namespace@host/name), not the maintainer
    - MaintainershipRecord.state is derived from flags, never stored
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - Frozen dataclasses for records: the core hands out snapshots, storage owns mutation
    - removed_by_id distinguishes a withdrawn invitation from a declined one
      (both end with active=False, accepted=False)
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

NamespaceId = NewType("NamespaceId", UUID)
PackageId = NewType("PackageId", UUID)
MaintainershipId = NewType("MaintainershipId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class MaintainershipState(str, Enum):
    """Derived lifecycle state of a single maintainership record."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    REMOVED = "removed"


class Operation(str, Enum):
    """The four state transitions. Values double as event action suffixes."""
    INVITE = "invite"
    ACCEPT = "accept"
    DECLINE = "decline"
    REMOVE = "remove"


class NamespaceKind(str, Enum):
    USER = "user"
    GROUP = "group"


def derive_state(
    active: bool, accepted: bool, removed_by_id: NamespaceId | None = None,
) -> MaintainershipState:
    """Map the stored flags onto a lifecycle state."""
    if active:
        return (
            MaintainershipState.ACCEPTED if accepted
            else MaintainershipState.PENDING
        )
    if accepted or removed_by_id is not None:
        return MaintainershipState.REMOVED
    return MaintainershipState.DECLINED


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class PackageRef:
    """Address of a package as it appears in routes: namespace@host/name."""
    namespace: str
    host: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}@{self.host}/{self.name}"


@dataclass(frozen=True)
class Namespace:
    id: NamespaceId
    name: str
    kind: NamespaceKind = NamespaceKind.USER


@dataclass(frozen=True)
class Package:
    id: PackageId
    namespace_id: NamespaceId
    ref: PackageRef


@dataclass(frozen=True)
class Caller:
    """Authenticated identity supplied explicitly to every operation."""
    namespace: Namespace

    @property
    def name(self) -> str:
        return self.namespace.name


@dataclass(frozen=True)
class MaintainershipRecord:
    """Snapshot of one row of the maintainers table."""
    id: MaintainershipId
    namespace_id: NamespaceId
    package_id: PackageId
    active: bool
    accepted: bool
    invited_by_id: NamespaceId
    created: datetime
    modified: datetime
    accepted_at: datetime | None = None
    removed_by_id: NamespaceId | None = None

    @property
    def state(self) -> MaintainershipState:
        return derive_state(self.active, self.accepted, self.removed_by_id)


@dataclass(frozen=True)
class MaintainerEntry:
    """One element of the active-maintainers listing."""
    record_id: MaintainershipId
    namespace: str
    accepted_at: datetime


@dataclass(frozen=True)
class MaintainerPage:
    items: list[MaintainerEntry]
    next_cursor: str | None = None


@dataclass(frozen=True)
class Confirmation:
    """Successful transition: who did what to whom, on which package."""
    operation: Operation
    message: str
    actor: str
    subject: str
    package: PackageRef
    record: MaintainershipRecord
