"""Maintainer Schemas — Pydantic response models for the maintainers API.

Invariants:
    - A maintainership response carries its own record id and the namespace ids of
      the invitee, the inviter and the remover; listings carry names only
    - state is the derived lifecycle state, serialized as its enum value
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from maintainership.core.domain_types import (
    Confirmation, MaintainerEntry, MaintainershipRecord, MaintainershipState,
)


class MaintainershipResponse(BaseModel):
    """Public view of one maintainership record."""
    id: UUID
    namespace_id: UUID
    package_id: UUID
    state: MaintainershipState
    active: bool
    accepted: bool
    invited_by_id: UUID
    removed_by_id: UUID | None = None
    created: datetime
    modified: datetime
    accepted_at: datetime | None = None

    @classmethod
    def from_record(cls, record: MaintainershipRecord) -> "MaintainershipResponse":
        return cls(
            id=record.id,
            namespace_id=record.namespace_id,
            package_id=record.package_id,
            state=record.state,
            active=record.active,
            accepted=record.accepted,
            invited_by_id=record.invited_by_id,
            removed_by_id=record.removed_by_id,
            created=record.created,
            modified=record.modified,
            accepted_at=record.accepted_at,
        )


class ConfirmationResponse(BaseModel):
    """Successful transition: message naming actors and package, plus the record."""
    message: str
    operation: str
    actor: str
    subject: str
    package: str
    maintainership: MaintainershipResponse

    @classmethod
    def from_confirmation(cls, confirmation: Confirmation) -> "ConfirmationResponse":
        return cls(
            message=confirmation.message,
            operation=confirmation.operation.value,
            actor=confirmation.actor,
            subject=confirmation.subject,
            package=str(confirmation.package),
            maintainership=MaintainershipResponse.from_record(confirmation.record),
        )


class MaintainerItem(BaseModel):
    namespace: str
    accepted_at: datetime

    @classmethod
    def from_entry(cls, entry: MaintainerEntry) -> "MaintainerItem":
        return cls(namespace=entry.namespace, accepted_at=entry.accepted_at)


class MaintainerListResponse(BaseModel):
    """One page of active maintainers; `next` is None on the last page."""
    objects: list[MaintainerItem]
    next: str | None = None
