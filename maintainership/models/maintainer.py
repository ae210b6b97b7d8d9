"""Maintainer ORM — the maintainership relationship between a namespace and a package.

Invariants:
    - Never hard-deleted: history is kept through active/accepted and modified
    - At most one active row per (namespace_id, package_id), enforced by the partial
      unique index ux_maintainers_active_pair
    - accepted_at is written once, by accept
    - removed_by_id is set only by remove

Design Decisions:
    - State derived from flags (core/domain_types.derive_state), no status column
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from maintainership.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Maintainer(Base):
    """Maintainership record — Pending, Accepted, Declined or Removed."""
    __tablename__ = "maintainers"
    __table_args__ = (
        Index(
            "ux_maintainers_active_pair", "namespace_id", "package_id",
            unique=True,
            postgresql_where=text("active"),
            sqlite_where=text("active = 1"),
        ),
        Index("ix_maintainers_package_accepted", "package_id", "accepted_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    namespace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=False,
    )
    package_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("packages.id"), nullable=False,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    accepted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    invited_by_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=False,
    )
    removed_by_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=True,
    )
    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
    accepted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
