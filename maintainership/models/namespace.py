"""Namespace ORM — an account (user or group) that can hold maintainer rights.

Invariants:
    - name is unique and immutable
    - Read-only for this service; namespaces are managed elsewhere
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from maintainership.db.base import Base


class Namespace(Base):
    """Namespace entity — user or group account."""
    __tablename__ = "namespaces"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(214), nullable=False, unique=True, index=True,
    )
    kind: Mapped[str] = mapped_column(
        String(10), nullable=False, default="user",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class NamespaceMember(Base):
    """Membership of a user namespace in a group namespace."""
    __tablename__ = "namespace_members"
    __table_args__ = (
        UniqueConstraint("namespace_id", "member_id", name="uq_namespace_member"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    namespace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=False,
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=False,
        index=True,
    )
