"""Package ORM — a publishable artifact addressed as namespace@host/name.

Invariants:
    - (namespace_id, host, name) is unique
    - namespace_id is the OWNING namespace, unrelated to who maintains it
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from maintainership.db.base import Base


class Package(Base):
    """Package entity — referenced, never mutated, by maintainership."""
    __tablename__ = "packages"
    __table_args__ = (
        UniqueConstraint("namespace_id", "host", "name", name="uq_package_scope"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    namespace_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("namespaces.id"), nullable=False,
    )
    host: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(214), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    namespace: Mapped["Namespace"] = relationship(
        "Namespace", lazy="joined",
    )
