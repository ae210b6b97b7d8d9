"""Maintainership schema — namespaces, namespace_members, packages, maintainers.

Revision ID: 001_maintainership
Revises: None
Create Date: 2026-10-19

The partial unique index ux_maintainers_active_pair is what makes concurrent
invitations of the same namespace to the same package collapse into one row.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_maintainership"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "namespaces",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(214), nullable=False, unique=True),
        sa.Column("kind", sa.String(10), nullable=False, server_default="user"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_namespaces_name", "namespaces", ["name"])

    op.create_table(
        "namespace_members",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("namespace_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=False),
        sa.Column("member_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=False),
        sa.UniqueConstraint("namespace_id", "member_id", name="uq_namespace_member"),
    )
    op.create_index("ix_namespace_members_member_id", "namespace_members", ["member_id"])

    op.create_table(
        "packages",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("namespace_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=False),
        sa.Column("host", sa.String(255), nullable=False),
        sa.Column("name", sa.String(214), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("namespace_id", "host", "name", name="uq_package_scope"),
    )

    op.create_table(
        "maintainers",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("namespace_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=False),
        sa.Column("package_id", UUID(as_uuid=True), sa.ForeignKey("packages.id"), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("accepted", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("invited_by_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=False),
        sa.Column("removed_by_id", UUID(as_uuid=True), sa.ForeignKey("namespaces.id"), nullable=True),
        sa.Column("created", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("modified", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ux_maintainers_active_pair", "maintainers", ["namespace_id", "package_id"],
        unique=True, postgresql_where=sa.text("active"),
    )
    op.create_index(
        "ix_maintainers_package_accepted", "maintainers", ["package_id", "accepted_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_maintainers_package_accepted", table_name="maintainers")
    op.drop_index("ux_maintainers_active_pair", table_name="maintainers")
    op.drop_table("maintainers")
    op.drop_table("packages")
    op.drop_index("ix_namespace_members_member_id", table_name="namespace_members")
    op.drop_table("namespace_members")
    op.drop_index("ix_namespaces_name", table_name="namespaces")
    op.drop_table("namespaces")
