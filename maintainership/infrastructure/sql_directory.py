"""SQL Directory — package/namespace lookups and the two authorization predicates.

Invariants:
    - Read-only: nothing here writes to the database
    - A failed query rolls the session back before raising StorageUnavailableError,
      so the request session is never left in an aborted transaction
    - can_write_package: caller owns the package's namespace, belongs to the owning group,
      or it (or one of its groups) is an Accepted maintainer of the package
    - is_namespace_member: caller is the namespace itself or listed in namespace_members
"""

import logging

from sqlalchemy import exists, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maintainership.core.domain_types import (
    Namespace, NamespaceId, NamespaceKind, Package, PackageId, PackageRef,
)
from maintainership.core.errors import StorageUnavailableError
from maintainership.models.maintainer import Maintainer
from maintainership.models.namespace import (
    Namespace as NamespaceModel, NamespaceMember,
)
from maintainership.models.package import Package as PackageModel

logger = logging.getLogger(__name__)


def _to_namespace(row: NamespaceModel) -> Namespace:
    return Namespace(
        id=NamespaceId(row.id), name=row.name, kind=NamespaceKind(row.kind),
    )


class SqlDirectory:
    """PackageLookup + NamespaceLookup + AccessPolicy over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _scalar(self, query, operation: str):
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Storage failure during {operation}: {e}",
                extra={"operation": operation},
            )
            raise StorageUnavailableError(operation, str(e)) from e
        return result.scalar_one_or_none()

    # ─── Lookups ─────────────────────────────────────────────────

    async def get_namespace(self, name: str) -> Namespace | None:
        row = await self._scalar(
            select(NamespaceModel).where(NamespaceModel.name == name),
            "look up the namespace",
        )
        return _to_namespace(row) if row else None

    async def get_package(self, ref: PackageRef) -> Package | None:
        row = await self._scalar(
            select(PackageModel)
            .join(NamespaceModel, NamespaceModel.id == PackageModel.namespace_id)
            .where(NamespaceModel.name == ref.namespace)
            .where(PackageModel.host == ref.host)
            .where(PackageModel.name == ref.name),
            "look up the package",
        )
        if not row:
            return None
        return Package(
            id=PackageId(row.id),
            namespace_id=NamespaceId(row.namespace_id),
            ref=ref,
        )

    # ─── Authorization ───────────────────────────────────────────

    async def can_write_package(
        self, caller: Namespace, package: Package,
    ) -> bool:
        if caller.id == package.namespace_id:
            return True
        caller_groups = (
            select(NamespaceMember.namespace_id)
            .where(NamespaceMember.member_id == caller.id)
        )
        owner_member = exists().where(
            NamespaceMember.namespace_id == package.namespace_id,
            NamespaceMember.member_id == caller.id,
        )
        maintains = exists().where(
            Maintainer.package_id == package.id,
            Maintainer.active.is_(True),
            Maintainer.accepted.is_(True),
            or_(
                Maintainer.namespace_id == caller.id,
                Maintainer.namespace_id.in_(caller_groups),
            ),
        )
        allowed = await self._scalar(
            select(or_(owner_member, maintains)), "check package access",
        )
        return bool(allowed)

    async def is_namespace_member(
        self, caller: Namespace, namespace: Namespace,
    ) -> bool:
        if caller.id == namespace.id:
            return True
        allowed = await self._scalar(
            select(exists().where(
                NamespaceMember.namespace_id == namespace.id,
                NamespaceMember.member_id == caller.id,
            )),
            "check namespace membership",
        )
        return bool(allowed)
