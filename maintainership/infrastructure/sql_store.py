"""SQL Maintainership Store — conditional writes over the maintainers table.

Invariants:
    - Every mutation commits on its own: a transition is final once it returns Ok
    - update_if_state is a single UPDATE ... WHERE id AND state-flags RETURNING the
      row; an empty result means the race was lost, so two writers on one pair
      never both apply from the same state
    - create_pending relies on ux_maintainers_active_pair: a duplicate active row is
      rejected by the database and reported as Err(StateConflict(current_active))
    - SQLAlchemy errors leave as StorageUnavailableError; the driver text is logged only

Design Decisions:
    - update() with synchronize_session=False; reads use populate_existing so the
      identity map never hands back a stale snapshot
    - A won transition is built from RETURNING, so no await follows its commit
    - Keyset pagination on (accepted_at, id), expressed with OR/AND so SQLite
      and PostgreSQL render the same predicate
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy import Row, and_, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from maintainership.core.cursor import Cursor
from maintainership.core.domain_types import (
    MaintainerEntry, MaintainershipId, MaintainershipRecord, MaintainershipState,
    NamespaceId, PackageId,
)
from maintainership.core.errors import StorageUnavailableError
from maintainership.core.maintainer_states import state_flags
from maintainership.core.result import Err, Ok, Result, StateConflict
from maintainership.models.maintainer import Maintainer
from maintainership.models.namespace import Namespace as NamespaceModel

logger = logging.getLogger(__name__)


def to_record(row: Maintainer | Row) -> MaintainershipRecord:
    """ORM instance or RETURNING row -> immutable domain snapshot."""
    return MaintainershipRecord(
        id=MaintainershipId(row.id),
        namespace_id=NamespaceId(row.namespace_id),
        package_id=PackageId(row.package_id),
        active=row.active,
        accepted=row.accepted,
        invited_by_id=NamespaceId(row.invited_by_id),
        created=row.created,
        modified=row.modified,
        accepted_at=row.accepted_at,
        removed_by_id=(
            NamespaceId(row.removed_by_id) if row.removed_by_id else None
        ),
    )


class SqlMaintainershipStore:
    """MaintainershipStore over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"Storage failure during {operation}: {e}",
                extra={"operation": operation},
            )
            raise StorageUnavailableError(operation, str(e)) from e

    async def _get(self, record_id: UUID) -> Maintainer | None:
        result = await self.db.execute(
            select(Maintainer)
            .where(Maintainer.id == record_id)
            .execution_options(populate_existing=True),
        )
        return result.scalar_one_or_none()

    async def latest(
        self, namespace_id: NamespaceId, package_id: PackageId,
    ) -> MaintainershipRecord | None:
        """Active record if any, else the most recently created one."""
        async with self._guard("look up the invitation"):
            result = await self.db.execute(
                select(Maintainer)
                .where(Maintainer.namespace_id == namespace_id)
                .where(Maintainer.package_id == package_id)
                .order_by(Maintainer.active.desc(), Maintainer.created.desc())
                .limit(1)
                .execution_options(populate_existing=True),
            )
            row = result.scalar_one_or_none()
        return to_record(row) if row else None

    async def active(
        self, namespace_id: NamespaceId, package_id: PackageId,
    ) -> MaintainershipRecord | None:
        async with self._guard("look up the maintainer"):
            result = await self.db.execute(
                select(Maintainer)
                .where(Maintainer.namespace_id == namespace_id)
                .where(Maintainer.package_id == package_id)
                .where(Maintainer.active.is_(True))
                .execution_options(populate_existing=True),
            )
            row = result.scalar_one_or_none()
        return to_record(row) if row else None

    async def create_pending(
        self, namespace_id: NamespaceId, package_id: PackageId,
        invited_by_id: NamespaceId, now: datetime,
    ) -> Result[MaintainershipRecord, StateConflict]:
        """Insert a Pending record unless the pair already has an active one."""
        async with self._guard("create the invitation"):
            row = Maintainer(
                namespace_id=namespace_id,
                package_id=package_id,
                active=True,
                accepted=False,
                invited_by_id=invited_by_id,
                created=now,
                modified=now,
            )
            self.db.add(row)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.info(
                    f"Concurrent invitation for namespace {namespace_id} "
                    f"on package {package_id}",
                )
                return Err(StateConflict(
                    await self.active(namespace_id, package_id),
                ))
            return Ok(to_record(row))

    async def update_if_state(
        self, record_id: MaintainershipId,
        expected: frozenset[MaintainershipState], changes: dict,
    ) -> Result[MaintainershipRecord, StateConflict]:
        """Apply changes only while the record is still in one of the expected states.

        The updated row comes back through RETURNING before the commit, so nothing
        runs after the commit on success.
        """
        state_matches = [
            and_(
                Maintainer.active.is_(active),
                Maintainer.accepted.is_(accepted),
            )
            for active, accepted in sorted(state_flags(s) for s in expected)
        ]
        async with self._guard("update the invitation"):
            result = await self.db.execute(
                update(Maintainer)
                .where(Maintainer.id == record_id)
                .where(or_(*state_matches))
                .values(**changes)
                .returning(*Maintainer.__table__.c)
                .execution_options(synchronize_session=False),
            )
            updated = result.one_or_none()
            await self.db.commit()
            if updated is not None:
                return Ok(to_record(updated))
            row = await self._get(record_id)
        return Err(StateConflict(to_record(row) if row else None))

    async def list_accepted(
        self, package_id: PackageId, after: Cursor | None, limit: int,
    ) -> list[MaintainerEntry]:
        """One page of Accepted maintainers in acceptance order."""
        query = (
            select(Maintainer.id, Maintainer.accepted_at, NamespaceModel.name)
            .join(NamespaceModel, NamespaceModel.id == Maintainer.namespace_id)
            .where(Maintainer.package_id == package_id)
            .where(Maintainer.active.is_(True))
            .where(Maintainer.accepted.is_(True))
            .order_by(Maintainer.accepted_at, Maintainer.id)
            .limit(limit)
        )
        if after is not None:
            query = query.where(or_(
                Maintainer.accepted_at > after.accepted_at,
                and_(
                    Maintainer.accepted_at == after.accepted_at,
                    Maintainer.id > after.record_id,
                ),
            ))
        async with self._guard("list maintainers"):
            result = await self.db.execute(query)
            rows = result.all()
        return [
            MaintainerEntry(
                record_id=MaintainershipId(row.id),
                namespace=row.name,
                accepted_at=row.accepted_at,
            )
            for row in rows
        ]
