"""Boundary Protocols — contracts between the maintainership core and its shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - MaintainershipStore mutations are conditional: they report a lost race as
      Err(StateConflict), never by raising

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      the state machine that decides on their results stays synchronous
"""

from datetime import datetime
from typing import Protocol

from maintainership.core.cursor import Cursor
from maintainership.core.domain_types import (
    MaintainerEntry, MaintainershipId, MaintainershipRecord, MaintainershipState,
    Namespace, NamespaceId, Package, PackageId, PackageRef,
)
from maintainership.core.result import Result, StateConflict


class PackageLookup(Protocol):
    """Resolves a package by its owning scope — implemented by shell."""
    async def get_package(self, ref: PackageRef) -> Package | None: ...


class NamespaceLookup(Protocol):
    """Resolves a namespace by unique name — implemented by shell."""
    async def get_namespace(self, name: str) -> Namespace | None: ...


class AccessPolicy(Protocol):
    """The two authorization predicates gating transitions."""
    async def can_write_package(
        self, caller: Namespace, package: Package,
    ) -> bool: ...
    async def is_namespace_member(
        self, caller: Namespace, namespace: Namespace,
    ) -> bool: ...


class MaintainershipStore(Protocol):
    """Contract for maintainership persistence — implemented by shell."""
    async def latest(
        self, namespace_id: NamespaceId, package_id: PackageId,
    ) -> MaintainershipRecord | None: ...
    async def active(
        self, namespace_id: NamespaceId, package_id: PackageId,
    ) -> MaintainershipRecord | None: ...
    async def create_pending(
        self, namespace_id: NamespaceId, package_id: PackageId,
        invited_by_id: NamespaceId, now: datetime,
    ) -> Result[MaintainershipRecord, StateConflict]: ...
    async def update_if_state(
        self, record_id: MaintainershipId,
        expected: frozenset[MaintainershipState], changes: dict,
    ) -> Result[MaintainershipRecord, StateConflict]: ...
    async def list_accepted(
        self, package_id: PackageId, after: Cursor | None, limit: int,
    ) -> list[MaintainerEntry]: ...


class EventSink(Protocol):
    """Accepts structured informational domain events."""
    def emit(
        self, action: str, actor: str, subject: str, package: PackageRef,
    ) -> None: ...
