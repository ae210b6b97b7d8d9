"""Maintainership Service — invite, accept, decline, remove, and list maintainers.

Invariants:
    - Preconditions run in sequence at the top of each operation and return early by
      raising; nothing is written until all of them pass
    - Invite/Remove check write access BEFORE resolving the invitee, so unauthorized
      callers cannot probe which namespaces exist
    - Accept/Decline report InvitationNotFound for any caller when there is no Pending
      record, and Unauthorized when there is one the caller may not answer
    - Every storage call runs under asyncio.timeout; a timeout is StorageUnavailableError
    - Domain events are emitted only after the mutation is committed

Design Decisions:
    - Caller identity, package and namespaces are explicit parameters, never request globals
    - Storage returns Ok | Err for lost races; the pure state machine decides which
      FailureKind a conflict becomes
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from maintainership.core import format_messages as msg
from maintainership.core.cursor import Cursor, decode_cursor, encode_cursor
from maintainership.core.domain_types import (
    Caller, Confirmation, MaintainerEntry, MaintainerPage, MaintainershipRecord,
    MaintainershipState, Namespace, Operation, Package, PackageRef,
)
from maintainership.core.errors import (
    InvitationNotFoundError, InviteeNotFoundError, PackageNotFoundError,
    StorageUnavailableError, UnauthorizedError, error_for_kind,
)
from maintainership.core.maintainer_states import (
    check_invite, check_transition, source_states, transition_changes,
)
from maintainership.core.repository_protocols import (
    AccessPolicy, EventSink, MaintainershipStore, NamespaceLookup, PackageLookup,
)
from maintainership.core.result import Err, Ok

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EVENTS = {
    Operation.ACCEPT: "maintainer.accepted",
    Operation.DECLINE: "maintainer.declined",
    Operation.REMOVE: "maintainer.removed",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MaintainershipService:
    """The four maintainership transitions plus the active-maintainer listing."""

    def __init__(
        self,
        store: MaintainershipStore,
        packages: PackageLookup,
        namespaces: NamespaceLookup,
        access: AccessPolicy,
        events: EventSink,
        *,
        reinvite_after_decline: bool = True,
        storage_timeout: float = 5.0,
        page_size: int = 50,
        max_page_size: int = 200,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.packages = packages
        self.namespaces = namespaces
        self.access = access
        self.events = events
        self.reinvite_after_decline = reinvite_after_decline
        self.storage_timeout = storage_timeout
        self.page_size = page_size
        self.max_page_size = max_page_size
        self._clock = clock

    # ─── Storage boundary ────────────────────────────────────────

    async def _storage(self, operation: str, call: Awaitable[T]) -> T:
        """Await a storage call, turning a timeout into StorageUnavailableError."""
        try:
            async with asyncio.timeout(self.storage_timeout):
                return await call
        except TimeoutError as e:
            logger.error(
                f"Storage timed out after {self.storage_timeout}s during {operation}",
                extra={"operation": operation},
            )
            raise StorageUnavailableError(operation, "timeout") from e

    # ─── Preconditions ───────────────────────────────────────────

    async def _require_package(self, ref: PackageRef) -> Package:
        package = await self._storage(
            "look up the package", self.packages.get_package(ref),
        )
        if package is None:
            raise PackageNotFoundError(ref)
        return package

    async def _require_write_access(self, caller: Caller, package: Package) -> None:
        allowed = await self._storage(
            "check package access",
            self.access.can_write_package(caller.namespace, package),
        )
        if not allowed:
            logger.warning(
                f"{caller.name} denied write access to {package.ref}",
                extra={"actor": caller.name, "package": str(package.ref)},
            )
            raise UnauthorizedError()

    async def _require_membership(self, caller: Caller, namespace: Namespace) -> None:
        allowed = await self._storage(
            "check namespace membership",
            self.access.is_namespace_member(caller.namespace, namespace),
        )
        if not allowed:
            logger.warning(
                f"{caller.name} is not a member of {namespace.name}",
                extra={"actor": caller.name, "subject": namespace.name},
            )
            raise UnauthorizedError()

    async def _require_invitee(self, name: str) -> Namespace:
        namespace = await self._storage(
            "look up the namespace", self.namespaces.get_namespace(name),
        )
        if namespace is None:
            raise InviteeNotFoundError(name)
        return namespace

    # ─── Transitions ─────────────────────────────────────────────

    async def invite(
        self, ref: PackageRef, caller: Caller, invitee: str,
        *, reinvite: bool = False,
    ) -> Confirmation:
        """Create a Pending maintainership of `invitee` on the package.

        Repeating the invite while one is Pending returns the existing record.
        `reinvite` overrides the decline policy for this one call.
        """
        package = await self._require_package(ref)
        await self._require_write_access(caller, package)
        namespace = await self._require_invitee(invitee)

        latest = await self._storage(
            "look up the invitation",
            self.store.latest(namespace.id, package.id),
        )
        if latest is not None and latest.state is MaintainershipState.PENDING:
            return self._already_invited(caller, invitee, ref, latest)

        reinvite_allowed = self.reinvite_after_decline or reinvite
        failure = check_invite(latest, reinvite_allowed)
        if failure is not None:
            raise error_for_kind(failure, invitee, ref)

        result = await self._storage(
            "create the invitation",
            self.store.create_pending(
                namespace.id, package.id, caller.namespace.id, self._clock(),
            ),
        )
        match result:
            case Ok(value=record):
                action = "maintainer.invited" if latest is None else "maintainer.reinvited"
                self.events.emit(action, caller.name, invitee, ref)
                return Confirmation(
                    Operation.INVITE, msg.invited(invitee, ref),
                    caller.name, invitee, ref, record,
                )
            case Err(error=conflict):
                current = conflict.current
                if current is None:
                    raise StorageUnavailableError(
                        "create the invitation",
                        "conflicting active record vanished",
                    )
                if current.state is MaintainershipState.PENDING:
                    return self._already_invited(caller, invitee, ref, current)
                raise error_for_kind(
                    check_invite(current, reinvite_allowed), invitee, ref,
                )

    async def accept(
        self, ref: PackageRef, caller: Caller, member: str,
    ) -> Confirmation:
        """Pending -> Accepted, answered by a member of the invited namespace."""
        namespace, record = await self._pending_invitation(ref, member)
        await self._require_membership(caller, namespace)
        return await self._transition(
            Operation.ACCEPT, record, caller, member, ref,
            msg.accepted(member, ref),
        )

    async def decline(
        self, ref: PackageRef, caller: Caller, member: str,
    ) -> Confirmation:
        """Pending -> Declined, answered by a member of the invited namespace."""
        namespace, record = await self._pending_invitation(ref, member)
        await self._require_membership(caller, namespace)
        return await self._transition(
            Operation.DECLINE, record, caller, member, ref,
            msg.declined(member, ref),
        )

    async def remove(
        self, ref: PackageRef, caller: Caller, invitee: str,
    ) -> Confirmation:
        """Pending|Accepted -> Removed. Withdraws an unanswered invitation too."""
        package = await self._require_package(ref)
        await self._require_write_access(caller, package)
        namespace = await self._require_invitee(invitee)
        record = await self._storage(
            "look up the maintainer",
            self.store.active(namespace.id, package.id),
        )
        return await self._transition(
            Operation.REMOVE, record, caller, invitee, ref,
            msg.removed(invitee, ref),
        )

    async def _pending_invitation(
        self, ref: PackageRef, member: str,
    ) -> tuple[Namespace, MaintainershipRecord]:
        """Resolve (member namespace, Pending record) or raise InvitationNotFound."""
        package = await self._require_package(ref)
        namespace = await self._storage(
            "look up the namespace", self.namespaces.get_namespace(member),
        )
        if namespace is None:
            raise InvitationNotFoundError(member, ref)
        record = await self._storage(
            "look up the invitation",
            self.store.active(namespace.id, package.id),
        )
        if record is None or record.state is not MaintainershipState.PENDING:
            raise InvitationNotFoundError(member, ref)
        return namespace, record

    async def _transition(
        self, operation: Operation, record: MaintainershipRecord | None,
        caller: Caller, subject: str, ref: PackageRef, message: str,
    ) -> Confirmation:
        failure = check_transition(operation, record)
        if failure is not None:
            raise error_for_kind(failure, subject, ref)

        result = await self._storage(
            f"{operation.value} {subject} on {ref}",
            self.store.update_if_state(
                record.id,
                source_states(operation),
                transition_changes(operation, caller.namespace.id, self._clock()),
            ),
        )
        match result:
            case Ok(value=updated):
                self.events.emit(_EVENTS[operation], caller.name, subject, ref)
                return Confirmation(
                    operation, message, caller.name, subject, ref, updated,
                )
            case Err(error=conflict):
                logger.info(
                    f"Lost race on {operation.value} of {subject} for {ref}",
                    extra={"actor": caller.name, "subject": subject, "package": str(ref)},
                )
                kind = (
                    check_transition(operation, conflict.current)
                    or check_transition(operation, None)
                )
                raise error_for_kind(kind, subject, ref)

    def _already_invited(
        self, caller: Caller, invitee: str, ref: PackageRef,
        record: MaintainershipRecord,
    ) -> Confirmation:
        logger.info(
            f"{invitee} already has a pending invitation to {ref}",
            extra={"actor": caller.name, "subject": invitee, "package": str(ref)},
        )
        return Confirmation(
            Operation.INVITE, msg.already_invited(invitee, ref),
            caller.name, invitee, ref, record,
        )

    # ─── Query ───────────────────────────────────────────────────

    async def list_active_maintainers(
        self, ref: PackageRef, cursor: str | None = None, limit: int | None = None,
    ) -> MaintainerPage:
        """One page of Accepted maintainers, oldest acceptance first."""
        after = decode_cursor(cursor) if cursor else None
        package = await self._require_package(ref)
        size = max(1, min(limit or self.page_size, self.max_page_size))

        entries = await self._storage(
            "list maintainers",
            self.store.list_accepted(package.id, after, size + 1),
        )
        if len(entries) > size:
            page = entries[:size]
            return MaintainerPage(page, encode_cursor(Cursor.after(page[-1])))
        return MaintainerPage(entries, None)

    async def iter_active_maintainers(
        self, ref: PackageRef, page_size: int | None = None,
    ) -> AsyncIterator[MaintainerEntry]:
        """Lazily walk every page of the listing."""
        cursor = None
        while True:
            page = await self.list_active_maintainers(ref, cursor, page_size)
            for entry in page.items:
                yield entry
            if page.next_cursor is None:
                return
            cursor = page.next_cursor
