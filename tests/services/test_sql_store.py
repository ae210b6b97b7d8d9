"""SQL Maintainership Store — conditional updates, unique active pair, keyset paging.

Invariants:
    - Two writers holding the same stale snapshot never both apply a transition
    - Remove from a snapshot taken before Accept still wins; Accept after Remove loses
    - A second active record for one pair is refused as a StateConflict
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from maintainership.core.cursor import Cursor
from maintainership.core.domain_types import MaintainershipState, Operation
from maintainership.core.errors import StorageUnavailableError
from maintainership.core.maintainer_states import source_states, transition_changes
from maintainership.core.result import Err, Ok
from maintainership.infrastructure.sql_directory import SqlDirectory
from maintainership.infrastructure.sql_store import SqlMaintainershipStore

S = MaintainershipState
T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def store(test_db) -> SqlMaintainershipStore:
    return SqlMaintainershipStore(test_db)


def _ids(registry, name: str):
    return registry[name].namespace.id, registry.package_id


async def _pending(store, registry, name: str, at: datetime = T0):
    result = await store.create_pending(
        *_ids(registry, name), registry["alice"].namespace.id, at,
    )
    assert isinstance(result, Ok)
    return result.value


async def _apply(store, registry, record, op: Operation, at: datetime):
    return await store.update_if_state(
        record.id, source_states(op),
        transition_changes(op, registry["alice"].namespace.id, at),
    )


async def test_create_pending_refuses_second_active_record(store, registry):
    first = await _pending(store, registry, "bob")

    result = await store.create_pending(
        *_ids(registry, "bob"), registry["alice"].namespace.id, T0,
    )

    assert isinstance(result, Err)
    assert result.error.current.id == first.id
    assert result.error.current.state is S.PENDING


async def test_stale_double_accept_applies_once(store, registry):
    record = await _pending(store, registry, "bob")

    first = await _apply(store, registry, record, Operation.ACCEPT, T0)
    second = await _apply(store, registry, record, Operation.ACCEPT, T0)

    assert isinstance(first, Ok)
    assert first.value.state is S.ACCEPTED
    assert isinstance(second, Err)
    assert second.error.current.state is S.ACCEPTED


async def test_remove_from_stale_snapshot_after_accept(store, registry):
    record = await _pending(store, registry, "bob")

    await _apply(store, registry, record, Operation.ACCEPT, T0)
    removed = await _apply(store, registry, record, Operation.REMOVE, T0)

    assert isinstance(removed, Ok)
    assert removed.value.state is S.REMOVED
    assert await store.active(*_ids(registry, "bob")) is None


async def test_accept_after_remove_loses(store, registry):
    record = await _pending(store, registry, "bob")

    await _apply(store, registry, record, Operation.REMOVE, T0)
    accepted = await _apply(store, registry, record, Operation.ACCEPT, T0)

    assert isinstance(accepted, Err)
    assert accepted.error.current.state is S.REMOVED


async def test_decline_after_accept_loses(store, registry):
    record = await _pending(store, registry, "bob")

    await _apply(store, registry, record, Operation.ACCEPT, T0)
    declined = await _apply(store, registry, record, Operation.DECLINE, T0)

    assert isinstance(declined, Err)
    assert declined.error.current.state is S.ACCEPTED


async def test_latest_prefers_active_record(store, registry):
    old = await _pending(store, registry, "bob", T0)
    await _apply(store, registry, old, Operation.DECLINE, T0)
    new = await _pending(store, registry, "bob", T0 - timedelta(days=1))

    latest = await store.latest(*_ids(registry, "bob"))
    assert latest.id == new.id
    assert latest.state is S.PENDING


async def test_latest_falls_back_to_newest_inactive(store, registry):
    old = await _pending(store, registry, "bob", T0)
    await _apply(store, registry, old, Operation.DECLINE, T0)
    new = await _pending(store, registry, "bob", T0 + timedelta(days=1))
    await _apply(store, registry, new, Operation.REMOVE, T0)

    latest = await store.latest(*_ids(registry, "bob"))
    assert latest.id == new.id
    assert latest.state is S.REMOVED


async def test_list_accepted_keyset_pages(store, registry):
    for offset, name in enumerate(("bob", "carol", "dave")):
        record = await _pending(store, registry, name)
        await _apply(
            store, registry, record, Operation.ACCEPT,
            T0 + timedelta(minutes=offset),
        )
    await _pending(store, registry, "erin")

    first = await store.list_accepted(registry.package_id, None, 2)
    assert [e.namespace for e in first] == ["bob", "carol"]

    rest = await store.list_accepted(
        registry.package_id, Cursor.after(first[-1]), 2,
    )
    assert [e.namespace for e in rest] == ["dave"]


async def test_driver_failure_becomes_storage_unavailable(store, registry, test_db, monkeypatch):
    async def lost_connection(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(test_db, "execute", lost_connection)

    with pytest.raises(StorageUnavailableError) as exc:
        await store.latest(*_ids(registry, "bob"))
    assert "connection lost" in exc.value.cause
    assert "connection lost" not in exc.value.message


async def test_directory_failure_rolls_back_session(registry, test_db, monkeypatch):
    rollbacks = []
    real_rollback = test_db.rollback

    async def lost_connection(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    async def tracked_rollback():
        rollbacks.append(True)
        await real_rollback()

    monkeypatch.setattr(test_db, "execute", lost_connection)
    monkeypatch.setattr(test_db, "rollback", tracked_rollback)

    with pytest.raises(StorageUnavailableError):
        await SqlDirectory(test_db).get_namespace("bob")
    assert rollbacks == [True]
