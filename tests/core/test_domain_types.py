"""Domain Types — identity wrappers, enums and derived record state."""

from datetime import datetime
from uuid import uuid4

from maintainership.core.domain_types import (
    Caller, MaintainershipId, MaintainershipRecord, MaintainershipState,
    Namespace, NamespaceId, NamespaceKind, Operation, PackageId,
)


def test_identity_types_wrap_uuid():
    uid = uuid4()
    assert NamespaceId(uid) == uid
    assert PackageId(uid) == uid
    assert MaintainershipId(uid) == uid


def test_state_enum_has_four_states():
    assert {s.value for s in MaintainershipState} == {
        "pending", "accepted", "declined", "removed",
    }


def test_operations_serialize_to_string():
    assert Operation.INVITE.value == "invite"
    assert Operation("remove") is Operation.REMOVE


def test_record_state_is_derived():
    now = datetime(2026, 1, 1)
    record = MaintainershipRecord(
        id=MaintainershipId(uuid4()),
        namespace_id=NamespaceId(uuid4()),
        package_id=PackageId(uuid4()),
        active=True,
        accepted=True,
        invited_by_id=NamespaceId(uuid4()),
        created=now,
        modified=now,
        accepted_at=now,
    )
    assert record.state is MaintainershipState.ACCEPTED


def test_caller_name():
    caller = Caller(Namespace(NamespaceId(uuid4()), "bob", NamespaceKind.USER))
    assert caller.name == "bob"
