"""Service test fixtures — async DB, seeded registry, service and FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB sessions
    - The registry fixture seeds one package acme@github/widget owned by the group "acme"
      (member: alice) plus loose user namespaces bob, carol, dave and the group "ops"
      (member: erin)
    - Clock ticks one second per call so acceptance order is deterministic

Design Decisions:
    - SQLite in-memory: fast, no external dependency, exercises the same partial unique
      index the PostgreSQL migration creates
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from maintainership.api.dependencies import get_event_sink
from maintainership.core.domain_types import (
    Caller, Namespace, NamespaceId, NamespaceKind,
)
from maintainership.db.base import Base
from maintainership.infrastructure.database import get_db
from maintainership.infrastructure.sql_directory import SqlDirectory
from maintainership.infrastructure.sql_store import SqlMaintainershipStore
from maintainership.main import app
from maintainership.models.namespace import (
    Namespace as NamespaceModel, NamespaceMember,
)
from maintainership.models.package import Package as PackageModel
from maintainership.services.maintainership_service import MaintainershipService


@dataclass
class RecordingEventSink:
    """EventSink that keeps (action, actor, subject, package) tuples."""
    events: list[tuple[str, str, str, str]] = field(default_factory=list)

    def emit(self, action, actor, subject, package) -> None:
        self.events.append((action, actor, subject, str(package)))

    @property
    def actions(self) -> list[str]:
        return [e[0] for e in self.events]


class TickingClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@dataclass
class Registry:
    callers: dict[str, Caller]
    package_id: object

    def __getitem__(self, name: str) -> Caller:
        return self.callers[name]


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
async def registry(test_db) -> Registry:
    """Seed namespaces, memberships and the acme@github/widget package."""
    rows = {
        "acme": NamespaceModel(name="acme", kind="group"),
        "ops": NamespaceModel(name="ops", kind="group"),
    }
    for name in ("alice", "bob", "carol", "dave", "erin"):
        rows[name] = NamespaceModel(name=name, kind="user")
    test_db.add_all(rows.values())
    await test_db.flush()

    test_db.add_all([
        NamespaceMember(namespace_id=rows["acme"].id, member_id=rows["alice"].id),
        NamespaceMember(namespace_id=rows["ops"].id, member_id=rows["erin"].id),
    ])
    package = PackageModel(
        namespace_id=rows["acme"].id, host="github", name="widget",
    )
    test_db.add(package)
    await test_db.commit()

    callers = {
        name: Caller(Namespace(
            NamespaceId(row.id), row.name, NamespaceKind(row.kind),
        ))
        for name, row in rows.items()
    }
    return Registry(callers=callers, package_id=package.id)


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def make_service(test_db, events, clock):
    """Build a MaintainershipService on the test session; kwargs override policy."""
    def _make(**kwargs) -> MaintainershipService:
        directory = SqlDirectory(test_db)
        kwargs.setdefault("clock", clock)
        return MaintainershipService(
            SqlMaintainershipStore(test_db),
            packages=directory,
            namespaces=directory,
            access=directory,
            events=events,
            **kwargs,
        )
    return _make


@pytest.fixture
def service(make_service) -> MaintainershipService:
    return make_service()


@pytest.fixture
async def client(test_engine, test_session_factory, events):
    """FastAPI test client with DB dependency and event sink overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_sink] = lambda: events

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
