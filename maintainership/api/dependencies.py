"""Route Dependencies — builds the service per request and resolves the caller.

Invariants:
    - One MaintainershipService per request, bound to that request's AsyncSession
    - The caller is whatever namespace the upstream auth layer put in the identity
      header; a missing or unknown namespace is UnauthorizedError
    - The caller lookup runs under the same storage timeout as the service
"""

import asyncio
import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from maintainership.config import Settings, get_settings
from maintainership.core.domain_types import Caller
from maintainership.core.errors import StorageUnavailableError, UnauthorizedError
from maintainership.infrastructure.database import get_db
from maintainership.infrastructure.observability import LoggingEventSink
from maintainership.infrastructure.sql_directory import SqlDirectory
from maintainership.infrastructure.sql_store import SqlMaintainershipStore
from maintainership.services.maintainership_service import MaintainershipService

logger = logging.getLogger(__name__)

_event_sink = LoggingEventSink()


def get_event_sink() -> LoggingEventSink:
    return _event_sink


def get_service(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    events: LoggingEventSink = Depends(get_event_sink),
) -> MaintainershipService:
    directory = SqlDirectory(db)
    return MaintainershipService(
        SqlMaintainershipStore(db),
        packages=directory,
        namespaces=directory,
        access=directory,
        events=events,
        reinvite_after_decline=settings.reinvite_after_decline,
        storage_timeout=settings.storage_timeout_seconds,
        page_size=settings.maintainers_page_size,
        max_page_size=settings.maintainers_max_page_size,
    )


async def get_caller(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Caller:
    """Resolve the authenticated namespace named in the identity header."""
    name = request.headers.get(settings.identity_header)
    if not name:
        raise UnauthorizedError("Authentication required.")
    try:
        async with asyncio.timeout(settings.storage_timeout_seconds):
            namespace = await SqlDirectory(db).get_namespace(name)
    except TimeoutError as e:
        logger.error(
            f"Storage timed out after {settings.storage_timeout_seconds}s "
            "resolving the caller",
            extra={"operation": "resolve the caller"},
        )
        raise StorageUnavailableError("resolve the caller", "timeout") from e
    if namespace is None:
        logger.warning(f"Identity header names unknown namespace {name!r}")
        raise UnauthorizedError("Authentication required.")
    return Caller(namespace)
