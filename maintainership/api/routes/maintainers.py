"""Maintainers Routes — invite, remove, accept, decline and list package maintainers.

Invariants:
    - Paths follow the registry layout /v1/packages/package/{namespace}@{host}/{name}/...
    - The namespace stops at the first @; any later @ belongs to the host
    - Handlers only translate HTTP <-> service calls; failures propagate as
      MaintainershipError to the global handler
"""

from fastapi import APIRouter, Depends, Query, status
from starlette.convertors import Convertor, register_url_convertor

from maintainership.api.dependencies import get_caller, get_service
from maintainership.core.domain_types import Caller, PackageRef
from maintainership.schemas.maintainer import (
    ConfirmationResponse, MaintainerItem, MaintainerListResponse,
)
from maintainership.services.maintainership_service import MaintainershipService


class NamespaceConvertor(Convertor):
    """Namespace segment of a package path: everything before the first @."""
    regex = "[^@/]+"

    def convert(self, value: str) -> str:
        return value

    def to_string(self, value: str) -> str:
        return value


register_url_convertor("namespace", NamespaceConvertor())

router = APIRouter(
    prefix="/api/v1/packages/package/{namespace:namespace}@{host}/{name}",
    tags=["maintainers"],
)


@router.get("/maintainers", response_model=MaintainerListResponse)
async def list_maintainers(
    namespace: str,
    host: str,
    name: str,
    cursor: str | None = Query(None, max_length=512),
    limit: int | None = Query(None, ge=1),
    service: MaintainershipService = Depends(get_service),
):
    """Active (accepted) maintainers in acceptance order."""
    page = await service.list_active_maintainers(
        PackageRef(namespace, host, name), cursor, limit,
    )
    return MaintainerListResponse(
        objects=[MaintainerItem.from_entry(e) for e in page.items],
        next=page.next_cursor,
    )


@router.post(
    "/maintainers/{invitee}", response_model=ConfirmationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_maintainer(
    namespace: str,
    host: str,
    name: str,
    invitee: str,
    reinvite: bool = Query(False),
    caller: Caller = Depends(get_caller),
    service: MaintainershipService = Depends(get_service),
):
    """Invite a namespace to maintain the package."""
    confirmation = await service.invite(
        PackageRef(namespace, host, name), caller, invitee, reinvite=reinvite,
    )
    return ConfirmationResponse.from_confirmation(confirmation)


@router.delete("/maintainers/{invitee}", response_model=ConfirmationResponse)
async def remove_maintainer(
    namespace: str,
    host: str,
    name: str,
    invitee: str,
    caller: Caller = Depends(get_caller),
    service: MaintainershipService = Depends(get_service),
):
    """Remove a maintainer, or withdraw an invitation still pending."""
    confirmation = await service.remove(
        PackageRef(namespace, host, name), caller, invitee,
    )
    return ConfirmationResponse.from_confirmation(confirmation)


@router.post("/invitation/{member}", response_model=ConfirmationResponse)
async def accept_invitation(
    namespace: str,
    host: str,
    name: str,
    member: str,
    caller: Caller = Depends(get_caller),
    service: MaintainershipService = Depends(get_service),
):
    confirmation = await service.accept(
        PackageRef(namespace, host, name), caller, member,
    )
    return ConfirmationResponse.from_confirmation(confirmation)


@router.delete("/invitation/{member}", response_model=ConfirmationResponse)
async def decline_invitation(
    namespace: str,
    host: str,
    name: str,
    member: str,
    caller: Caller = Depends(get_caller),
    service: MaintainershipService = Depends(get_service),
):
    confirmation = await service.decline(
        PackageRef(namespace, host, name), caller, member,
    )
    return ConfirmationResponse.from_confirmation(confirmation)
