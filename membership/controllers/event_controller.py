# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Event endpoints.
Thin HTTP layer: delegates ALL logic to EventRegistry.
"""

from fastapi import APIRouter, Depends

from membership.core.dependencies import (
    AuthenticatedMember,
    PrivilegedMember,
    get_event_registry,
)
from membership.models.domain import Event
from membership.schemas.membership import (
    EventCreateRequest,
    RegistrationRequest,
    SuccessResponse,
)
from membership.services.event_service import EventRegistry

router = APIRouter(tags=["Events"])


@router.post("/events", status_code=201, response_model=Event)
def create_event(
    payload: EventCreateRequest,
    identity: PrivilegedMember,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Create an event. Privileged roles only."""
    return registry.create_event(
        name=payload.name,
        description=payload.description,
        time_slots=payload.time_slots,
        role_options=payload.role_options,
    )


@router.get("/events", response_model=list[Event])
def list_events(
    identity: AuthenticatedMember,
    registry: EventRegistry = Depends(get_event_registry),
):
    return registry.list_events()


@router.get("/events/{event_id}", response_model=Event)
def get_event(
    event_id: int,
    identity: AuthenticatedMember,
    registry: EventRegistry = Depends(get_event_registry),
):
    return registry.get_event(event_id)


@router.post("/events/{event_id}/register", response_model=SuccessResponse)
def register(
    event_id: int,
    payload: RegistrationRequest,
    identity: AuthenticatedMember,
    registry: EventRegistry = Depends(get_event_registry),
):
    """Sign the caller up for one slot and role of an event."""
    registry.register(
        event_id=event_id,
        member_identifier=identity.identifier,
        time_slot=payload.time_slot,
        role=payload.role,
    )
    return SuccessResponse()
