"""Deliverer pool endpoints."""

from fastapi import APIRouter, Depends

from marketplace.api.deps import get_order_services
from marketplace.core.security import require_role
from marketplace.models import ActorRole
from marketplace.schemas.auth import CurrentActor
from marketplace.schemas.deliverer import AvailabilityRequest, DelivererResponse
from marketplace.services.container import OrderServices

router: APIRouter = APIRouter()


@router.get("/available", response_model=list[DelivererResponse])
def list_available_deliverers(
    services: OrderServices = Depends(get_order_services),
    _actor: CurrentActor = Depends(require_role(ActorRole.RESTAURANT)),
) -> list[DelivererResponse]:
    """Deliverers a restaurant can assign right now."""
    return [DelivererResponse.model_validate(item) for item in services.assignments.list_available()]


@router.put("/me/availability", response_model=DelivererResponse)
def set_my_availability(
    payload: AvailabilityRequest,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(require_role(ActorRole.DELIVERER)),
) -> DelivererResponse:
    deliverer = services.assignments.set_availability(actor.actor_id, payload.availability)
    return DelivererResponse.model_validate(deliverer)
