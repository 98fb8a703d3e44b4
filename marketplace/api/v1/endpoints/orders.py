"""Order endpoints scoped by the calling actor."""

from fastapi import APIRouter, Depends, Query, status

from marketplace.api.deps import get_order_services
from marketplace.core.security import get_current_actor, require_role
from marketplace.models import ActorRole, OrderStatus
from marketplace.schemas.auth import CurrentActor
from marketplace.schemas.error import ErrorResponse
from marketplace.schemas.order import (
    AssignDelivererRequest,
    Cart,
    OrderEventResponse,
    OrderResponse,
    TransitionRequest,
)
from marketplace.services.container import OrderServices

router: APIRouter = APIRouter()

ERROR_RESPONSES: dict[int | str, dict] = {
    code: {"model": ErrorResponse} for code in (400, 403, 404, 409, 422, 503)
}


@router.post(
    "/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def checkout(
    payload: Cart,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(require_role(ActorRole.CLIENT)),
) -> OrderResponse:
    """Turn the client's cart into a pending order."""
    order = services.checkout.checkout(actor.actor_id, payload)
    return OrderResponse.model_validate(order)


@router.get("", response_model=list[OrderResponse])
def list_orders(
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(get_current_actor),
) -> list[OrderResponse]:
    """Return the caller's orders, newest first."""
    orders = services.access.list_orders(actor.actor_id, actor.role, status_filter)
    return [OrderResponse.model_validate(order) for order in orders]


@router.get("/{order_id}", response_model=OrderResponse, responses=ERROR_RESPONSES)
def get_order(
    order_id: int,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(get_current_actor),
) -> OrderResponse:
    order = services.access.get_order(order_id, actor.actor_id, actor.role)
    return OrderResponse.model_validate(order)


@router.get("/{order_id}/history", response_model=list[OrderEventResponse], responses=ERROR_RESPONSES)
def get_order_history(
    order_id: int,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(get_current_actor),
) -> list[OrderEventResponse]:
    events = services.access.history(order_id, actor.actor_id, actor.role)
    return [OrderEventResponse.model_validate(event) for event in events]


@router.post("/{order_id}/transition", response_model=OrderResponse, responses=ERROR_RESPONSES)
def transition_order(
    order_id: int,
    payload: TransitionRequest,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(get_current_actor),
) -> OrderResponse:
    """Move the order to the requested status if the caller may do so."""
    order = services.state_machine.transition(order_id, actor.role, actor.actor_id, payload.requested_status)
    return OrderResponse.model_validate(order)


@router.post("/{order_id}/assign-deliverer", response_model=OrderResponse, responses=ERROR_RESPONSES)
def assign_deliverer(
    order_id: int,
    payload: AssignDelivererRequest,
    services: OrderServices = Depends(get_order_services),
    actor: CurrentActor = Depends(require_role(ActorRole.RESTAURANT)),
) -> OrderResponse:
    order = services.assignments.assign(order_id, actor.actor_id, payload.deliverer_id)
    return OrderResponse.model_validate(order)
