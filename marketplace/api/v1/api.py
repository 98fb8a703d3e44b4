"""API v1 router composition."""

from fastapi import APIRouter

from marketplace.api.v1.endpoints import deliverers, orders

api_router: APIRouter = APIRouter()
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(deliverers.router, prefix="/deliverers", tags=["deliverers"])
