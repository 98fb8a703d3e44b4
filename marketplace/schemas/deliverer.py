"""Deliverer API schemas."""

from pydantic import BaseModel, ConfigDict

from marketplace.models import DelivererAvailability


class DelivererResponse(BaseModel):
    id: int
    name: str
    availability: DelivererAvailability

    model_config = ConfigDict(from_attributes=True)


class AvailabilityRequest(BaseModel):
    """Deliverer going online or offline."""

    availability: DelivererAvailability
