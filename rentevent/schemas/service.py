"""Request and response models for catalog services."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rentevent.db.models import Service, ServiceState
from rentevent.schemas.image import ImageView


class ServiceRequest(BaseModel):
    """Fields a caller supplies on create and update.

    `provider` is the provider's unique name, not its id.
    """
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(..., min_length=1, max_length=80)
    cost: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    state: ServiceState
    description: Optional[str] = None
    customization: Optional[str] = None
    provider: str = Field(..., min_length=1)

    @field_validator('state', mode='before')
    @classmethod
    def parse_state(cls, v):
        """Accept the symbolic name (ACTIVE) as well as the member itself."""
        if isinstance(v, str):
            try:
                return ServiceState[v.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"state must be one of {[s.name for s in ServiceState]}, got '{v}'"
                )
        return v


class ProviderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class EventSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    event_date: Optional[date] = None
    location: Optional[str] = None


class ServiceView(BaseModel):
    """Projection returned by the catalog lookups."""
    id: int
    code: str
    name: str
    type: str
    cost: Decimal
    state: str
    description: Optional[str] = None
    customization: Optional[str] = None
    images: List[ImageView] = []
    provider: ProviderSummary
    events: Optional[List[EventSummary]] = None

    @classmethod
    def from_service(cls, service: Service, include_events: bool = False) -> "ServiceView":
        return cls(
            id=service.id,
            code=service.code,
            name=service.name,
            type=service.type,
            cost=service.cost,
            state=service.state.name,
            description=service.description,
            customization=service.customization,
            images=[ImageView.model_validate(image) for image in service.images],
            provider=ProviderSummary.model_validate(service.provider),
            events=(
                [EventSummary.model_validate(event) for event in service.events]
                if include_events else None
            ),
        )
