"""Provider API endpoints."""

from fastapi import APIRouter, Depends, Response, status

from rentevent.api.dependencies import get_provider_service
from rentevent.db.models import Provider
from rentevent.schemas.customer import ProviderCreate, ProviderView
from rentevent.services.provider_service import ProviderService


router = APIRouter(prefix="/api/v1/providers", tags=["providers"])


def _view(provider: Provider) -> ProviderView:
    return ProviderView(
        id=provider.id,
        name=provider.name,
        email=provider.email,
        phone=provider.phone,
        service_codes=[service.code for service in provider.services],
    )


@router.post("", response_model=ProviderView, status_code=status.HTTP_201_CREATED)
async def create_provider(request: ProviderCreate, providers: ProviderService = Depends(get_provider_service)):
    return _view(await providers.create(request))


@router.get("/{name}", response_model=ProviderView)
async def get_provider(name: str, providers: ProviderService = Depends(get_provider_service)):
    return _view(await providers.get_by_name(name))


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_provider(name: str, providers: ProviderService = Depends(get_provider_service)):
    """Delete a provider with all of its services and images."""
    await providers.delete(name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
