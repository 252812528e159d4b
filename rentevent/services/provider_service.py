"""Provider directory: the owners of catalog services."""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.core.errors import ConflictError, NotFoundError
from rentevent.core.logging_config import get_logger
from rentevent.db.models import Provider
from rentevent.db.session import unit_of_work
from rentevent.repositories.provider_repository import ProviderRepository
from rentevent.schemas.customer import ProviderCreate
from rentevent.services.catalog_service import ServiceCatalog
from rentevent.storage.protocol import ImageStore

logger = get_logger(__name__)


class ProviderService:

    def __init__(self, session: AsyncSession, image_store: ImageStore):
        self.session = session
        self.image_store = image_store
        self.providers = ProviderRepository(session)

    async def create(self, request: ProviderCreate) -> Provider:
        """
        Raises:
            ConflictError: A provider with this name exists
        """
        async with unit_of_work(self.session):
            if await self.providers.get_by_name(request.name) is not None:
                raise ConflictError("Proveedor ya existe", details={"provider": request.name})
            provider = Provider(
                name=request.name,
                email=request.email,
                phone=request.phone,
                services=[],
            )
            await self.providers.save(provider)

        logger.info("provider_created", provider_id=provider.id, name=provider.name)
        return provider

    async def get_by_name(self, name: str) -> Provider:
        provider = await self.providers.get_by_name(name)
        if provider is None:
            raise NotFoundError("Proveedor no encontrado", details={"provider": name})
        return provider

    async def delete(self, name: str) -> List[str]:
        """Delete a provider together with its services and their images.

        Image-store assets are removed after the commit, best effort.

        Returns:
            Public ids that could not be removed from the image store
        """
        async with unit_of_work(self.session):
            provider = await self.providers.get_by_name(name)
            if provider is None:
                raise NotFoundError("Proveedor no encontrado", details={"provider": name})
            public_ids = [
                image.public_id
                for service in provider.services
                for image in service.images
            ]
            service_count = len(provider.services)
            await self.providers.delete(provider)

        logger.info(
            "provider_deleted",
            name=name,
            service_count=service_count,
            image_count=len(public_ids),
        )
        return await ServiceCatalog(self.session, self.image_store).purge_assets(public_ids)
