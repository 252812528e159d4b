"""
Service Catalog - Business Logic Orchestration

Owns the lifecycle of catalog services and keeps the relational store and
the external image store in step:

- create:  upload the image first, then persist; a failed persist leaves
           the uploaded asset orphaned in the image store (never the reverse)
- update:  either scalar fields only ("blob" sentinel) or a primary-image
           replacement: delete old row, delete old asset, upload, persist
- attach:  upload and append a secondary image

The two stores are not updated atomically. Relational writes happen inside
a unit of work and roll back on error; image-store effects are not undone.
"""
import functools
import time
import uuid
from typing import Any, Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.core.errors import NotFoundError, ServiceError
from rentevent.core.logging_config import get_logger
from rentevent.core.metrics import (
    catalog_operations_total,
    image_store_operations_total,
    image_store_operation_duration_seconds,
)
from rentevent.db.models import Image, Provider, Service
from rentevent.db.session import unit_of_work
from rentevent.repositories.image_repository import ImageRepository
from rentevent.repositories.provider_repository import ProviderRepository
from rentevent.repositories.service_repository import ServiceRepository
from rentevent.schemas.image import ImagePayload, UploadResult
from rentevent.schemas.service import ServiceRequest, ServiceView
from rentevent.services.file_validator import FileValidator
from rentevent.storage.protocol import ImageStore

logger = get_logger(__name__)


SERVICE_CODE_PREFIX = "SERV-"
# Original filename browsers send for an empty Blob: keep the current image
NO_IMAGE_CHANGE = "blob"
PRIMARY_IMAGE_TAG = "SERVICIO"
ATTACHED_IMAGE_TAG = "servicio"


def generate_service_code() -> str:
    """SERV- followed by the first 8 hex characters of a random UUID."""
    return SERVICE_CODE_PREFIX + str(uuid.uuid4())[:8]


def tracked(operation: str) -> Callable:
    """Count each call of a catalog operation by outcome."""
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                result = await func(*args, **kwargs)
            except ServiceError as exc:
                catalog_operations_total.labels(
                    operation=operation, outcome=exc.code.value
                ).inc()
                raise
            catalog_operations_total.labels(
                operation=operation, outcome="success"
            ).inc()
            return result
        return wrapper
    return decorator


class ServiceCatalog:
    """
    Core service for catalog management.

    Responsibilities:
    - Resolve services and providers, raising NotFoundError when absent
    - Validate image payloads before anything touches the image store
    - Sequence image-store calls and relational writes
    - Project services into ServiceView for callers

    Does NOT know about HTTP status codes or request formats.
    """

    def __init__(
        self,
        session: AsyncSession,
        image_store: ImageStore,
        validator: Optional[FileValidator] = None,
    ):
        self.session = session
        self.image_store = image_store
        self.validator = validator or FileValidator()
        self.services = ServiceRepository(session)
        self.providers = ProviderRepository(session)
        self.images = ImageRepository(session)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_service_by_code(self, code: str) -> Optional[ServiceView]:
        """Look up a service by code; None when absent."""
        service = await self.services.get_by_code(code)
        if service is None:
            logger.debug("service_lookup_miss", code=code)
            return None
        return ServiceView.from_service(service)

    async def get_service_by_id(self, service_id: int) -> ServiceView:
        """Look up a service by id, including the events that book it.

        Raises:
            NotFoundError: If no service has this id
        """
        service = await self._require_service_by_id(service_id)
        return ServiceView.from_service(service, include_events=True)

    async def list_services(self) -> List[Service]:
        return await self.services.get_all()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @tracked("create")
    async def create_service(self, request: ServiceRequest, payload: ImagePayload) -> Service:
        """
        Create a service with its primary image.

        Flow:
        1. Generate the service code
        2. Resolve the provider by name
        3. Validate the payload and derive the filename
        4. Upload to the image store
        5-7. Build Image and Service, wire both relationship sides
        8. Persist (the image row is saved by cascade)

        Raises:
            NotFoundError: Provider does not exist (nothing uploaded)
            InvalidMediaError, InvalidNameError: Payload rejected (nothing uploaded)
            UpstreamUnavailableError: Image store failed (nothing persisted)
            ConflictError: Code collision on commit; retrying re-rolls the code
        """
        async with unit_of_work(self.session):
            code = generate_service_code()
            provider = await self._require_provider(request.provider)
            filename = self.validator.validate(payload)

            uploaded = await self._upload(payload, filename)

            image = Image(
                url=uploaded.url,
                filename=filename,
                public_id=uploaded.public_id,
                tag=PRIMARY_IMAGE_TAG,
                position=0,
            )
            service = Service(code=code, events=[])
            self._apply_fields(service, request)

            # back_populates sets image.service and service.provider
            service.images.append(image)
            provider.services.append(service)

            await self.services.save(service)

            logger.info(
                "service_created",
                code=code,
                service_id=service.id,
                provider=provider.name,
                public_id=uploaded.public_id,
            )

        return service

    @tracked("update")
    async def update_service(self, code: str, request: ServiceRequest, payload: ImagePayload) -> Service:
        """
        Update a service's fields and optionally replace its primary image.

        A payload whose original name is "blob" leaves the images untouched.
        Any other payload replaces the primary (first) image; secondary
        images added with attach_image are kept.

        Raises:
            NotFoundError: Service or provider does not exist
            InvalidMediaError, InvalidNameError: Payload rejected; a missing
                original name is treated as a replacement attempt
            UpstreamUnavailableError: Image store failed; relational changes
                roll back but an already deleted asset stays deleted
        """
        async with unit_of_work(self.session):
            service = await self.services.get_by_code(code)
            if service is None:
                raise NotFoundError("Servicio no encontrado", details={"code": code})
            provider = await self._require_provider(request.provider)

            if payload.original_name == NO_IMAGE_CHANGE:
                self._apply_fields(service, request, provider)
                await self.services.save(service)
                logger.info("service_updated", code=code, image_replaced=False)
                return service

            filename = self.validator.validate(payload)

            old_public_id = None
            if service.images:
                primary = service.images[0]
                old_public_id = primary.public_id
                service.images.remove(primary)
                await self.images.delete_by_public_id(old_public_id)
                await self._delete_asset(old_public_id)

            uploaded = await self._upload(payload, filename)

            image = Image(
                url=uploaded.url,
                filename=filename,
                public_id=uploaded.public_id,
                tag=PRIMARY_IMAGE_TAG,
                position=0,
            )
            self._apply_fields(service, request, provider)
            service.images.insert(0, image)

            await self.services.save(service)

            logger.info(
                "service_updated",
                code=code,
                image_replaced=True,
                old_public_id=old_public_id,
                new_public_id=uploaded.public_id,
            )

        return service

    @tracked("attach_image")
    async def attach_image(self, service_id: int, payload: ImagePayload) -> Image:
        """
        Append a secondary image to a service.

        Raises:
            NotFoundError: Service does not exist
            InvalidMediaError, InvalidNameError: Payload rejected
            UpstreamUnavailableError: Image store failed
        """
        async with unit_of_work(self.session):
            service = await self._require_service_by_id(service_id)
            filename = self.validator.validate(payload)
            uploaded = await self._upload(payload, filename)

            position = max((img.position for img in service.images), default=0) + 1
            image = Image(
                url=uploaded.url,
                filename=filename,
                public_id=uploaded.public_id,
                tag=ATTACHED_IMAGE_TAG,
                position=position,
            )
            service.images.append(image)

            await self.services.save(service)

            logger.info(
                "service_image_attached",
                code=service.code,
                service_id=service.id,
                public_id=uploaded.public_id,
                image_count=len(service.images),
            )

        return image

    @tracked("delete")
    async def delete_service(self, code: str) -> None:
        """
        Remove a service and its images.

        Image rows go with the service inside the transaction; the image
        store assets are deleted afterwards on a best-effort basis.

        Raises:
            NotFoundError: Service does not exist
        """
        async with unit_of_work(self.session):
            service = await self.services.get_by_code(code)
            if service is None:
                raise NotFoundError("Servicio no encontrado", details={"code": code})
            public_ids = [image.public_id for image in service.images]
            await self.services.delete(service)

        logger.info("service_deleted", code=code, image_count=len(public_ids))
        await self.purge_assets(public_ids)

    async def purge_assets(self, public_ids: List[str]) -> List[str]:
        """Best-effort deletion of image-store assets.

        Returns:
            The public ids that could not be deleted
        """
        failed = []
        for public_id in public_ids:
            try:
                await self._delete_asset(public_id)
            except ServiceError as exc:
                logger.warning(
                    "image_asset_orphaned",
                    public_id=public_id,
                    error=exc.message,
                )
                failed.append(public_id)
        return failed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _require_service_by_id(self, service_id: int) -> Service:
        service = await self.services.get(service_id)
        if service is None:
            raise NotFoundError("Servicio no encontrado", details={"id": service_id})
        return service

    async def _require_provider(self, name: str) -> Provider:
        provider = await self.providers.get_by_name(name)
        if provider is None:
            raise NotFoundError("Proveedor no encontrado", details={"provider": name})
        return provider

    @staticmethod
    def _apply_fields(service: Service, request: ServiceRequest, provider: Optional[Provider] = None) -> None:
        service.name = request.name
        service.type = request.type
        service.cost = request.cost
        service.state = request.state
        service.description = request.description
        service.customization = request.customization
        if provider is not None:
            # back_populates moves the service between provider collections
            service.provider = provider

    async def _upload(self, payload: ImagePayload, filename: str) -> UploadResult:
        return await self._call_store("upload", self.image_store.upload, payload, filename)

    async def _delete_asset(self, public_id: str) -> None:
        await self._call_store("delete", self.image_store.delete, public_id)

    async def _call_store(self, operation: str, func: Callable, *args: Any) -> Any:
        backend = getattr(self.image_store, "backend_name", type(self.image_store).__name__)
        start_time = time.time()
        status = "success"
        try:
            return await func(*args)
        except Exception:
            status = "failure"
            raise
        finally:
            image_store_operations_total.labels(
                backend=backend, operation=operation, status=status
            ).inc()
            image_store_operation_duration_seconds.labels(
                backend=backend, operation=operation
            ).observe(time.time() - start_time)
