"""Image store abstraction for local and CDN storage."""

from functools import lru_cache
from rentevent.core.config import settings
from .protocol import ImageStore
from .local import LocalImageStore
from .cloudinary import CloudinaryImageStore


@lru_cache()
def get_image_store() -> ImageStore:
    """Factory function for the image store.

    Returns the backend selected by IMAGE_STORE_BACKEND.

    Raises:
        ValueError: If unknown image store backend is configured
    """
    if settings.IMAGE_STORE_BACKEND == "local":
        return LocalImageStore(settings.STORAGE_PATH, base_url="/storage")
    elif settings.IMAGE_STORE_BACKEND == "cloudinary":
        return CloudinaryImageStore(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            folder=settings.CLOUDINARY_FOLDER,
            api_url=settings.CLOUDINARY_API_URL,
            timeout=settings.IMAGE_STORE_TIMEOUT,
        )
    else:
        raise ValueError(f"Unknown image store backend: {settings.IMAGE_STORE_BACKEND}")


__all__ = ["get_image_store", "ImageStore", "LocalImageStore", "CloudinaryImageStore"]
