"""Image store protocol definition."""

from typing import Protocol

from rentevent.schemas.image import ImagePayload, UploadResult


class ImageStore(Protocol):
    """Interface for the external image store (CDN).

    Lets the catalog switch between the local filesystem and the
    Cloudinary CDN without changing application code.
    """

    backend_name: str

    async def upload(self, payload: ImagePayload, filename: str) -> UploadResult:
        """Upload image bytes.

        Args:
            payload: Validated image payload
            filename: Normalized filename from the file validator

        Returns:
            UploadResult: retrieval URL and the public id used for deletion

        Raises:
            UpstreamUnavailableError: On network or service failure
        """
        ...

    async def delete(self, public_id: str) -> None:
        """Delete an asset. Deleting an unknown public id succeeds silently.

        Raises:
            UpstreamUnavailableError: On network or service failure
        """
        ...
