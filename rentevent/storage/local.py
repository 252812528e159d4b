"""Local filesystem image store."""

import uuid
import aiofiles
from pathlib import Path, PurePosixPath

from rentevent.core.errors import UpstreamUnavailableError
from rentevent.core.logging_config import get_logger
from rentevent.schemas.image import ImagePayload, UploadResult


logger = get_logger(__name__)


class LocalImageStore:
    """Filesystem implementation of the image store.

    Files live flat under base_path as "<public_id><ext>" and are served by
    FastAPI StaticFiles mounted at base_url. Suitable for development,
    tests and single-server deployments.
    """

    backend_name = "local"

    def __init__(self, base_path: str, base_url: str = "/storage"):
        """Initialize local image store.

        Args:
            base_path: Root directory for image files
            base_url: URL prefix the directory is served under
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    @staticmethod
    def _new_public_id(filename: str) -> str:
        stem = PurePosixPath(filename).stem
        return f"{stem}_{uuid.uuid4().hex[:12]}"

    def _is_safe(self, public_id: str) -> bool:
        return bool(public_id) and "/" not in public_id and "\\" not in public_id and ".." not in public_id

    async def upload(self, payload: ImagePayload, filename: str) -> UploadResult:
        """Write the payload to disk.

        Args:
            payload: Image payload
            filename: Normalized filename (extension is kept)

        Returns:
            UploadResult: URL under base_url and the generated public id
        """
        public_id = self._new_public_id(filename)
        suffix = PurePosixPath(filename).suffix
        full_path = self.base_path / f"{public_id}{suffix}"

        logger.debug(
            "local_image_store_upload_started",
            filename=filename,
            public_id=public_id,
            full_path=str(full_path),
        )

        try:
            async with aiofiles.open(full_path, 'wb') as f:
                await f.write(payload.content)
        except OSError as exc:
            logger.error(
                "local_image_store_upload_failed",
                filename=filename,
                public_id=public_id,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise UpstreamUnavailableError(
                "Image store rejected the upload",
                details={"filename": filename}
            ) from exc

        logger.info(
            "local_image_store_upload_success",
            filename=filename,
            public_id=public_id,
            bytes_written=payload.size,
        )

        return UploadResult(url=f"{self.base_url}/{public_id}{suffix}", public_id=public_id)

    async def delete(self, public_id: str) -> None:
        """Delete the file holding public_id; unknown ids are a no-op."""
        if not self._is_safe(public_id):
            logger.warning("local_image_store_delete_rejected", public_id=public_id)
            return

        matches = list(self.base_path.glob(f"{public_id}.*")) + list(self.base_path.glob(public_id))
        if not matches:
            logger.warning("local_image_store_delete_not_found", public_id=public_id)
            return

        try:
            for path in matches:
                path.unlink(missing_ok=True)
        except OSError as exc:
            logger.error(
                "local_image_store_delete_failed",
                public_id=public_id,
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            raise UpstreamUnavailableError(
                "Image store could not delete the asset",
                details={"public_id": public_id}
            ) from exc

        logger.info("local_image_store_delete_success", public_id=public_id)

    def get_local_path(self, url: str) -> Path:
        """Filesystem path behind a URL returned by upload()."""
        return self.base_path / PurePosixPath(url).name
