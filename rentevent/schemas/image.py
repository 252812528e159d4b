"""Image payloads and image projections."""

from dataclasses import dataclass
from typing import Optional
from pydantic import BaseModel, ConfigDict
from fastapi import UploadFile


@dataclass(frozen=True)
class ImagePayload:
    """Binary upload with its declared media type and original filename."""
    content: bytes
    content_type: Optional[str]
    original_name: Optional[str]

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    async def from_upload(cls, file: UploadFile) -> "ImagePayload":
        """Read an UploadFile fully into memory."""
        content = await file.read()
        await file.seek(0)
        return cls(
            content=content,
            content_type=file.content_type,
            original_name=file.filename,
        )


@dataclass(frozen=True)
class UploadResult:
    """What the image store hands back after an upload."""
    url: str
    public_id: str


class ImageView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    filename: str
    public_id: str
    tag: str
