"""Application configuration using Pydantic Settings."""

import re
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings
from typing import Optional
import os


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Service Identity
    SERVICE_NAME: str = "rentevent-catalog"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, production

    # Logging Configuration
    LOG_LEVEL: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    LOG_JSON: bool = True    # JSON logs (prod) vs pretty console (dev)
    DEBUG: bool = False      # Enable debug mode features

    # Database
    DATABASE_URL: str = f"sqlite+aiosqlite:///{os.path.join(os.getcwd(), 'rentevent.db')}"

    # Image Store Configuration
    IMAGE_STORE_BACKEND: str = "local"  # Options: "local" or "cloudinary"
    STORAGE_PATH: str = os.path.join(os.getcwd(), "storage")
    IMAGE_STORE_TIMEOUT: int = 30  # seconds, per CDN call

    # Cloudinary (external image CDN)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "rentevent/servicios"
    CLOUDINARY_API_URL: str = "https://api.cloudinary.com/v1_1"

    # Upload Constraints
    MAX_UPLOAD_SIZE_MB: int = 5
    ALLOWED_IMAGE_PATTERN: str = r"image/(jpeg|jpg|png|gif|bmp|webp)"

    # Credentials
    PASSWORD_HASH_ITERATIONS: int = 260000

    @field_validator('IMAGE_STORE_BACKEND')
    @classmethod
    def validate_image_store_backend(cls, v: str) -> str:
        """Only the local and cloudinary backends exist."""
        v = v.strip().lower()
        if v not in ("local", "cloudinary"):
            raise ValueError(
                f"IMAGE_STORE_BACKEND must be 'local' or 'cloudinary', got '{v}'"
            )
        return v

    @field_validator('ALLOWED_IMAGE_PATTERN')
    @classmethod
    def validate_image_pattern(cls, v: str) -> str:
        """Ensure the media-type pattern compiles."""
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"ALLOWED_IMAGE_PATTERN is not a valid regex: {e}")
        return v

    @field_validator('MAX_UPLOAD_SIZE_MB', 'IMAGE_STORE_TIMEOUT', 'PASSWORD_HASH_ITERATIONS')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    @field_validator('CLOUDINARY_API_URL')
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate CDN API URL format."""
        if not re.match(r'^https?://.+', v):
            raise ValueError(
                f"CLOUDINARY_API_URL must start with http:// or https://, got '{v}'"
            )
        return v.rstrip('/')

    @model_validator(mode='after')
    def validate_cloudinary_configuration(self):
        """Ensure the cloudinary backend has credentials."""
        if self.IMAGE_STORE_BACKEND == "cloudinary":
            missing = [
                name for name in (
                    "CLOUDINARY_CLOUD_NAME",
                    "CLOUDINARY_API_KEY",
                    "CLOUDINARY_API_SECRET",
                )
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    f"{', '.join(missing)} must be set when IMAGE_STORE_BACKEND=cloudinary"
                )
        return self

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    @property
    def is_debug_mode(self) -> bool:
        """Check if application is in debug mode."""
        return self.DEBUG or self.LOG_LEVEL.upper() == "DEBUG"

    @property
    def use_json_logs(self) -> bool:
        """Determine if JSON logging should be used.

        In production, always use JSON logs.
        In development, allow override via LOG_JSON setting.
        """
        if self.ENVIRONMENT == "production":
            return True
        if self.DEBUG:
            return self.LOG_JSON
        return True

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
