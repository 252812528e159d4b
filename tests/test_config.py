"""
Configuration tests.

Tests the Pydantic settings validation.
"""

import pytest
from pydantic import ValidationError

from rentevent.core.config import Settings


@pytest.mark.unit
def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.IMAGE_STORE_BACKEND in ("local", "cloudinary")
    assert settings.DATABASE_URL.startswith("sqlite+aiosqlite:///")
    assert settings.max_upload_bytes == settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024


@pytest.mark.unit
def test_backend_is_normalized():
    settings = Settings(_env_file=None, IMAGE_STORE_BACKEND=" Local ")

    assert settings.IMAGE_STORE_BACKEND == "local"


@pytest.mark.unit
def test_unknown_backend_rejected():
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, IMAGE_STORE_BACKEND="s3")

    assert "IMAGE_STORE_BACKEND" in str(exc_info.value)


@pytest.mark.unit
def test_cloudinary_requires_credentials():
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, IMAGE_STORE_BACKEND="cloudinary", CLOUDINARY_CLOUD_NAME="demo")

    message = str(exc_info.value)
    assert "CLOUDINARY_API_KEY" in message
    assert "CLOUDINARY_API_SECRET" in message


@pytest.mark.unit
def test_cloudinary_with_credentials():
    settings = Settings(
        _env_file=None,
        IMAGE_STORE_BACKEND="cloudinary",
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        CLOUDINARY_API_URL="https://api.cloudinary.com/v1_1/",
    )

    assert settings.CLOUDINARY_API_URL == "https://api.cloudinary.com/v1_1"


@pytest.mark.unit
def test_invalid_image_pattern_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, ALLOWED_IMAGE_PATTERN="image/(png")


@pytest.mark.unit
@pytest.mark.parametrize("field", ["MAX_UPLOAD_SIZE_MB", "IMAGE_STORE_TIMEOUT", "PASSWORD_HASH_ITERATIONS"])
def test_positive_fields(field):
    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None, **{field: 0})

    assert "positive" in str(exc_info.value).lower()


@pytest.mark.unit
def test_api_url_must_be_http():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, CLOUDINARY_API_URL="ftp://api.cloudinary.com")


@pytest.mark.unit
def test_production_forces_json_logs():
    settings = Settings(_env_file=None, ENVIRONMENT="production", DEBUG=True, LOG_JSON=False)

    assert settings.use_json_logs is True
    assert settings.is_debug_mode is True
