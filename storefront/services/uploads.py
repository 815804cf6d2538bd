"""Product image ingestion: type/size checks, storage under ASSETS_DIR, public URL."""

import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from fastapi import UploadFile

from storefront.core.errors import InvalidInput

if TYPE_CHECKING:
    from storefront.core.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/png", "image/jpeg", "image/jpg"})
ASSETS_URL_PATH = "/assets"
UNSUPPORTED_IMAGE_MESSAGE = "Please upload only jpg, png or jpeg image."


@dataclass(frozen=True)
class StoredImage:
    filename: str
    path: Path
    url: str


def image_extension(content_type: str | None) -> str:
    """Return the file extension for an allowed image MIME type; raise InvalidInput otherwise."""
    mime = (content_type or "").split(";")[0].strip().lower()
    if mime not in ALLOWED_IMAGE_TYPES:
        raise InvalidInput(UNSUPPORTED_IMAGE_MESSAGE)
    return mime.split("/", 1)[1]


def generate_filename(extension: str) -> str:
    """Timestamped, collision-resistant file name, e.g. 1718000000000-1a2b3c4d.png."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{extension}"


def public_url(filename: str, settings: "Settings") -> str:
    return f"{settings.PUBLIC_BASE_URL}{ASSETS_URL_PATH}/{filename}"


def store_image(upload: UploadFile, settings: "Settings") -> StoredImage:
    """
    Validate and persist an uploaded product image.

    The MIME type is checked before the body is read, so a rejected upload
    never touches the disk or the database.
    """
    extension = image_extension(upload.content_type)
    content = upload.file.read()
    if not content:
        raise InvalidInput("Uploaded image is empty.")
    if len(content) > settings.MAX_IMAGE_BYTES:
        raise InvalidInput(
            f"Image size must not exceed {settings.MAX_IMAGE_BYTES // 1024} KB."
        )
    assets_dir = Path(settings.ASSETS_DIR)
    assets_dir.mkdir(parents=True, exist_ok=True)
    filename = generate_filename(extension)
    path = assets_dir / filename
    path.write_bytes(content)
    logger.info("Image stored: %s (%s bytes)", filename, len(content))
    return StoredImage(filename=filename, path=path, url=public_url(filename, settings))


def discard_image(image: StoredImage | None) -> None:
    """Remove a stored image whose database write did not go through."""
    if image is None:
        return
    try:
        image.path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Could not remove orphaned image %s", image.filename)
