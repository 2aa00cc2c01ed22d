import logging
import os
import uuid
from typing import Dict, Optional
from config import settings
from core.exceptions import FormValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
}


def validate_image(content_type: Optional[str], size: int) -> Dict[str, str]:
    errors = {}
    if content_type not in ALLOWED_IMAGE_TYPES:
        errors["image"] = "Doar fișierele JPG și PNG sunt acceptate"
    elif size > settings.MAX_IMAGE_SIZE:
        errors["image"] = "Imaginea nu poate depăși 10MB"
    elif size < settings.MIN_IMAGE_SIZE:
        errors["image"] = "Imaginea este prea mică (minim 1KB)"
    return errors


def save_image(data: bytes, content_type: Optional[str], owner_id: str) -> str:
    """Store an uploaded image and return the URL it is served from."""
    errors = validate_image(content_type, len(data))
    if errors:
        raise FormValidationError(errors, detail=errors["image"])

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    filename = f"{owner_id}_{uuid.uuid4().hex}{ALLOWED_IMAGE_TYPES[content_type]}"
    path = os.path.join(settings.UPLOAD_DIR, filename)
    with open(path, "wb") as f:
        f.write(data)

    logger.info(f"Stored image {filename} ({len(data)} bytes) for {owner_id}")
    return f"{settings.MEDIA_URL.rstrip('/')}/{filename}"
