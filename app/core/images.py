"""
Property image list operations

The functions here never mutate their input; each returns a new list that
already satisfies the exactly-one-primary invariant.
"""
import uuid
from typing import Optional
from urllib.parse import urlparse
from app.errors import ConflictError, NotFoundError, ValidationError


def is_valid_http_url(value) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def ensure_single_primary(images: list[dict]) -> list[dict]:
    """
    Keep exactly one primary image while the list is non-empty.

    The first image flagged primary wins; with none flagged the first image
    is promoted.
    """
    healed = [dict(img) for img in images]
    if not healed:
        return healed

    primary_index = next((i for i, img in enumerate(healed) if img.get("is_primary")), 0)
    for i, img in enumerate(healed):
        img["is_primary"] = i == primary_index
    return healed


def primary_image_url(images: Optional[list[dict]]) -> Optional[str]:
    """URL of the primary image, else of the first image, else None"""
    if not images:
        return None
    for img in images:
        if img.get("is_primary"):
            return img.get("url")
    return images[0].get("url")


def add_image(images: list[dict], url: str, is_primary: bool = False, max_images: int = 10) -> list[dict]:
    if not is_valid_http_url(url):
        raise ValidationError("Valid image url is required (must start with http:// or https://)")

    if len(images) >= max_images:
        raise ConflictError(f"Maximum {max_images} images allowed per property")

    clean_url = url.strip()
    if any(str(img.get("url", "")).strip().lower() == clean_url.lower() for img in images):
        raise ConflictError("Image already added")

    updated = [dict(img) for img in images]
    if is_primary:
        for img in updated:
            img["is_primary"] = False

    # A first image is primary whatever was requested
    updated.append({
        "id": uuid.uuid4().hex,
        "url": clean_url,
        "is_primary": is_primary or not updated,
    })
    return ensure_single_primary(updated)


def set_primary(images: list[dict], image_id: str) -> list[dict]:
    if not any(img.get("id") == image_id for img in images):
        raise NotFoundError("Image not found")

    updated = [{**img, "is_primary": img.get("id") == image_id} for img in images]
    return ensure_single_primary(updated)


def remove_image(images: list[dict], image_id: str) -> list[dict]:
    if not any(img.get("id") == image_id for img in images):
        raise NotFoundError("Image not found")

    return ensure_single_primary([dict(img) for img in images if img.get("id") != image_id])
