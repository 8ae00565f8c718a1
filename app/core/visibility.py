"""
Field visibility for property documents

Contact details are shown only to the owner or to a tenant holding a
completed unlock. List views never carry contact details for other people's
listings, and normalized fields are never shown to anyone.
"""
from typing import Optional
from app.core.images import primary_image_url
from app.models.user import Viewer

CONTACT_FIELDS = ("contact_person", "contact_phone")
INTERNAL_FIELDS = ("title_norm", "location_norm", "area_norm", "search_vector")

PUBLIC = "public"
OWNER = "owner"
UNLOCKED = "unlocked"


def is_owner(document: dict, viewer: Optional[Viewer]) -> bool:
    return bool(viewer and viewer.is_authenticated and document.get("landlord_id") == viewer.id)


def _strip(document: dict, fields) -> dict:
    return {key: value for key, value in document.items() if key not in fields}


def to_list_item(document: dict, include_contact: bool = False) -> dict:
    """List row: derived primary_image, no image list, no contact fields"""
    hidden = INTERNAL_FIELDS + ("images",)
    if not include_contact:
        hidden += CONTACT_FIELDS

    item = _strip(document, hidden)
    url = primary_image_url(document.get("images"))
    if url:
        item["primary_image"] = url
    return item


def project_detail(document: dict, viewer: Optional[Viewer], unlocked: bool = False) -> tuple[dict, str]:
    """
    Detail projection of a property for ``viewer``.

    Returns the projected document and its visibility tag.
    """
    data = _strip(document, INTERNAL_FIELDS)
    url = primary_image_url(document.get("images"))
    if url:
        data["primary_image"] = url

    if is_owner(document, viewer):
        return data, OWNER
    if unlocked:
        return data, UNLOCKED
    return _strip(data, CONTACT_FIELDS), PUBLIC
