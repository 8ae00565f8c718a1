"""
Property routes
"""
from fastapi import APIRouter, Depends, Query, status
from app.config import Settings, get_settings
from app.core import images as image_ops
from app.core.normalize import normalized_fields
from app.core.search import Page, SearchQuery
from app.core.visibility import project_detail, to_list_item
from app.errors import AuthorizationError, ConflictError
from app.middleware.auth import get_optional_viewer, get_viewer, require_lister, require_tenant
from app.models.property import ImageCreate, PropertyCreate, PropertyUpdate
from app.models.transaction import UnlockGrant
from app.models.user import Viewer
from app.services.favorite_store import FavoriteStore, get_favorite_store
from app.services.payments import PaymentGateway, get_payment_gateway
from app.services.property_store import PropertyStore, get_property_store
from app.services.transaction_store import TransactionStore, get_transaction_store
from app.services.unlock import has_unlocked, unlock_property
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/properties")

KEY_FIELDS = ("title", "location", "area", "price", "property_type")


def get_owned_property(properties: PropertyStore, property_id: str, viewer: Viewer) -> dict:
    """Active property that ``viewer`` owns; 404 if gone, 403 if someone else's"""
    document = properties.get_active(property_id)
    if document["landlord_id"] != viewer.id:
        raise AuthorizationError("You don't have permission to modify this property")
    return document


def _listing(documents: list[dict], total: int, page: Page, include_contact: bool = False) -> dict:
    return {
        "properties": [to_list_item(doc, include_contact=include_contact) for doc in documents],
        "pagination": page.summary(total),
    }


def _page_from(page: Optional[str], limit: Optional[str], sort: Optional[str], settings: Settings) -> Page:
    return Page.from_params(
        {"page": page, "limit": limit, "sort": sort},
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )


@router.get("")
async def list_properties(
    location: Optional[str] = Query(None),
    area: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None),
    amenities: Optional[str] = Query(None, description="Comma separated; all must be present"),
    pets: Optional[str] = Query(None),
    children: Optional[str] = Query(None),
    visitors: Optional[str] = Query(None),
    min_deposit_months: Optional[str] = Query(None),
    max_deposit_months: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None),
    max_price: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Full-text search over title and description"),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, description="e.g. -price,created_at"),
    settings: Settings = Depends(get_settings),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    Search active properties with filters, sorting and pagination.
    Malformed numeric filters are ignored rather than rejected.
    """
    search = SearchQuery.from_params(
        {
            "location": location,
            "area": area,
            "property_type": property_type,
            "amenities": amenities,
            "pets": pets,
            "children": children,
            "visitors": visitors,
            "min_deposit_months": min_deposit_months,
            "max_deposit_months": max_deposit_months,
            "min_price": min_price,
            "max_price": max_price,
            "q": q,
            "page": page,
            "limit": limit,
            "sort": sort,
        },
        default_limit=settings.DEFAULT_PAGE_SIZE,
        max_limit=settings.MAX_PAGE_SIZE,
    )

    documents, total = properties.search(search)

    return {
        "success": True,
        "data": {**_listing(documents, total, search.page), "applied": search.applied()},
    }


@router.get("/mine")
async def list_my_properties(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    viewer: Viewer = Depends(require_lister),
    settings: Settings = Depends(get_settings),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    List the caller's active listings (landlords and agents)
    """
    paging = _page_from(page, limit, sort, settings)
    documents, total = properties.list_for_landlord(viewer.id, paging)

    return {"success": True, "data": _listing(documents, total, paging, include_contact=True)}


@router.get("/favorites")
async def list_favorites(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    viewer: Viewer = Depends(require_tenant),
    settings: Settings = Depends(get_settings),
    properties: PropertyStore = Depends(get_property_store),
    favorites: FavoriteStore = Depends(get_favorite_store),
):
    """
    List the tenant's favorite properties that are still active
    """
    paging = _page_from(page, limit, sort, settings)
    documents, total = properties.list_by_ids(favorites.property_ids(viewer.id), paging)

    return {"success": True, "data": _listing(documents, total, paging)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_property(
    property_data: PropertyCreate,
    viewer: Viewer = Depends(require_lister),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    Create a new property listing (landlords and agents)
    """
    document = property_data.model_dump()
    document["contact_person"] = document["contact_person"] or viewer.user.get("full_name")
    document["contact_phone"] = document["contact_phone"] or viewer.user.get("phone_number")

    norms = normalized_fields(document["title"], document["location"], document["area"])
    key = {**norms, "price": document["price"], "property_type": document["property_type"]}
    if properties.find_duplicate(viewer.id, key):
        raise ConflictError(properties.conflict_message)

    created = properties.create({
        **document,
        **norms,
        "landlord_id": viewer.id,
        "images": [],
        "is_active": True,
        "is_verified": False,
        "views": 0,
        "total_unlocks": 0,
    })
    logger.info(f"Property {created['id']} created by {viewer.id}")

    data, visibility = project_detail(created, viewer)
    return {
        "success": True,
        "message": "Property created",
        "data": {"property": data},
        "visibility": visibility,
    }


@router.get("/{property_id}")
async def get_property(
    property_id: str,
    viewer: Viewer = Depends(get_optional_viewer),
    properties: PropertyStore = Depends(get_property_store),
    transactions: TransactionStore = Depends(get_transaction_store),
):
    """
    Get property details; contact fields only for the owner or after unlock
    """
    document = properties.get_active(property_id)

    unlocked = False
    if document["landlord_id"] != viewer.id:
        unlocked = has_unlocked(transactions, viewer, property_id)
        properties.increment(property_id, "views")
        document = {**document, "views": (document.get("views") or 0) + 1}

    data, visibility = project_detail(document, viewer, unlocked=unlocked)
    return {"success": True, "data": {"property": data}, "visibility": visibility}


@router.put("/{property_id}")
async def update_property(
    property_id: str,
    property_data: PropertyUpdate,
    viewer: Viewer = Depends(require_lister),
    properties: PropertyStore = Depends(get_property_store),
    favorites: FavoriteStore = Depends(get_favorite_store),
):
    """
    Update property (owner only)
    """
    document = get_owned_property(properties, property_id, viewer)

    changes = {
        field: value
        for field, value in property_data.model_dump(exclude_unset=True).items()
        if value is not None or field == "area"
    }

    if "rules" in changes:
        rule_changes = {name: value for name, value in changes["rules"].items() if value is not None}
        changes["rules"] = {**document.get("rules", {}), **rule_changes}

    if any(field in changes for field in KEY_FIELDS):
        merged = {**document, **changes}
        norms = normalized_fields(merged["title"], merged["location"], merged.get("area"))
        key = {**norms, "price": merged["price"], "property_type": merged["property_type"]}
        if properties.find_duplicate(viewer.id, key, exclude_id=property_id):
            raise ConflictError(properties.conflict_message)
        changes.update(norms)

    if not changes:
        updated = document
    else:
        updated = properties.update(property_id, changes)
        if changes.get("is_active") is False:
            favorites.remove_property(property_id)
        logger.info(f"Property {property_id} updated by {viewer.id}")

    data, visibility = project_detail(updated, viewer)
    return {
        "success": True,
        "message": "Property updated",
        "data": {"property": data},
        "visibility": visibility,
    }


@router.delete("/{property_id}")
async def delete_property(
    property_id: str,
    viewer: Viewer = Depends(require_lister),
    properties: PropertyStore = Depends(get_property_store),
    favorites: FavoriteStore = Depends(get_favorite_store),
):
    """
    Delete property (soft delete - owner only)
    """
    get_owned_property(properties, property_id, viewer)

    properties.update(property_id, {"is_active": False})
    favorites.remove_property(property_id)
    logger.info(f"Property {property_id} removed by {viewer.id}")

    return {"success": True, "message": "Property removed"}


@router.post("/{property_id}/images")
async def add_property_image(
    property_id: str,
    image: ImageCreate,
    viewer: Viewer = Depends(require_lister),
    settings: Settings = Depends(get_settings),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    Add an image by URL (owner only)
    """
    document = get_owned_property(properties, property_id, viewer)
    images = image_ops.add_image(
        document["images"], image.url, image.is_primary, max_images=settings.MAX_IMAGES_PER_PROPERTY
    )
    updated = properties.replace_images(property_id, images, document["updated_at"])

    return {"success": True, "message": "Image added", "data": {"images": updated["images"]}}


@router.patch("/{property_id}/images/{image_id}/primary")
async def set_primary_image(
    property_id: str,
    image_id: str,
    viewer: Viewer = Depends(require_lister),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    Make an image the primary one (owner only)
    """
    document = get_owned_property(properties, property_id, viewer)
    images = image_ops.set_primary(document["images"], image_id)
    updated = properties.replace_images(property_id, images, document["updated_at"])

    return {"success": True, "message": "Primary image updated", "data": {"images": updated["images"]}}


@router.delete("/{property_id}/images/{image_id}")
async def remove_property_image(
    property_id: str,
    image_id: str,
    viewer: Viewer = Depends(require_lister),
    properties: PropertyStore = Depends(get_property_store),
):
    """
    Remove an image (owner only)
    """
    document = get_owned_property(properties, property_id, viewer)
    images = image_ops.remove_image(document["images"], image_id)
    updated = properties.replace_images(property_id, images, document["updated_at"])

    return {"success": True, "message": "Image removed", "data": {"images": updated["images"]}}


@router.post("/{property_id}/favorite")
async def add_favorite(
    property_id: str,
    viewer: Viewer = Depends(require_tenant),
    properties: PropertyStore = Depends(get_property_store),
    favorites: FavoriteStore = Depends(get_favorite_store),
):
    """
    Add property to favorites (tenants only)
    """
    properties.get_active(property_id)
    favorites.add(viewer.id, property_id)

    return {"success": True, "message": "Added to favorites"}


@router.delete("/{property_id}/favorite")
async def remove_favorite(
    property_id: str,
    viewer: Viewer = Depends(require_tenant),
    favorites: FavoriteStore = Depends(get_favorite_store),
):
    """
    Remove property from favorites (tenants only)
    """
    favorites.remove(viewer.id, property_id)

    return {"success": True, "message": "Removed from favorites"}


@router.post("/{property_id}/unlock")
async def unlock(
    property_id: str,
    viewer: Viewer = Depends(get_viewer),
    settings: Settings = Depends(get_settings),
    properties: PropertyStore = Depends(get_property_store),
    transactions: TransactionStore = Depends(get_transaction_store),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """
    Pay the unlock fee and reveal the listing's contact details (tenants only)
    """
    outcome = unlock_property(
        property_id,
        viewer,
        properties=properties,
        transactions=transactions,
        gateway=gateway,
        settings=settings,
    )
    data, visibility = project_detail(outcome.property, viewer, unlocked=True)
    transaction = outcome.transaction
    grant = UnlockGrant(
        property_id=property_id,
        transaction_id=transaction["id"],
        unlocked_at=transaction.get("unlocked_at") or transaction.get("completed_at"),
    )

    return {
        "success": True,
        "message": "Property already unlocked" if outcome.already_unlocked else "Property unlocked",
        "data": {
            "unlock": grant.model_dump(),
            "already_unlocked": outcome.already_unlocked,
            "property": data,
        },
        "visibility": visibility,
    }
