"""
Property persistence and search over the ``properties`` table
"""
import re
from fastapi import Depends
from typing import Optional
from supabase import Client
from app.core.search import Page, SearchQuery
from app.database import get_supabase_admin
from app.errors import ConflictError, NotFoundError, UnexpectedError
from app.services.supabase_store import SupabaseStore, is_uuid, utcnow

COUNTERS = ("views", "total_unlocks")

RULE_COLUMNS = {
    "pets": "rules_pets",
    "children": "rules_children",
    "visitors": "rules_visitors",
    "deposit_months": "rules_deposit_months",
}


def _substring_regex(value: str) -> str:
    # imatch (~*) on an escaped term is a literal, case-insensitive substring
    # test; ilike would treat "*" in user input as a wildcard
    return re.escape(value)


def from_row(row: dict) -> dict:
    """Table row -> property document (rules nested, images as a list)"""
    document = {key: value for key, value in row.items() if key not in RULE_COLUMNS.values()}
    document["rules"] = {
        name: row.get(column) for name, column in RULE_COLUMNS.items() if column in row
    }
    document["images"] = row.get("images") or []
    document["nearby"] = row.get("nearby") or []
    document["amenities"] = row.get("amenities") or []
    document.pop("search_vector", None)
    return document


def to_row(document: dict) -> dict:
    """Property document (or partial update) -> table columns"""
    row = {key: value for key, value in document.items() if key != "rules"}
    for name, value in (document.get("rules") or {}).items():
        if name in RULE_COLUMNS:
            row[RULE_COLUMNS[name]] = value
    return row


class PropertyStore(SupabaseStore):
    table_name = "properties"
    conflict_message = "You already have a listing with the same title, location, area, price and type"
    stale_message = "Property was changed by another request, please retry"

    def get(self, property_id: str) -> Optional[dict]:
        """Fetch a property whatever its active state"""
        if not is_uuid(property_id):
            return None
        response = self.execute(
            self.table().select("*").eq("id", property_id).limit(1),
            "fetch property",
        )
        row = self.first(response)
        return from_row(row) if row else None

    def get_active(self, property_id: str) -> dict:
        """Fetch a live property; missing or soft-deleted ones are not found"""
        document = self.get(property_id)
        if not document or not document.get("is_active"):
            raise NotFoundError("Property not found")
        return document

    def find_duplicate(self, landlord_id: str, key: dict, exclude_id: Optional[str] = None) -> Optional[dict]:
        """
        Find another property of ``landlord_id`` (active or not) with the same
        normalized title/location/area, price and type.
        """
        query = (
            self.table().select("id")
            .eq("landlord_id", landlord_id)
            .eq("title_norm", key["title_norm"])
            .eq("location_norm", key["location_norm"])
            .eq("area_norm", key["area_norm"])
            .eq("price", key["price"])
            .eq("property_type", key["property_type"])
        )
        if exclude_id:
            query = query.neq("id", exclude_id)
        response = self.execute(query.limit(1), "check for duplicate listing")
        return self.first(response)

    def create(self, document: dict) -> dict:
        response = self.execute(self.table().insert(to_row(document)), "create property")
        row = self.first(response)
        if not row:
            raise UnexpectedError("Failed to create property")
        return from_row(row)

    def update(self, property_id: str, changes: dict) -> dict:
        row = {**to_row(changes), "updated_at": utcnow()}
        response = self.execute(self.table().update(row).eq("id", property_id), "update property")
        updated = self.first(response)
        if not updated:
            raise UnexpectedError("Failed to update property")
        return from_row(updated)

    def replace_images(self, property_id: str, images: list[dict], version: str) -> dict:
        """
        Write a new image list, but only if the row still carries the
        ``updated_at`` it was read with. A concurrent write in between turns
        into a ConflictError instead of a lost image.
        """
        response = self.execute(
            self.table()
            .update({"images": images, "updated_at": utcnow()})
            .eq("id", property_id)
            .eq("updated_at", version),
            "update property images",
        )
        updated = self.first(response)
        if not updated:
            raise ConflictError(self.stale_message)
        return from_row(updated)

    def increment(self, property_id: str, column: str) -> None:
        """Add one to a counter column inside the database"""
        if column not in COUNTERS:
            raise ValueError(f"Unknown counter column: {column}")
        self.execute(
            self.client.rpc("increment_property_counter", {"pid": property_id, "counter": column}),
            f"increment {column}",
        )

    def _page(self, query, page: Page) -> tuple[list[dict], int]:
        for column, descending in page.sort:
            query = query.order(column, desc=descending)
        query = query.range(page.offset, page.offset + page.limit - 1)
        response = self.execute(query, "list properties")
        total = response.count if response.count is not None else len(response.data)
        return [from_row(row) for row in response.data], total

    def _active(self):
        return self.table().select("*", count="exact").eq("is_active", "true")

    def search(self, search: SearchQuery) -> tuple[list[dict], int]:
        query = self._active()

        if search.location:
            query = query.filter("location", "imatch", _substring_regex(search.location))
        if search.area:
            query = query.filter("area", "imatch", _substring_regex(search.area))
        if search.property_type:
            query = query.eq("property_type", search.property_type)
        if search.amenities:
            query = query.contains("amenities", search.amenities)
        if search.pets is not None:
            query = query.eq("rules_pets", str(search.pets).lower())
        if search.children is not None:
            query = query.eq("rules_children", str(search.children).lower())
        if search.visitors:
            query = query.eq("rules_visitors", search.visitors)

        for column, bounds in (("rules_deposit_months", search.deposit_months), ("price", search.price)):
            if bounds is None:
                continue
            if bounds.min is not None:
                query = query.gte(column, bounds.min)
            if bounds.max is not None:
                query = query.lte(column, bounds.max)

        if search.q:
            # wfts: websearch_to_tsquery syntax
            query = query.filter("search_vector", "wfts(english)", search.q)

        return self._page(query, search.page)

    def list_for_landlord(self, landlord_id: str, page: Page) -> tuple[list[dict], int]:
        return self._page(self._active().eq("landlord_id", landlord_id), page)

    def list_by_ids(self, property_ids: list[str], page: Page) -> tuple[list[dict], int]:
        if not property_ids:
            return [], 0
        return self._page(self._active().in_("id", property_ids), page)

    def summaries(self, property_ids: Optional[list[str]] = None, landlord_id: Optional[str] = None) -> list[dict]:
        """Light id/title/location/price/type rows for profile pages"""
        query = self.table().select("id, title, location, price, property_type")
        if landlord_id is not None:
            query = query.eq("landlord_id", landlord_id).eq("is_active", "true")
        if property_ids is not None:
            if not property_ids:
                return []
            query = query.in_("id", property_ids)
        response = self.execute(query.order("created_at", desc=True), "list property summaries")
        return response.data or []


def get_property_store(client: Client = Depends(get_supabase_admin)) -> PropertyStore:
    return PropertyStore(client)
