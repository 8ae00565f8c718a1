"""In-memory stand-ins for the Supabase-backed stores.

They subclass the real stores so domain helpers (``get_active``, conflict
messages) stay the same, and they enforce the same unique constraints the
database does.
"""

import copy
import uuid
from datetime import datetime, timedelta, timezone
from itertools import count
from typing import Optional

from app.core.normalize import duplicate_key
from app.core.search import Page, SearchQuery
from app.errors import ConflictError, UnexpectedError
from app.services.favorite_store import FavoriteStore
from app.services.property_store import PropertyStore
from app.services.transaction_store import TransactionStore
from app.services.user_store import UserStore

_clock = count()


def _timestamp() -> str:
    base = datetime(2024, 12, 9, 12, 0, tzinfo=timezone.utc)
    return (base + timedelta(seconds=next(_clock))).isoformat()


def _column(document: dict, column: str):
    if column.startswith("rules_"):
        return document["rules"].get(column[len("rules_"):])
    return document.get(column)


def _ordered(documents: list[dict], page: Page) -> list[dict]:
    ordered = list(documents)
    for column, descending in reversed(page.sort):
        ordered.sort(key=lambda doc: _column(doc, column), reverse=descending)
    return ordered[page.offset:page.offset + page.limit]


class MemoryPropertyStore(PropertyStore):
    def __init__(self):
        super().__init__(client=None)
        self.rows: dict[str, dict] = {}
        self.increments: list[tuple[str, str]] = []

    def _check_unique(self, candidate: dict) -> None:
        key = duplicate_key(candidate)
        for other in self.rows.values():
            if other["id"] != candidate["id"] and duplicate_key(other) == key:
                raise ConflictError(self.conflict_message, error="duplicate key value violates unique constraint")

    def get(self, property_id: str) -> Optional[dict]:
        row = self.rows.get(property_id)
        return copy.deepcopy(row) if row else None

    def find_duplicate(self, landlord_id, key, exclude_id=None):
        wanted = (landlord_id, key["title_norm"], key["location_norm"], key["area_norm"],
                  float(key["price"]), key["property_type"])
        for row in self.rows.values():
            if row["id"] != exclude_id and duplicate_key(row) == wanted:
                return {"id": row["id"]}
        return None

    def create(self, document: dict) -> dict:
        now = _timestamp()
        row = {
            "id": str(uuid.uuid4()),
            "verification_date": None,
            "created_at": now,
            "updated_at": now,
            **copy.deepcopy(document),
        }
        self._check_unique(row)
        self.rows[row["id"]] = row
        return copy.deepcopy(row)

    def update(self, property_id: str, changes: dict) -> dict:
        if property_id not in self.rows:
            raise UnexpectedError("Failed to update property")
        row = {**self.rows[property_id], **copy.deepcopy(changes), "updated_at": _timestamp()}
        self._check_unique(row)
        self.rows[property_id] = row
        return copy.deepcopy(row)

    def replace_images(self, property_id: str, images: list[dict], version: str) -> dict:
        row = self.rows.get(property_id)
        if row is None or row["updated_at"] != version:
            raise ConflictError(self.stale_message)
        return self.update(property_id, {"images": images})

    def increment(self, property_id: str, column: str) -> None:
        if property_id in self.rows:
            self.rows[property_id][column] = (self.rows[property_id].get(column) or 0) + 1
            self.increments.append((property_id, column))

    def _active_rows(self):
        return [copy.deepcopy(row) for row in self.rows.values() if row["is_active"]]

    def search(self, search: SearchQuery):
        def matches(doc):
            rules = doc["rules"]
            if search.location and search.location.lower() not in doc["location"].lower():
                return False
            if search.area and search.area.lower() not in (doc.get("area") or "").lower():
                return False
            if search.property_type and doc["property_type"] != search.property_type:
                return False
            if not set(search.amenities) <= set(doc["amenities"]):
                return False
            if search.pets is not None and rules["pets"] != search.pets:
                return False
            if search.children is not None and rules["children"] != search.children:
                return False
            if search.visitors and rules["visitors"] != search.visitors:
                return False
            for value, bounds in ((rules["deposit_months"], search.deposit_months), (doc["price"], search.price)):
                if bounds and bounds.min is not None and value < bounds.min:
                    return False
                if bounds and bounds.max is not None and value > bounds.max:
                    return False
            if search.q:
                text = f"{doc['title']} {doc['description']}".lower()
                if not all(word in text for word in search.q.lower().split()):
                    return False
            return True

        found = [doc for doc in self._active_rows() if matches(doc)]
        return _ordered(found, search.page), len(found)

    def list_for_landlord(self, landlord_id, page):
        found = [doc for doc in self._active_rows() if doc["landlord_id"] == landlord_id]
        return _ordered(found, page), len(found)

    def list_by_ids(self, property_ids, page):
        found = [doc for doc in self._active_rows() if doc["id"] in property_ids]
        return _ordered(found, page), len(found)

    def summaries(self, property_ids=None, landlord_id=None):
        rows = list(self.rows.values())
        if landlord_id is not None:
            rows = [row for row in rows if row["landlord_id"] == landlord_id and row["is_active"]]
        if property_ids is not None:
            rows = [row for row in rows if row["id"] in property_ids]
        return [
            {key: row[key] for key in ("id", "title", "location", "price", "property_type")}
            for row in rows
        ]


class MemoryUserStore(UserStore):
    def __init__(self):
        super().__init__(client=None)
        self.rows: dict[str, dict] = {}

    def _find(self, column, value):
        for row in self.rows.values():
            if row.get(column) == value:
                return dict(row)
        return None

    def get(self, user_id):
        row = self.rows.get(user_id)
        return dict(row) if row else None

    def create(self, data):
        for row in self.rows.values():
            if row["phone_number"] == data["phone_number"] or (data.get("email") and row.get("email") == data["email"]):
                raise ConflictError(self.conflict_message)
        now = _timestamp()
        row = {
            "id": str(uuid.uuid4()),
            "email": None,
            "id_number": None,
            "is_verified": False,
            "is_active": True,
            "last_login": None,
            "created_at": now,
            "updated_at": now,
            **data,
        }
        self.rows[row["id"]] = row
        return dict(row)

    def update(self, user_id, changes):
        self.rows[user_id] = {**self.rows[user_id], **changes, "updated_at": _timestamp()}
        return dict(self.rows[user_id])


class MemoryFavoriteStore(FavoriteStore):
    def __init__(self):
        super().__init__(client=None)
        self.pairs: list[tuple[str, str]] = []

    def add(self, tenant_id, property_id):
        if (tenant_id, property_id) not in self.pairs:
            self.pairs.append((tenant_id, property_id))

    def remove(self, tenant_id, property_id):
        self.pairs = [pair for pair in self.pairs if pair != (tenant_id, property_id)]

    def remove_property(self, property_id):
        self.pairs = [pair for pair in self.pairs if pair[1] != property_id]

    def property_ids(self, tenant_id):
        return [property_id for tenant, property_id in reversed(self.pairs) if tenant == tenant_id]


class MemoryTransactionStore(TransactionStore):
    def __init__(self):
        super().__init__(client=None)
        self.rows: dict[str, dict] = {}

    def create(self, data):
        now = _timestamp()
        row = {
            "id": str(uuid.uuid4()),
            "mpesa_reference": None,
            "mpesa_receipt": None,
            "unlocked_at": None,
            "failure_reason": None,
            "completed_at": None,
            "created_at": now,
            "updated_at": now,
            **data,
        }
        self.rows[row["id"]] = row
        return dict(row)

    def update(self, transaction_id, changes):
        row = self.rows.get(transaction_id)
        if not row or row["status"] == "completed":
            raise UnexpectedError("Failed to update transaction")
        candidate = {**row, **changes, "updated_at": _timestamp()}
        if candidate["status"] == "completed" and any(
            other["id"] != transaction_id
            and other["status"] == "completed"
            and (other["tenant_id"], other["property_id"]) == (candidate["tenant_id"], candidate["property_id"])
            for other in self.rows.values()
        ):
            raise ConflictError(self.conflict_message)
        self.rows[transaction_id] = candidate
        return dict(candidate)

    def find_completed(self, tenant_id, property_id):
        for row in self.rows.values():
            if (row["tenant_id"], row["property_id"], row["status"]) == (tenant_id, property_id, "completed"):
                return dict(row)
        return None

    def completed_for_tenant(self, tenant_id):
        return [dict(row) for row in self.rows.values() if row["tenant_id"] == tenant_id and row["status"] == "completed"]
