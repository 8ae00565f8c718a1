"""
Tenant favorites in the ``favorites`` join table
"""
from fastapi import Depends
from supabase import Client
from app.database import get_supabase_admin
from app.services.supabase_store import SupabaseStore


class FavoriteStore(SupabaseStore):
    table_name = "favorites"

    def add(self, tenant_id: str, property_id: str) -> None:
        self.execute(
            self.table().upsert(
                {"tenant_id": tenant_id, "property_id": property_id},
                on_conflict="tenant_id,property_id",
                ignore_duplicates=True,
            ),
            "add favorite",
        )

    def remove(self, tenant_id: str, property_id: str) -> None:
        self.execute(
            self.table().delete().eq("tenant_id", tenant_id).eq("property_id", property_id),
            "remove favorite",
        )

    def remove_property(self, property_id: str) -> None:
        """Drop a property from every tenant's favorites"""
        self.execute(self.table().delete().eq("property_id", property_id), "clear favorites")

    def property_ids(self, tenant_id: str) -> list[str]:
        response = self.execute(
            self.table().select("property_id").eq("tenant_id", tenant_id).order("created_at", desc=True),
            "fetch favorites",
        )
        return [row["property_id"] for row in response.data or []]


def get_favorite_store(client: Client = Depends(get_supabase_admin)) -> FavoriteStore:
    return FavoriteStore(client)
