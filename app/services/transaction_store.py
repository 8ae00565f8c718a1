"""
Unlock transactions in the ``transactions`` table
"""
from fastapi import Depends
from typing import Optional
from supabase import Client
from app.database import get_supabase_admin
from app.errors import UnexpectedError
from app.services.supabase_store import SupabaseStore, utcnow


class TransactionStore(SupabaseStore):
    table_name = "transactions"
    conflict_message = "Property already unlocked"

    def create(self, data: dict) -> dict:
        response = self.execute(self.table().insert(data), "create transaction")
        transaction = self.first(response)
        if not transaction:
            raise UnexpectedError("Failed to create transaction")
        return transaction

    def update(self, transaction_id: str, changes: dict) -> dict:
        """
        Update a transaction that has not completed yet.

        Completed transactions are immutable, so the update is guarded on the
        current status.
        """
        response = self.execute(
            self.table().update({**changes, "updated_at": utcnow()})
            .eq("id", transaction_id)
            .neq("status", "completed"),
            "update transaction",
        )
        transaction = self.first(response)
        if not transaction:
            raise UnexpectedError("Failed to update transaction")
        return transaction

    def find_completed(self, tenant_id: str, property_id: str) -> Optional[dict]:
        response = self.execute(
            self.table().select("*")
            .eq("tenant_id", tenant_id)
            .eq("property_id", property_id)
            .eq("status", "completed")
            .limit(1),
            "check unlock",
        )
        return self.first(response)

    def completed_for_tenant(self, tenant_id: str) -> list[dict]:
        response = self.execute(
            self.table().select("*")
            .eq("tenant_id", tenant_id)
            .eq("status", "completed")
            .order("completed_at", desc=True),
            "list unlocks",
        )
        return response.data or []


def get_transaction_store(client: Client = Depends(get_supabase_admin)) -> TransactionStore:
    return TransactionStore(client)
