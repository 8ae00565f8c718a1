"""
User accounts in the ``users`` table
"""
from fastapi import Depends
from typing import Optional
from supabase import Client
from app.database import get_supabase_admin
from app.errors import UnexpectedError
from app.services.supabase_store import SupabaseStore, is_uuid, utcnow


class UserStore(SupabaseStore):
    table_name = "users"
    conflict_message = "User with this phone number or email already exists"

    def _find(self, column: str, value: str) -> Optional[dict]:
        response = self.execute(
            self.table().select("*").eq(column, value).limit(1),
            f"fetch user by {column}",
        )
        return self.first(response)

    def get(self, user_id: str) -> Optional[dict]:
        if not is_uuid(user_id):
            return None
        return self._find("id", user_id)

    def get_by_phone(self, phone_number: str) -> Optional[dict]:
        return self._find("phone_number", phone_number)

    def get_by_email(self, email: str) -> Optional[dict]:
        return self._find("email", email)

    def create(self, data: dict) -> dict:
        response = self.execute(self.table().insert(data), "create user")
        user = self.first(response)
        if not user:
            raise UnexpectedError("Failed to create user")
        return user

    def update(self, user_id: str, changes: dict) -> dict:
        response = self.execute(
            self.table().update({**changes, "updated_at": utcnow()}).eq("id", user_id),
            "update user",
        )
        user = self.first(response)
        if not user:
            raise UnexpectedError("Failed to update user")
        return user


def get_user_store(client: Client = Depends(get_supabase_admin)) -> UserStore:
    return UserStore(client)
