"""
Base class for Supabase-backed stores
"""
import uuid
import httpx
import logging
from datetime import datetime, timezone
from typing import Optional
from postgrest.exceptions import APIError
from supabase import Client
from app.errors import ConflictError, UnexpectedError

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_uuid(value: Optional[str]) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class SupabaseStore:
    """Wraps one table; translates storage failures into domain errors"""

    table_name: str = ""
    conflict_message: str = "Record already exists"

    def __init__(self, client: Client):
        self.client = client

    def table(self):
        return self.client.table(self.table_name)

    def execute(self, query, action: str, conflict_message: Optional[str] = None):
        try:
            return query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise ConflictError(conflict_message or self.conflict_message, error=e.message)
            logger.error(f"Supabase error while trying to {action} ({self.table_name}): {e.message}")
            raise UnexpectedError(f"Failed to {action}", error=e.message)
        except httpx.HTTPError as e:
            logger.error(f"Supabase transport error while trying to {action} ({self.table_name}): {e}")
            raise UnexpectedError(f"Failed to {action}", error=str(e))

    @staticmethod
    def first(response) -> Optional[dict]:
        return response.data[0] if response.data else None
