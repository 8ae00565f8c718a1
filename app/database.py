"""
Supabase database client setup
"""
from fastapi import Depends
from supabase import create_client, Client
from supabase.client import ClientOptions
from app.config import Settings, get_settings
from functools import lru_cache
import logging

logger = logging.getLogger(__name__)


@lru_cache()
def _admin_client(url: str, service_key: str) -> Client:
    options = ClientOptions(auto_refresh_token=False, persist_session=False)
    client = create_client(url, service_key, options)
    logger.info(f"Supabase client initialized for {url}")
    return client


def get_supabase_admin(settings: Settings = Depends(get_settings)) -> Client:
    """Get Supabase admin client (service role key)"""
    return _admin_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
