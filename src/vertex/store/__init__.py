"""Persistence backends and the factory that picks one at startup."""

from vertex.config import Settings
from vertex.store.base import TipStore
from vertex.store.sql import SqlStore
from vertex.store.supabase import SupabaseStore

__all__ = ["SqlStore", "SupabaseStore", "TipStore", "build_store"]


def build_store(settings: Settings) -> TipStore:
    """Supabase when credentials are configured, otherwise SQL on ``database_url``."""
    if settings.use_supabase:
        return SupabaseStore(
            settings.supabase_url,
            settings.supabase_key,
            timeout=settings.store_timeout_seconds,
        )
    return SqlStore(settings.database_url, echo=settings.debug)
