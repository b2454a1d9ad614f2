"""
Supabase Client
===============
Thin wrapper that provides a configured Supabase client for the
entry store and the auth helper.

Uses the service_role key (not the anon key) because the backend
writes journal entries on behalf of authenticated users. Every query
the backend issues is scoped to the caller's user_id explicitly.
"""

from functools import lru_cache

from supabase import Client, create_client

from ai_journal.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_service_key)
