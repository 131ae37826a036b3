# recipe_matcher/config/supabase.py
"""
Process-wide Supabase handle.

Stores receive a client through their constructor; `supabase_client.client`
is only their default. The handle also answers the two questions the HTTP
layer asks of Supabase directly: is the recipe table reachable, and which
user does a bearer token belong to.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from supabase import Client, create_client

from recipe_matcher.config.settings import settings

logger = logging.getLogger(__name__)


def _host(url: Optional[str]) -> Optional[str]:
    return (urlparse(url).netloc or None) if url else None


class SupabaseClient:
    """Holds the supabase-py client built from settings, or None when unconfigured."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self.url = url if url is not None else settings.supabase_url
        self._key = key if key is not None else settings.supabase_service_role_key
        self.client: Optional[Client] = self._connect()

    def _connect(self) -> Optional[Client]:
        if not self.url or not self._key:
            logger.debug("Supabase not configured; recipe and pantry stores will fail closed")
            return None
        if urlparse(self.url).scheme not in ("http", "https"):
            logger.error("SUPABASE_URL must be an http(s) URL, got host=%r", _host(self.url))
            return None
        try:
            client = create_client(self.url, self._key)
        except Exception as exc:
            logger.exception("Failed to create Supabase client for host=%s: %s", _host(self.url), exc)
            return None
        logger.info("Supabase client ready for host=%s", _host(self.url))
        return client

    def diagnostics(self) -> Dict[str, Any]:
        """Structural info for startup logs; never includes the key."""
        return {
            "host": _host(self.url),
            "client_present": self.client is not None,
            "recipes_table": settings.recipes_table,
            "pantry_table": settings.pantry_table,
            "matches_table": settings.matches_table,
        }

    def health_check(self) -> bool:
        """One-row probe of the recipe items table (blocking)."""
        if self.client is None:
            return False
        try:
            res = self.client.table(settings.recipes_table).select("pk").limit(1).execute()
        except Exception as exc:
            logger.warning("Recipe table %s unreachable: %s", settings.recipes_table, exc)
            return False
        status_code = getattr(res, "status_code", None)
        if isinstance(status_code, int) and status_code >= 400:
            logger.warning("Recipe table probe returned HTTP %s", status_code)
            return False
        return True

    def resolve_user_id(self, access_token: str) -> Optional[str]:
        """Bearer token -> Supabase auth user id; None when missing or rejected (blocking)."""
        if self.client is None or not access_token:
            return None
        try:
            res = self.client.auth.get_user(access_token)
        except Exception as exc:
            logger.info("Bearer token rejected by Supabase auth: %s", exc)
            return None
        user = getattr(res, "user", None)
        return getattr(user, "id", None)


supabase_client = SupabaseClient()
