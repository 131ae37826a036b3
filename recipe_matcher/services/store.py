# recipe_matcher/services/store.py
"""
Shared plumbing for services that talk to Supabase.

- Blocking supabase SDK calls run in a worker thread so the event loop is
  never blocked.
- Responses are parsed defensively (object with .data OR dict with "data").
- Two calling conventions:
    * `_call_db` returns the normalized result dict
      {"ok": bool, "data"|"error": ..., "diagnostics": {...}} and never raises.
      Used for best-effort writes.
    * `_query` returns the data or raises StorageError. Used for reads whose
      failure must reach the caller.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from recipe_matcher.config.supabase import supabase_client
from recipe_matcher.errors import StorageError, SupabaseClientNotInitialized

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_supabase_response(resp: Any) -> Dict[str, Any]:
    """
    Turn Supabase SDK responses (object with .data or dict) into a predictable dict.
    Returns {ok, data, status_code, raw}
    """
    if resp is None:
        return {"ok": False, "data": None, "status_code": None, "raw": None}

    if hasattr(resp, "data"):
        data = getattr(resp, "data")
        status_code = getattr(resp, "status_code", None)
        ok = data is not None and not (isinstance(status_code, int) and status_code >= 400)
        return {"ok": ok, "data": data, "status_code": status_code, "raw": resp}

    if isinstance(resp, dict):
        data = resp.get("data", resp.get("result", resp.get("records", None)))
        status_code = resp.get(
            "status_code", resp.get("statusCode", resp.get("status", None))
        )
        ok = data is not None and not (isinstance(status_code, int) and status_code >= 400)
        return {"ok": ok, "data": data, "status_code": status_code, "raw": resp}

    return {"ok": False, "data": None, "status_code": None, "raw": str(resp)}


def make_result(
    ok: bool,
    data: Any = None,
    error: Optional[str] = None,
    diagnostics: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    res: Dict[str, Any] = {"ok": ok}
    if ok:
        res["data"] = data
    else:
        res["error"] = error or "unknown_error"
    res["diagnostics"] = diagnostics or {}
    return res


def as_rows(data: Any) -> List[Dict[str, Any]]:
    if not data:
        return []
    if isinstance(data, dict):
        return [data]
    return [r for r in data if isinstance(r, dict)]


class SupabaseStore:
    """Base class holding an injected supabase client."""

    name = "store"

    def __init__(self, client: Any = None):
        if client is None:
            client = getattr(supabase_client, "client", None)
        self.client = client
        if self.client is None:
            logger.warning(
                "%s: Supabase client not available. DB operations will fail.",
                type(self).__name__,
            )

    async def _run_blocking(self, fn: Callable, *args, **kwargs) -> Any:
        return await asyncio.to_thread(fn, *args, **kwargs)

    async def _call_db(self, fn: Callable, *args, **kwargs) -> Dict[str, Any]:
        """
        Run blocking DB function in a thread and normalize response.
        `fn` should be a callable that invokes supabase SDK and returns its raw response.
        """
        op = getattr(fn, "__name__", str(fn))
        if self.client is None:
            return make_result(False, error="no_supabase_client", diagnostics={"fn": op})
        try:
            raw = await self._run_blocking(fn, *args, **kwargs)
            parsed = parse_supabase_response(raw)
            diagnostics = {
                "called": op,
                "status_code": parsed.get("status_code"),
            }
            return make_result(
                parsed.get("ok", False),
                data=parsed.get("data"),
                diagnostics=diagnostics,
                error=None if parsed.get("ok") else "db_no_data",
            )
        except Exception as exc:
            logger.exception("DB call %s raised exception: %s", op, exc)
            return make_result(False, error=str(exc), diagnostics={"fn": op})

    async def _query(self, operation: str, fn: Callable, *args, **kwargs) -> List[Dict[str, Any]]:
        """Run a read and return its rows; any failure raises StorageError."""
        if self.client is None:
            raise SupabaseClientNotInitialized(
                "Supabase client is not initialized; set SUPABASE_URL and "
                "SUPABASE_SERVICE_ROLE_KEY",
                operation=operation,
            )
        try:
            raw = await self._run_blocking(fn, *args, **kwargs)
        except Exception as exc:
            logger.exception("%s.%s failed: %s", self.name, operation, exc)
            raise StorageError(f"{operation} failed", operation=operation, cause=exc) from exc

        parsed = parse_supabase_response(raw)
        status_code = parsed.get("status_code")
        if isinstance(status_code, int) and status_code >= 400:
            logger.error("%s.%s returned HTTP %s", self.name, operation, status_code)
            raise StorageError(f"{operation} failed with status {status_code}", operation=operation)
        return as_rows(parsed.get("data"))
