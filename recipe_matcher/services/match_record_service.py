# recipe_matcher/services/match_record_service.py
"""
Best-effort sink for match records.

Match records are analytics only. Every write returns the normalized result
dict and never raises; callers log failures and move on. Background writes are
tracked so shutdown can wait for them.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence, Set

from pydantic import ValidationError

from recipe_matcher.config.settings import settings
from recipe_matcher.models.matching import MatchRecord
from recipe_matcher.models.recipe import RankedRecipe
from recipe_matcher.services.store import SupabaseStore, make_result, now_iso

logger = logging.getLogger(__name__)


class MatchRecordService(SupabaseStore):

    name = "matches"

    def __init__(self, client: Any = None, concurrency: Optional[int] = None,
                 table: Optional[str] = None):
        super().__init__(client)
        self.table = table or settings.matches_table
        self.concurrency = concurrency or settings.match_record_concurrency
        self._pending: Set[asyncio.Task] = set()

    async def put_match_record(
        self, user_id: str, recipe_id: str, match_percentage: int, timestamp: Optional[str] = None
    ) -> Dict[str, Any]:
        try:
            record = MatchRecord(
                user_id=user_id,
                recipe_id=recipe_id,
                match_percentage=match_percentage,
                created_at=timestamp or now_iso(),
            )
        except ValidationError as exc:
            return make_result(False, error=f"invalid_record: {exc}", diagnostics={"recipe_id": recipe_id})

        def insert_match(payload):
            return self.client.table(self.table).insert(payload).execute()

        return await self._call_db(insert_match, record.model_dump())

    async def record_matches(self, user_id: str, matches: Sequence[RankedRecipe]) -> int:
        """Write one record per match with bounded concurrency; returns how many landed."""
        if not matches:
            return 0
        semaphore = asyncio.Semaphore(self.concurrency)
        timestamp = now_iso()

        async def _one(match: RankedRecipe) -> Dict[str, Any]:
            async with semaphore:
                return await self.put_match_record(
                    user_id, match.recipe_id, match.match_percentage, timestamp
                )

        results = await asyncio.gather(*(_one(m) for m in matches))
        written = 0
        for match, res in zip(matches, results):
            if res.get("ok"):
                written += 1
            else:
                logger.warning(
                    "Failed to save match record user=%s recipe=%s: %s",
                    user_id,
                    match.recipe_id,
                    res.get("error"),
                )
        logger.info("Persisted %d/%d match record(s) for user %s", written, len(matches), user_id)
        return written

    def record_in_background(self, user_id: str, matches: Sequence[RankedRecipe]) -> Optional[asyncio.Task]:
        """Schedule `record_matches` without awaiting it."""
        if not matches:
            return None
        task = asyncio.create_task(self.record_matches(user_id, list(matches)))
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background match-record write failed: %s", exc)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for outstanding background writes."""
        if not self._pending:
            return
        logger.info("Draining %d pending match-record write(s)", len(self._pending))
        await asyncio.gather(*list(self._pending), return_exceptions=True)
