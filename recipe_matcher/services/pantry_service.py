# recipe_matcher/services/pantry_service.py
"""
Per-user pantry store.

Rows in the pantry table are keyed by (user_id, ingredient_id). Names are stored
lower-cased so they line up with the ingredient index. Quantities and units are
kept for display; ingredient matching only ever reads names.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional

from pydantic import ValidationError

from recipe_matcher.config.settings import settings
from recipe_matcher.errors import InvalidInputError
from recipe_matcher.models.pantry import PantryItem
from recipe_matcher.services import units
from recipe_matcher.services.store import SupabaseStore, now_iso

logger = logging.getLogger(__name__)

_PANTRY_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "recipe-matcher/pantry")


def pantry_ingredient_id(name: str) -> str:
    """Stable id for a pantry entry added by name, so re-adding overwrites."""
    return uuid.uuid5(_PANTRY_NAMESPACE, name.strip().lower()).hex


class PantryService(SupabaseStore):

    name = "pantry"

    def __init__(self, client: Any = None, table: Optional[str] = None):
        super().__init__(client)
        self.table = table or settings.pantry_table

    async def get_pantry_items(self, user_id: str) -> List[PantryItem]:
        def _fn(uid):
            return (
                self.client.table(self.table)
                .select("*")
                .eq("user_id", uid)
                .order("added_at")
                .execute()
            )

        rows = await self._query("get_pantry_items", _fn, user_id)
        items: List[PantryItem] = []
        for row in rows:
            try:
                items.append(PantryItem.model_validate(row))
            except ValidationError as exc:
                logger.warning("Skipping malformed pantry row for user %s: %s", user_id, exc)
        logger.debug("Loaded %d pantry item(s) for user %s", len(items), user_id)
        return items

    async def get_pantry_names(self, user_id: str) -> List[str]:
        return [item.name for item in await self.get_pantry_items(user_id)]

    async def add_pantry_item(
        self,
        user_id: str,
        name: str,
        quantity: float = 1,
        unit: str = "piece",
        expiry_date: Optional[str] = None,
        ingredient_id: Optional[str] = None,
    ) -> PantryItem:
        """
        Insert or overwrite a pantry entry.

        Raises:
            InvalidInputError: blank name, non-positive quantity or unknown unit.
        """
        clean_name = (name or "").strip().lower()
        if not clean_name:
            raise InvalidInputError("Pantry item name is required")
        if quantity is None or quantity <= 0:
            raise InvalidInputError("Pantry item quantity must be positive")
        unit_type = units.get_unit_type(unit)
        if unit_type is None:
            raise InvalidInputError(f"Unknown unit: {unit!r}")
        if not units.validate_unit_for_ingredient(clean_name, unit):
            logger.info("Unit %r is unusual for pantry item %r", unit, clean_name)

        item = PantryItem(
            user_id=user_id,
            ingredient_id=ingredient_id or pantry_ingredient_id(clean_name),
            name=clean_name,
            quantity=quantity,
            unit=unit.strip().lower(),
            unit_type=unit_type,
            expiry_date=expiry_date,
            added_at=now_iso(),
        )

        def _fn(payload):
            return (
                self.client.table(self.table)
                .upsert(payload, on_conflict="user_id,ingredient_id")
                .execute()
            )

        await self._query("add_pantry_item", _fn, item.model_dump())
        logger.info("Stored pantry item %s for user %s", item.name, user_id)
        return item

    async def remove_pantry_item(self, user_id: str, ingredient_id: str) -> bool:
        def _fn(uid, iid):
            return (
                self.client.table(self.table)
                .delete()
                .eq("user_id", uid)
                .eq("ingredient_id", iid)
                .execute()
            )

        rows = await self._query("remove_pantry_item", _fn, user_id, ingredient_id)
        return bool(rows)
