# recipe_matcher/services/ingredient_catalog.py
"""
Ingredient catalog. Entries are published once and never edited; recipes and
pantries reference them by name only.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, List, Optional

from recipe_matcher.config.settings import settings
from recipe_matcher.errors import InvalidInputError
from recipe_matcher.models.pantry import IngredientRef
from recipe_matcher.services.store import SupabaseStore, now_iso
from recipe_matcher.services.units import common_units_for_ingredient

logger = logging.getLogger(__name__)


class IngredientCatalogService(SupabaseStore):

    name = "ingredients"

    def __init__(self, client: Any = None, table: Optional[str] = None):
        super().__init__(client)
        self.table = table or settings.ingredients_table

    async def list_ingredients(
        self, category: Optional[str] = None, search: Optional[str] = None, limit: int = 50
    ) -> List[IngredientRef]:
        def _fn(cat, term, n):
            qb = self.client.table(self.table).select("*")
            if cat:
                qb = qb.eq("category", cat)
            if term:
                qb = qb.ilike("name", f"%{term}%")
            return qb.order("name").limit(n).execute()

        rows = await self._query("list_ingredients", _fn, category, (search or "").strip(), limit)
        return [IngredientRef.model_validate(r) for r in rows]

    async def create_ingredient(
        self, name: str, category: str = "other", common_units: Optional[List[str]] = None
    ) -> IngredientRef:
        clean_name = (name or "").strip().lower()
        if not clean_name:
            raise InvalidInputError("Ingredient name is required")
        if common_units is None:
            common_units = [u.symbol for u in common_units_for_ingredient(clean_name)]

        ref = IngredientRef(
            ingredient_id=uuid.uuid4().hex,
            name=clean_name,
            category=category or "other",
            common_units=common_units,
        )
        payload = ref.model_dump()
        payload["created_at"] = now_iso()

        def _fn(p):
            return self.client.table(self.table).insert(p).execute()

        await self._query("create_ingredient", _fn, payload)
        logger.info("Published ingredient %s (%s)", ref.name, ref.category)
        return ref
