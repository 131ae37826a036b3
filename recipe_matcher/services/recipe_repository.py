# recipe_matcher/services/recipe_repository.py
"""
Recipe repository over the single-table, multi-index layout.

Row kinds in the recipe items table (all keyed by pk/sk):

    metadata row    pk=RECIPE#<id>  sk=METADATA
                    gsi1pk=AUTHOR#<userId>   gsi1sk=<createdAt>
                    gsi2pk=CUISINE#<cuisine> gsi2sk=RECIPE#<id>
                    + the recipe fields (ingredients may be absent)
    ingredient row  pk=RECIPE#<id>  sk=ING#<name>
                    gsi3pk=ING#<name>        gsi3sk=RECIPE#<id>
                    + ingredient, quantity, unit

A recipe with N ingredients therefore has N+1 rows. Metadata rows written by
older importers carry no ingredient list; `get_full_recipe` and
`scan_all_recipes` rebuild it from the ingredient rows so callers always see a
complete record.

All reads raise StorageError on failure. A scan or query that fails must not be
mistaken for an empty catalog.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from recipe_matcher.config.settings import settings
from recipe_matcher.models.matching import CandidateFilter
from recipe_matcher.models.recipe import Recipe, RecipeIngredient
from recipe_matcher.services.store import SupabaseStore, now_iso

logger = logging.getLogger(__name__)

RECIPE_PREFIX = "RECIPE#"
INGREDIENT_PREFIX = "ING#"
METADATA_SK = "METADATA"

_INDEX_COLUMNS = {
    "cuisine": "gsi2pk",
    "ingredient": "gsi3pk",
    "author_user_id": "gsi1pk",
}

_INDEX_SORT_COLUMNS = {
    "cuisine": "gsi2sk",
    "ingredient": "gsi3sk",
}


def recipe_pk(recipe_id: str) -> str:
    return f"{RECIPE_PREFIX}{recipe_id}"


def ingredient_key(name: str) -> str:
    return f"{INGREDIENT_PREFIX}{(name or '').strip().lower()}"


def index_key(kind: str, value: str) -> str:
    if kind == "cuisine":
        return f"CUISINE#{value}"
    if kind == "ingredient":
        return ingredient_key(value)
    return f"AUTHOR#{value}"


def _recipe_id_of(row: Dict[str, Any]) -> Optional[str]:
    rid = row.get("recipe_id")
    if rid:
        return str(rid)
    pk = row.get("pk") or ""
    if pk.startswith(RECIPE_PREFIX):
        return pk[len(RECIPE_PREFIX):]
    return None


def _is_ingredient_row(row: Dict[str, Any]) -> bool:
    return str(row.get("sk") or "").startswith(INGREDIENT_PREFIX)


def _ingredient_from_row(row: Dict[str, Any]) -> Optional[RecipeIngredient]:
    name = row.get("ingredient") or row.get("name")
    if not name:
        return None
    return RecipeIngredient(
        name=name,
        quantity=row.get("quantity") or "1",
        unit=row.get("unit") or "piece",
    )


def dedupe(ids: List[str]) -> List[str]:
    """Drop repeated ids, keeping first-seen order."""
    seen = set()
    out = []
    for rid in ids:
        if rid and rid not in seen:
            seen.add(rid)
            out.append(rid)
    return out


class RecipeRepository(SupabaseStore):

    name = "recipes"

    def __init__(self, client: Any = None, table: Optional[str] = None,
                 page_size: Optional[int] = None):
        super().__init__(client)
        self.table = table or settings.recipes_table
        self.page_size = page_size or settings.scan_page_size

    # -----------------------
    # Row <-> model
    # -----------------------
    def _to_recipe(self, row: Dict[str, Any],
                   ingredient_rows: Optional[List[Dict[str, Any]]] = None) -> Optional[Recipe]:
        data = dict(row)
        data["recipe_id"] = _recipe_id_of(row)
        if not data.get("ingredients") and ingredient_rows:
            rebuilt = [_ingredient_from_row(r) for r in sorted(ingredient_rows, key=lambda r: r.get("sk") or "")]
            data["ingredients"] = [i for i in rebuilt if i is not None]
        try:
            return Recipe.model_validate(data)
        except ValidationError as exc:
            logger.warning("Skipping malformed recipe row id=%s: %s", data.get("recipe_id"), exc)
            return None

    # -----------------------
    # Index lookups
    # -----------------------
    async def _query_index(self, kind: str, value: str) -> List[str]:
        column = _INDEX_COLUMNS[kind]
        key = index_key(kind, value)

        def _fn(col, k):
            qb = self.client.table(self.table).select("pk,recipe_id").eq(col, k)
            if kind == "author_user_id":
                # most recent first
                qb = qb.order("gsi1sk", desc=True)
            else:
                qb = qb.order(_INDEX_SORT_COLUMNS[kind])
            return qb.order("pk").execute()

        rows = await self._query(f"query_by_{kind}", _fn, column, key)
        ids = [_recipe_id_of(r) for r in rows]
        logger.debug("Index %s=%s resolved %d row(s)", column, key, len(ids))
        return [i for i in ids if i]

    async def query_by_cuisine(self, cuisine: str) -> List[str]:
        return await self._query_index("cuisine", cuisine)

    async def query_by_ingredient(self, name: str) -> List[str]:
        return await self._query_index("ingredient", name)

    async def query_by_author(self, user_id: str) -> List[str]:
        return await self._query_index("author_user_id", user_id)

    # -----------------------
    # Record reads
    # -----------------------
    async def get_recipe_metadata(self, recipe_id: str) -> Optional[Dict[str, Any]]:
        def _fn(pk):
            return (
                self.client.table(self.table)
                .select("*")
                .eq("pk", pk)
                .eq("sk", METADATA_SK)
                .limit(1)
                .execute()
            )

        rows = await self._query("get_recipe_metadata", _fn, recipe_pk(recipe_id))
        return rows[0] if rows else None

    async def get_ingredient_rows(self, recipe_id: str) -> List[Dict[str, Any]]:
        def _fn(pk):
            return (
                self.client.table(self.table)
                .select("*")
                .eq("pk", pk)
                .like("sk", f"{INGREDIENT_PREFIX}%")
                .order("sk")
                .execute()
            )

        return await self._query("get_ingredient_rows", _fn, recipe_pk(recipe_id))

    async def get_full_recipe(self, recipe_id: str) -> Optional[Recipe]:
        """Metadata record with its ingredient list, rebuilt from ING# rows when absent."""
        meta = await self.get_recipe_metadata(recipe_id)
        if meta is None:
            logger.info("Recipe %s has no metadata record", recipe_id)
            return None
        ingredient_rows = None
        if not meta.get("ingredients"):
            ingredient_rows = await self.get_ingredient_rows(recipe_id)
            logger.debug(
                "Recipe %s metadata lacks ingredients; rebuilt from %d row(s)",
                recipe_id,
                len(ingredient_rows),
            )
        return self._to_recipe(meta, ingredient_rows)

    async def scan_all_recipes(self) -> List[Recipe]:
        """
        Full scan of the recipe table.

        Expensive: reads every row of the catalog. Kept because find-recipes scores
        the whole catalog; large deployments should narrow with `find_candidates`.
        """

        def _fn(start, end):
            return (
                self.client.table(self.table)
                .select("*")
                .order("pk")
                .order("sk")
                .range(start, end)
                .execute()
            )

        rows: List[Dict[str, Any]] = []
        start = 0
        while True:
            page = await self._query("scan_all_recipes", _fn, start, start + self.page_size - 1)
            rows.extend(page)
            if len(page) < self.page_size:
                break
            start += self.page_size

        ingredient_rows: Dict[str, List[Dict[str, Any]]] = {}
        for r in rows:
            if _is_ingredient_row(r):
                rid = _recipe_id_of(r)
                if rid:
                    ingredient_rows.setdefault(rid, []).append(r)

        recipes: List[Recipe] = []
        for r in rows:
            if _is_ingredient_row(r):
                continue
            rid = _recipe_id_of(r)
            if not rid or not r.get("title"):
                continue
            recipe = self._to_recipe(r, ingredient_rows.get(rid))
            if recipe is not None:
                recipes.append(recipe)

        logger.info("Scanned %d row(s), %d structurally valid recipe(s)", len(rows), len(recipes))
        return recipes

    async def find_candidates(self, candidate_filter: CandidateFilter, limit: int) -> List[Recipe]:
        """Resolve one index dimension to full recipe records (deduplicated, index order)."""
        kind, value = candidate_filter.selector()
        ids = dedupe(await self._query_index(kind, value))[:limit]
        fetched = await asyncio.gather(*(self.get_full_recipe(rid) for rid in ids))
        return [r for r in fetched if r is not None]

    # -----------------------
    # Writes (seeding / authoring)
    # -----------------------
    async def put_recipe(self, recipe: Recipe) -> Recipe:
        """Write the metadata row plus one index row per ingredient."""
        now = now_iso()
        pk = recipe_pk(recipe.recipe_id)
        created_at = recipe.created_at or now
        meta = recipe.model_dump(mode="json")
        meta.update({
            "pk": pk,
            "sk": METADATA_SK,
            "entity_type": "recipe",
            "created_at": created_at,
            "updated_at": recipe.updated_at or now,
            "gsi1pk": index_key("author_user_id", recipe.user_id) if recipe.user_id else None,
            "gsi1sk": created_at,
            "gsi2pk": index_key("cuisine", recipe.cuisine) if recipe.cuisine else None,
            "gsi2sk": pk,
        })
        rows = [meta]
        seen_keys = set()
        for ing in recipe.ingredients:
            key = ingredient_key(ing.name)
            # one row per key; postgres rejects a repeated conflict key in one upsert
            if key in seen_keys:
                continue
            seen_keys.add(key)
            rows.append({
                "pk": pk,
                "sk": key,
                "entity_type": "ingredient",
                "recipe_id": recipe.recipe_id,
                "ingredient": ing.name.strip().lower(),
                "quantity": ing.quantity or "1",
                "unit": ing.unit or "piece",
                "gsi3pk": key,
                "gsi3sk": pk,
            })

        def _clear_ingredients(pk_):
            return (
                self.client.table(self.table)
                .delete()
                .eq("pk", pk_)
                .like("sk", f"{INGREDIENT_PREFIX}%")
                .execute()
            )

        def _fn(payload):
            return self.client.table(self.table).upsert(payload, on_conflict="pk,sk").execute()

        # drop index rows for ingredients the recipe no longer lists
        await self._query("put_recipe", _clear_ingredients, pk)
        await self._query("put_recipe", _fn, rows)
        logger.info("Stored recipe %s with %d ingredient row(s)", recipe.recipe_id, len(rows) - 1)
        return recipe.model_copy(update={"created_at": created_at, "updated_at": meta["updated_at"]})
