# recipe_matcher/services/matching_service.py
"""
Matching use cases: calculate-match and find-matching-recipes.

Both HTTP routes are thin adapters over this service. Storage handles are
injected so tests can pass fakes.

find_matching_recipes pipeline:
  1. resolve the pantry (request body, else the caller's stored pantry)
  2. full scan of the recipe catalog
  3. score every recipe that has ingredients (thread fan-out for large catalogs)
  4. drop recipes failing dietary / cooking-time / difficulty filters or
     scoring below MIN_MATCH_PERCENTAGE
  5. stable sort by score, descending
  6. truncate to limit
  7. schedule match-record writes in the background
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from recipe_matcher.config.settings import settings
from recipe_matcher.errors import InvalidInputError
from recipe_matcher.models.matching import (
    CandidateFilter,
    FindRecipesResponse,
    MatchFilters,
    MatchResult,
)
from recipe_matcher.models.recipe import RankedRecipe, Recipe
from recipe_matcher.services import ingredient_matcher
from recipe_matcher.services.match_record_service import MatchRecordService
from recipe_matcher.services.pantry_service import PantryService
from recipe_matcher.services.recipe_repository import RecipeRepository

logger = logging.getLogger(__name__)


def _score_chunk(pantry: List[str], recipes: List[Recipe]) -> List[MatchResult]:
    return [ingredient_matcher.score(pantry, r.ingredient_names()) for r in recipes]


def passes_filters(recipe: Recipe, filters: MatchFilters) -> bool:
    if filters.dietary_restrictions:
        if not any(tag in filters.dietary_restrictions for tag in recipe.dietary_tags):
            return False
    if filters.max_cooking_time and recipe.cooking_time is not None:
        if recipe.cooking_time > filters.max_cooking_time:
            return False
    if filters.difficulty_level and recipe.difficulty_level != filters.difficulty_level:
        return False
    return True


class MatchingService:

    def __init__(
        self,
        recipes: Optional[RecipeRepository] = None,
        pantry: Optional[PantryService] = None,
        recorder: Optional[MatchRecordService] = None,
        scoring_chunk_size: Optional[int] = None,
        parallel_threshold: Optional[int] = None,
    ):
        self.recipes = recipes or RecipeRepository()
        self.pantry = pantry or PantryService()
        self.recorder = recorder or MatchRecordService()
        self.scoring_chunk_size = scoring_chunk_size or settings.scoring_chunk_size
        self.parallel_threshold = parallel_threshold or settings.parallel_scoring_threshold

    # -----------------------
    # calculate-match
    # -----------------------
    def calculate_match(
        self,
        user_ingredients: Optional[Sequence[str]],
        recipe_ingredients: Optional[Sequence[str]],
    ) -> MatchResult:
        if user_ingredients is None or recipe_ingredients is None:
            raise InvalidInputError("User ingredients and recipe ingredients are required")
        return ingredient_matcher.score(list(user_ingredients), list(recipe_ingredients))

    # -----------------------
    # find-recipes
    # -----------------------
    async def resolve_pantry(self, pantry: Optional[Sequence[str]], user_id: Optional[str]) -> List[str]:
        if pantry:
            return list(pantry)
        if not user_id:
            return []
        names = await self.pantry.get_pantry_names(user_id)
        logger.debug("Resolved %d pantry item(s) from store for user %s", len(names), user_id)
        return names

    async def score_all(self, pantry: List[str], recipes: List[Recipe]) -> List[MatchResult]:
        """Score recipes in order; large batches are split across worker threads."""
        if len(recipes) < self.parallel_threshold:
            return _score_chunk(pantry, recipes)
        size = self.scoring_chunk_size
        chunks = [recipes[i:i + size] for i in range(0, len(recipes), size)]
        logger.debug("Scoring %d recipe(s) in %d chunk(s)", len(recipes), len(chunks))
        scored = await asyncio.gather(
            *(asyncio.to_thread(_score_chunk, pantry, chunk) for chunk in chunks)
        )
        return [result for chunk in scored for result in chunk]

    def rank(
        self,
        scored: List[Tuple[Recipe, MatchResult]],
        filters: MatchFilters,
    ) -> List[RankedRecipe]:
        kept: List[RankedRecipe] = []
        for recipe, result in scored:
            if not passes_filters(recipe, filters):
                continue
            if result.match_percentage < ingredient_matcher.MIN_MATCH_PERCENTAGE:
                continue
            kept.append(
                RankedRecipe(
                    **recipe.model_dump(),
                    match_percentage=result.match_percentage,
                    available_ingredients=result.available_ingredients,
                    missing_ingredients=result.missing_ingredients,
                )
            )
        # sorted() is stable; ties keep scan order
        return sorted(kept, key=lambda m: m.match_percentage, reverse=True)

    async def find_matching_recipes(
        self,
        pantry: Optional[Sequence[str]],
        user_id: Optional[str],
        filters: Optional[MatchFilters] = None,
        limit: Optional[int] = None,
    ) -> FindRecipesResponse:
        filters = filters or MatchFilters()
        limit = limit or settings.default_match_limit

        pantry_used = await self.resolve_pantry(pantry, user_id)
        catalog = await self.recipes.scan_all_recipes()
        candidates = [r for r in catalog if r.ingredients]

        results = await self.score_all(pantry_used, candidates)
        ranked = self.rank(list(zip(candidates, results)), filters)
        top = ranked[:limit]

        if user_id and top:
            self.recorder.record_in_background(user_id, top)

        logger.info(
            "find-recipes user=%s candidates=%d matched=%d returned=%d",
            user_id,
            len(candidates),
            len(ranked),
            len(top),
        )
        return FindRecipesResponse(
            matches=top,
            total_matches=len(ranked),
            user_ingredients=pantry_used,
        )

    # -----------------------
    # candidate retrieval
    # -----------------------
    async def find_candidates(self, candidate_filter: CandidateFilter, limit: Optional[int] = None) -> List[Recipe]:
        return await self.recipes.find_candidates(
            candidate_filter, limit or settings.default_match_limit
        )
