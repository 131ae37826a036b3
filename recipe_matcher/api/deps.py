"""
FastAPI dependencies: caller identity and the service graph.

Services are built once per process and shared across requests. Tests replace
them through `app.dependency_overrides`.
"""
import asyncio
from functools import lru_cache
from typing import Optional

from fastapi import Header

from recipe_matcher.config.supabase import supabase_client
from recipe_matcher.errors import UnauthenticatedError
from recipe_matcher.services.ingredient_catalog import IngredientCatalogService
from recipe_matcher.services.match_record_service import MatchRecordService
from recipe_matcher.services.matching_service import MatchingService
from recipe_matcher.services.pantry_service import PantryService
from recipe_matcher.services.recipe_repository import RecipeRepository


@lru_cache(maxsize=1)
def get_match_recorder() -> MatchRecordService:
    return MatchRecordService()


@lru_cache(maxsize=1)
def get_catalog_service() -> IngredientCatalogService:
    return IngredientCatalogService()


@lru_cache(maxsize=1)
def get_matching_service() -> MatchingService:
    return MatchingService(
        recipes=RecipeRepository(),
        pantry=PantryService(),
        recorder=get_match_recorder(),
    )


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user_id(authorization: Optional[str] = Header(default=None)) -> str:
    """Resolve `Authorization: Bearer <jwt>` to a user id or raise 401."""
    token = _bearer_token(authorization)
    if token is None:
        raise UnauthenticatedError("Unauthorized")
    user_id = await asyncio.to_thread(supabase_client.resolve_user_id, token)
    if not user_id:
        raise UnauthenticatedError("Unauthorized")
    return user_id
