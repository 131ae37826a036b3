"""
Ingredient catalog endpoints. Entries are create-only.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from recipe_matcher.api.deps import get_catalog_service
from recipe_matcher.models.pantry import CreateIngredientRequest, IngredientRef
from recipe_matcher.services.ingredient_catalog import IngredientCatalogService

router = APIRouter()


@router.get("", response_model=List[IngredientRef])
async def list_ingredients(
    category: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    catalog: IngredientCatalogService = Depends(get_catalog_service),
):
    return await catalog.list_ingredients(category=category, search=search, limit=limit)


@router.post("", response_model=IngredientRef, status_code=201)
async def create_ingredient(
    body: CreateIngredientRequest,
    catalog: IngredientCatalogService = Depends(get_catalog_service),
):
    return await catalog.create_ingredient(body.name, body.category, body.common_units)
