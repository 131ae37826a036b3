"""
Matching endpoints. Thin adapters over MatchingService.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from recipe_matcher.api.deps import get_current_user_id, get_matching_service
from recipe_matcher.models.matching import (
    CalculateMatchRequest,
    FindRecipesRequest,
    FindRecipesResponse,
    MatchResult,
)
from recipe_matcher.services.matching_service import MatchingService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _find_recipes_body(request: Request) -> FindRecipesRequest:
    # parsed here rather than as a body parameter so identity is checked first
    raw = await request.body()
    if not raw.strip():
        return FindRecipesRequest()
    try:
        return FindRecipesRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


@router.post(
    "/find-recipes",
    response_model=FindRecipesResponse,
    openapi_extra={
        "requestBody": {
            "content": {"application/json": {"schema": FindRecipesRequest.model_json_schema(by_alias=True)}},
        }
    },
)
async def find_recipes(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service),
):
    """Rank the catalog against the caller's pantry (explicit or stored)."""
    body = await _find_recipes_body(request)
    return await service.find_matching_recipes(
        body.user_ingredients,
        user_id,
        filters=body.filters(),
        limit=body.limit,
    )


@router.post("/calculate-match", response_model=MatchResult)
async def calculate_match(
    body: CalculateMatchRequest,
    service: MatchingService = Depends(get_matching_service),
):
    return service.calculate_match(body.user_ingredients, body.recipe_ingredients)
