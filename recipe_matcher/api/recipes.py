"""
Recipe lookup through the secondary indexes (cuisine, ingredient, author).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from recipe_matcher.api.deps import get_matching_service
from recipe_matcher.models.matching import CandidateFilter
from recipe_matcher.models.recipe import Recipe
from recipe_matcher.services.matching_service import MatchingService

router = APIRouter()


@router.get("", response_model=List[Recipe])
async def list_recipes(
    cuisine: Optional[str] = None,
    ingredient: Optional[str] = None,
    author: Optional[str] = None,
    limit: Optional[int] = Query(default=None, ge=1),
    service: MatchingService = Depends(get_matching_service),
):
    candidate_filter = CandidateFilter(cuisine=cuisine, ingredient=ingredient, author_user_id=author)
    return await service.find_candidates(candidate_filter, limit)
