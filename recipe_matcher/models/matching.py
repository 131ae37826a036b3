"""
Request/response and value models for the matching use cases.
"""
from typing import List, Optional, Tuple

from pydantic import Field, field_validator

from recipe_matcher.errors import InvalidFilterError
from recipe_matcher.models.recipe import CamelModel, RankedRecipe


class MatchResult(CamelModel):
    match_percentage: int
    available_ingredients: List[str] = Field(default_factory=list)
    missing_ingredients: List[str] = Field(default_factory=list)


class MatchFilters(CamelModel):
    dietary_restrictions: List[str] = Field(default_factory=list)
    max_cooking_time: Optional[float] = None
    difficulty_level: Optional[str] = None

    @field_validator("dietary_restrictions", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class MatchRecord(CamelModel):
    user_id: str
    recipe_id: str
    match_percentage: int
    created_at: str


class CandidateFilter(CamelModel):
    """Exactly one dimension is honored; precedence is cuisine, ingredient, author."""

    cuisine: Optional[str] = None
    ingredient: Optional[str] = None
    author_user_id: Optional[str] = None

    def selector(self) -> Tuple[str, str]:
        for kind in ("cuisine", "ingredient", "author_user_id"):
            value = getattr(self, kind)
            if value:
                return kind, value
        raise InvalidFilterError(
            "One of cuisine, ingredient or author is required to find candidates"
        )


# -----------------------
# HTTP payloads
# -----------------------
class FindRecipesRequest(CamelModel):
    user_ingredients: Optional[List[str]] = None
    dietary_restrictions: Optional[List[str]] = None
    max_cooking_time: Optional[float] = None
    difficulty_level: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1)

    def filters(self) -> MatchFilters:
        return MatchFilters(
            dietary_restrictions=self.dietary_restrictions,
            max_cooking_time=self.max_cooking_time,
            difficulty_level=self.difficulty_level,
        )


class FindRecipesResponse(CamelModel):
    matches: List[RankedRecipe]
    total_matches: int
    user_ingredients: List[str]


class CalculateMatchRequest(CamelModel):
    user_ingredients: Optional[List[str]] = None
    recipe_ingredients: Optional[List[str]] = None
