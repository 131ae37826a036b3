"""Data models for the recipe matcher."""
from recipe_matcher.models.recipe import CamelModel, Recipe, RecipeIngredient, RankedRecipe
from recipe_matcher.models.pantry import CreateIngredientRequest, IngredientRef, PantryItem
from recipe_matcher.models.matching import (
    CalculateMatchRequest,
    CandidateFilter,
    FindRecipesRequest,
    FindRecipesResponse,
    MatchFilters,
    MatchRecord,
    MatchResult,
)

# Export all models
__all__ = [
    "CamelModel",
    "Recipe",
    "RecipeIngredient",
    "RankedRecipe",
    "CreateIngredientRequest",
    "IngredientRef",
    "PantryItem",
    "CalculateMatchRequest",
    "CandidateFilter",
    "FindRecipesRequest",
    "FindRecipesResponse",
    "MatchFilters",
    "MatchRecord",
    "MatchResult",
]
