# recipe_matcher/services/ingredient_matcher.py
"""
Ingredient name matching and recipe scoring.

Matching is case-insensitive bidirectional substring containment: "egg" matches
"eggs", "chicken" matches "chicken breast". There is no tokenization, stemming
or edit-distance scoring. The heuristic is permissive and will produce false
positives such as "lime" / "limestone".

The score of a recipe is always relative to the recipe's ingredient list,
never to the pantry size.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence

from recipe_matcher.errors import DegenerateScoreError
from recipe_matcher.models.matching import MatchResult

# recipes scoring below this never appear in find-recipes results
MIN_MATCH_PERCENTAGE = 20


def matches(pantry_name: str, recipe_ingredient_name: str) -> bool:
    a = (pantry_name or "").lower()
    b = (recipe_ingredient_name or "").lower()
    return a in b or b in a


def match_percentage(available: int, total: int) -> int:
    """round(100 * available / total) with half-up rounding, in integer arithmetic."""
    if total <= 0:
        raise DegenerateScoreError("Recipe ingredient list is empty; cannot score")
    return (200 * available + total) // (2 * total)


def _usable_pantry(pantry_names: Iterable[str]) -> List[str]:
    # a blank name is a substring of everything
    return [p.lower() for p in pantry_names if p and p.strip()]


def score(pantry_names: Sequence[str], recipe_ingredient_names: Sequence[str]) -> MatchResult:
    """
    Partition the recipe's ingredients into available/missing (recipe order kept,
    names lower-cased) and compute the match percentage.

    Raises:
        DegenerateScoreError: if the recipe ingredient list is empty.
    """
    if not recipe_ingredient_names:
        raise DegenerateScoreError("Recipe ingredient list is empty; cannot score")

    pantry = _usable_pantry(pantry_names)
    available: List[str] = []
    missing: List[str] = []
    for name in recipe_ingredient_names:
        ingredient = (name or "").lower()
        # a blank name would be contained in every pantry entry
        if ingredient.strip() and any(matches(p, ingredient) for p in pantry):
            available.append(ingredient)
        else:
            missing.append(ingredient)

    return MatchResult(
        match_percentage=match_percentage(len(available), len(recipe_ingredient_names)),
        available_ingredients=available,
        missing_ingredients=missing,
    )
