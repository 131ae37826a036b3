"""
Pantry and ingredient-catalog models.
"""
from typing import List, Optional

from pydantic import Field

from recipe_matcher.models.recipe import CamelModel


class IngredientRef(CamelModel):
    """Catalog entry. Immutable once published; referenced elsewhere by name only."""

    ingredient_id: str
    name: str
    category: str = "other"
    common_units: List[str] = Field(default_factory=list)


class PantryItem(CamelModel):
    user_id: str
    ingredient_id: str
    name: str
    quantity: float = 1
    unit: str = "piece"
    unit_type: Optional[str] = None
    expiry_date: Optional[str] = None
    added_at: Optional[str] = None

    def __repr__(self):
        return f"<PantryItem(user_id={self.user_id}, name='{self.name}')>"


class CreateIngredientRequest(CamelModel):
    name: str
    category: str = "other"
    common_units: Optional[List[str]] = None
