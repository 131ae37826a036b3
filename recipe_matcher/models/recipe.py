"""
Recipe models shared by the repository, the matching service and the API.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire; accepts either on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RecipeIngredient(CamelModel):
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None

    @field_validator("quantity", mode="before")
    @classmethod
    def quantity_as_text(cls, v: Any) -> Optional[str]:
        # seeded rows store "1", imported rows store numbers
        return None if v is None else str(v)


class Recipe(CamelModel):
    recipe_id: str
    user_id: Optional[str] = None
    title: str
    description: str = ""
    ingredients: List[RecipeIngredient] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    cooking_time: Optional[float] = None
    difficulty_level: Optional[str] = None
    servings: Optional[int] = None
    dietary_tags: List[str] = Field(default_factory=list)
    cuisine: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None

    @field_validator("description", mode="before")
    @classmethod
    def empty_description(cls, v: Any) -> str:
        return v or ""

    @field_validator("ingredients", "instructions", "dietary_tags", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        return v or []

    def ingredient_names(self) -> List[str]:
        return [i.name for i in self.ingredients]

    def __repr__(self):
        return f"<Recipe(recipe_id='{self.recipe_id}', title='{self.title}')>"


class RankedRecipe(Recipe):
    """A recipe together with its score against a pantry."""

    match_percentage: int
    available_ingredients: List[str] = Field(default_factory=list)
    missing_ingredients: List[str] = Field(default_factory=list)
