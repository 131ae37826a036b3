# tests/test_ingredient_catalog.py
import pytest

from recipe_matcher.errors import InvalidInputError
from recipe_matcher.services.ingredient_catalog import IngredientCatalogService


@pytest.mark.asyncio
async def test_create_ingredient_defaults_units(fake_client):
    svc = IngredientCatalogService(client=fake_client)
    ref = await svc.create_ingredient("  Olive Oil ", category="oils")
    assert ref.name == "olive oil"
    assert ref.category == "oils"
    assert "ml" in ref.common_units
    assert len(fake_client.table("ingredients").rows) == 1


@pytest.mark.asyncio
async def test_create_ingredient_keeps_given_units(fake_client):
    svc = IngredientCatalogService(client=fake_client)
    ref = await svc.create_ingredient("saffron", common_units=["g"])
    assert ref.common_units == ["g"]
    assert ref.category == "other"


@pytest.mark.asyncio
async def test_create_ingredient_requires_name(fake_client):
    svc = IngredientCatalogService(client=fake_client)
    with pytest.raises(InvalidInputError):
        await svc.create_ingredient("   ")


@pytest.mark.asyncio
async def test_list_ingredients_filters(fake_client):
    svc = IngredientCatalogService(client=fake_client)
    await svc.create_ingredient("cheddar cheese", category="dairy")
    await svc.create_ingredient("milk", category="dairy")
    await svc.create_ingredient("beef", category="meat")

    dairy = await svc.list_ingredients(category="dairy")
    assert [i.name for i in dairy] == ["cheddar cheese", "milk"]

    found = await svc.list_ingredients(search="CHEESE")
    assert [i.name for i in found] == ["cheddar cheese"]

    assert len(await svc.list_ingredients(limit=2)) == 2
