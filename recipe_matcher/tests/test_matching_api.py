# tests/test_matching_api.py
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

import main
from recipe_matcher.api.deps import get_catalog_service, get_current_user_id, get_matching_service
from recipe_matcher.services.ingredient_catalog import IngredientCatalogService
from recipe_matcher.services.match_record_service import MatchRecordService
from recipe_matcher.services.matching_service import MatchingService
from recipe_matcher.services.pantry_service import PantryService
from recipe_matcher.services.recipe_repository import RecipeRepository


@pytest.fixture
def service(fake_client):
    return MatchingService(
        recipes=RecipeRepository(client=fake_client),
        pantry=PantryService(client=fake_client),
        recorder=MatchRecordService(client=fake_client),
    )


@pytest.fixture
def client(service, monkeypatch):
    main.app.dependency_overrides[get_matching_service] = lambda: service
    # shutdown drains this recorder
    monkeypatch.setattr(main, "get_match_recorder", lambda: service.recorder)
    with TestClient(main.app) as c:
        yield c
    main.app.dependency_overrides.clear()


@pytest.fixture
def as_user():
    main.app.dependency_overrides[get_current_user_id] = lambda: "u1"
    return "u1"


@pytest.fixture
def seeded(service, recipe_factory):
    async def _seed():
        await service.recipes.put_recipe(recipe_factory("carbonara", [
            "spaghetti", "eggs", "bacon", "parmesan cheese", "black pepper",
        ], cuisine="italian"))
        await service.recipes.put_recipe(recipe_factory("salad", ["lettuce", "tomato", "cucumber"]))
    return _seed


def test_calculate_match_returns_camel_case(client):
    r = client.post(
        "/matching/calculate-match",
        json={
            "userIngredients": ["spaghetti", "eggs", "bacon", "parmesan cheese"],
            "recipeIngredients": ["spaghetti", "eggs", "bacon", "parmesan cheese", "black pepper"],
        },
    )
    assert r.status_code == 200
    assert r.json() == {
        "matchPercentage": 80,
        "availableIngredients": ["spaghetti", "eggs", "bacon", "parmesan cheese"],
        "missingIngredients": ["black pepper"],
    }


def test_calculate_match_missing_field_is_400(client):
    r = client.post("/matching/calculate-match", json={"userIngredients": ["egg"]})
    assert r.status_code == 400
    assert r.json() == {"error": "User ingredients and recipe ingredients are required"}


def test_calculate_match_empty_recipe_is_400(client):
    r = client.post(
        "/matching/calculate-match", json={"userIngredients": ["egg"], "recipeIngredients": []}
    )
    assert r.status_code == 400
    assert "error" in r.json()


def test_malformed_body_is_400(client):
    r = client.post(
        "/matching/calculate-match", json={"userIngredients": "egg", "recipeIngredients": ["egg"]}
    )
    assert r.status_code == 400
    assert "userIngredients" in r.json()["error"]


def test_find_recipes_requires_identity(client):
    r = client.post("/matching/find-recipes", json={"userIngredients": ["egg"]})
    assert r.status_code == 401
    assert r.json() == {"error": "Unauthorized"}


def test_find_recipes_rejects_unknown_token(client, monkeypatch):
    monkeypatch.setattr(
        "recipe_matcher.api.deps.supabase_client",
        SimpleNamespace(resolve_user_id=lambda token: "u1" if token == "good" else None),
    )
    r = client.post(
        "/matching/find-recipes", json={}, headers={"Authorization": "Bearer nope"}
    )
    assert r.status_code == 401


def test_find_recipes_with_bearer_token(client, monkeypatch, seeded):
    client.portal.call(seeded)
    monkeypatch.setattr(
        "recipe_matcher.api.deps.supabase_client",
        SimpleNamespace(resolve_user_id=lambda token: "u1" if token == "good" else None),
    )
    r = client.post(
        "/matching/find-recipes",
        json={"userIngredients": ["tomato", "lettuce"]},
        headers={"Authorization": "Bearer good"},
    )
    assert r.status_code == 200
    assert [m["recipeId"] for m in r.json()["matches"]] == ["salad"]


def test_find_recipes_ranks_and_limits(client, as_user, seeded, fake_client):
    client.portal.call(seeded)
    r = client.post(
        "/matching/find-recipes",
        json={"userIngredients": ["spaghetti", "eggs", "bacon", "parmesan cheese", "tomato"], "limit": 1},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["totalMatches"] == 2
    assert body["userIngredients"] == ["spaghetti", "eggs", "bacon", "parmesan cheese", "tomato"]
    assert len(body["matches"]) == 1
    top = body["matches"][0]
    assert top["recipeId"] == "carbonara"
    assert top["matchPercentage"] == 80
    assert top["missingIngredients"] == ["black pepper"]


def test_find_recipes_storage_failure_is_500(client, as_user, fake_client):
    fake_client.fail("recipe_items")
    r = client.post("/matching/find-recipes", json={"userIngredients": ["egg"]})
    assert r.status_code == 500
    assert r.json() == {"error": "scan_all_recipes failed"}


def test_find_recipes_rejects_zero_limit(client, as_user):
    r = client.post("/matching/find-recipes", json={"limit": 0})
    assert r.status_code == 400


def test_list_recipes_by_cuisine(client, seeded):
    client.portal.call(seeded)
    r = client.get("/recipes", params={"cuisine": "italian"})
    assert r.status_code == 200
    assert [x["recipeId"] for x in r.json()] == ["carbonara"]


def test_list_recipes_without_selector_is_400(client):
    r = client.get("/recipes")
    assert r.status_code == 400
    assert "required" in r.json()["error"]


def test_request_id_is_echoed(client):
    r = client.get("/", headers={"X-Request-Id": "abc-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-Id"] == "abc-123"


def test_ready_reports_cached_startup_state(client, monkeypatch):
    monkeypatch.setattr(main.app.state, "supabase_healthy", True, raising=False)
    assert client.get("/ready").json() == {"ready": True, "database": "connected"}


def test_identity_is_checked_before_body(client):
    r = client.post(
        "/matching/find-recipes",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 401


def test_malformed_find_body_with_identity_is_400(client, as_user):
    r = client.post(
        "/matching/find-recipes",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert "error" in r.json()


def test_find_recipes_empty_body_uses_stored_pantry(client, as_user, service, seeded):
    client.portal.call(seeded)
    client.portal.call(service.pantry.add_pantry_item, "u1", "lettuce", 1, "piece")
    r = client.post("/matching/find-recipes")
    assert r.status_code == 200
    assert r.json()["userIngredients"] == ["lettuce"]
    assert [m["recipeId"] for m in r.json()["matches"]] == ["salad"]


@pytest.fixture
def catalog_client(client, fake_client):
    main.app.dependency_overrides[get_catalog_service] = lambda: IngredientCatalogService(client=fake_client)
    return client


def test_create_and_list_ingredients(catalog_client):
    r = catalog_client.post("/ingredients", json={"name": "Cheddar Cheese", "category": "dairy"})
    assert r.status_code == 201
    created = r.json()
    assert created["name"] == "cheddar cheese"
    assert "g" in created["commonUnits"]

    catalog_client.post("/ingredients", json={"name": "Milk", "category": "dairy", "commonUnits": ["l"]})
    r = catalog_client.get("/ingredients", params={"search": "chee"})
    assert r.status_code == 200
    assert [i["name"] for i in r.json()] == ["cheddar cheese"]
    assert len(catalog_client.get("/ingredients", params={"category": "dairy"}).json()) == 2


def test_create_ingredient_requires_name(catalog_client):
    r = catalog_client.post("/ingredients", json={"name": "  "})
    assert r.status_code == 400
    assert r.json() == {"error": "Ingredient name is required"}
