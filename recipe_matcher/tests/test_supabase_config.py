# tests/test_supabase_config.py
from types import SimpleNamespace

from recipe_matcher.config.supabase import SupabaseClient


def unconfigured():
    return SupabaseClient(url="", key="")


def test_unconfigured_handle_has_no_client():
    handle = unconfigured()
    assert handle.client is None
    assert handle.health_check() is False
    assert handle.resolve_user_id("token") is None
    diag = handle.diagnostics()
    assert diag["client_present"] is False
    assert diag["recipes_table"] == "recipe_items"


def test_non_http_url_is_rejected():
    handle = SupabaseClient(url="ftp://example.supabase.co", key="k")
    assert handle.client is None


def test_health_check_probes_recipe_table(fake_client):
    handle = unconfigured()
    handle.client = fake_client
    assert handle.health_check() is True
    assert fake_client.table("recipe_items").calls == ["select"]

    fake_client.fail("recipe_items")
    assert handle.health_check() is False


def test_resolve_user_id():
    def get_user(token):
        if token != "good":
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id="u1"))

    handle = unconfigured()
    handle.client = SimpleNamespace(auth=SimpleNamespace(get_user=get_user))
    assert handle.resolve_user_id("good") == "u1"
    assert handle.resolve_user_id("bad") is None
    assert handle.resolve_user_id("") is None
