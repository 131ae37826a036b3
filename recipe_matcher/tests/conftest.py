# tests/conftest.py
import copy
import fnmatch
from types import SimpleNamespace

import pytest

from recipe_matcher.models.recipe import Recipe, RecipeIngredient


# --- Fake Supabase client ---
class FakeQuery:
    """Chainable PostgREST-style builder over a FakeTable's rows."""

    def __init__(self, table, op, payload=None, on_conflict=None):
        self._table = table
        self._op = op
        self._payload = payload
        self._on_conflict = on_conflict
        self._filters = []
        self._order = []
        self._range = None
        self._limit = None

    # filters
    def eq(self, col, value):
        self._filters.append(lambda r: r.get(col) == value)
        return self

    def like(self, col, pattern):
        glob = pattern.replace("%", "*").replace("_", "?")
        self._filters.append(lambda r: fnmatch.fnmatchcase(str(r.get(col) or ""), glob))
        return self

    def ilike(self, col, pattern):
        glob = pattern.replace("%", "*").replace("_", "?").lower()
        self._filters.append(lambda r: fnmatch.fnmatchcase(str(r.get(col) or "").lower(), glob))
        return self

    def order(self, col, desc=False):
        self._order.append((col, desc))
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matching(self):
        return [r for r in self._table.rows if all(f(r) for f in self._filters)]

    def execute(self):
        self._table.calls.append(self._op)
        if self._table.fail:
            raise RuntimeError(f"{self._table.name} unavailable")

        if self._op == "select":
            rows = self._matching()
            if not self._order:
                # no ORDER BY: storage order is not insertion order
                rows = list(reversed(rows))
            for col, desc in reversed(self._order):
                rows = sorted(rows, key=lambda r: str(r.get(col) or ""), reverse=desc)
            if self._range is not None:
                rows = rows[self._range[0]:self._range[1] + 1]
            if self._limit is not None:
                rows = rows[:self._limit]
            return SimpleNamespace(data=copy.deepcopy(rows), status_code=200)

        if self._op in ("insert", "upsert"):
            rows = self._payload if isinstance(self._payload, list) else [self._payload]
            if self._op == "upsert" and self._on_conflict:
                keys = [k.strip() for k in self._on_conflict.split(",")]
                conflict_keys = [tuple(r.get(k) for k in keys) for r in rows]
                if len(set(conflict_keys)) != len(conflict_keys):
                    raise RuntimeError("ON CONFLICT DO UPDATE command cannot affect row a second time")
            for row in rows:
                if self._op == "upsert" and self._on_conflict:
                    keys = [k.strip() for k in self._on_conflict.split(",")]
                    self._table.rows = [
                        r for r in self._table.rows if any(r.get(k) != row.get(k) for k in keys)
                    ]
                self._table.rows.append(copy.deepcopy(row))
            return SimpleNamespace(data=copy.deepcopy(rows), status_code=201)

        if self._op == "delete":
            removed = self._matching()
            self._table.rows = [r for r in self._table.rows if r not in removed]
            return SimpleNamespace(data=removed, status_code=200)

        raise AssertionError(f"unsupported op {self._op}")


class FakeTable:

    def __init__(self, name):
        self.name = name
        self.rows = []
        self.calls = []
        self.fail = False

    def select(self, *args, **kwargs):
        return FakeQuery(self, "select")

    def insert(self, rows):
        return FakeQuery(self, "insert", rows)

    def upsert(self, rows, on_conflict=None):
        return FakeQuery(self, "upsert", rows, on_conflict)

    def delete(self):
        return FakeQuery(self, "delete")


class FakeClient:

    def __init__(self):
        self._tables = {}

    def table(self, name):
        if name not in self._tables:
            self._tables[name] = FakeTable(name)
        return self._tables[name]

    def fail(self, name, failing=True):
        self.table(name).fail = failing


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def fake_supabase_client(monkeypatch, fake_client):
    """Replace the process-wide wrapper so default-constructed services use the fake."""
    fake = SimpleNamespace(client=fake_client, health_check=lambda: True)
    monkeypatch.setattr("recipe_matcher.services.store.supabase_client", fake)
    return fake


# --- Recipe builders ---
def make_recipe(recipe_id, ingredients, **kw):
    data = {
        "recipe_id": recipe_id,
        "title": kw.pop("title", f"Recipe {recipe_id}"),
        "ingredients": [RecipeIngredient(name=n, quantity="1", unit="piece") for n in ingredients],
    }
    data.update(kw)
    return Recipe(**data)


@pytest.fixture
def recipe_factory():
    return make_recipe
