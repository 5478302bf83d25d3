from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi import Request
from fastapi.testclient import TestClient

from timerboard.config import settings
from timerboard.core.dependencies import get_identity_store, get_service_identity_store
from timerboard.database.identity_store import IdentityStore
from timerboard.main import app
from timerboard.modules.auth.session import AuthSession

GUILD_G = 900000000000000001
OTHER_GUILD = 900000000000000002
USER_ID = 123456789
ADMIN_ID = 555
ROLE_111 = 111
CATEGORY_C = 1
CATEGORY_D = 2


class FakeQuery:
    """Minimal stand-in for the postgrest query builder used by IdentityStore."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.action = "select"
        self.columns: Optional[List[str]] = None
        self.filters: List = []
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.order_by: Optional[str] = None
        self.desc = False
        self.row_limit: Optional[int] = None

    def select(self, columns: str = "*"):
        self.action = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict: str = ""):
        self.action, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc: bool = False):
        self.order_by, self.desc = column, desc
        return self

    def limit(self, count: int):
        self.row_limit = count
        return self

    def _matches(self, row) -> bool:
        return all(f(row) for f in self.filters)

    def execute(self):
        self.db.queries.append((self.table, self.action))
        rows = self.db.tables.setdefault(self.table, [])
        if self.action == "select":
            data = [dict(r) for r in rows if self._matches(r)]
            if self.order_by:
                data.sort(key=lambda r: r.get(self.order_by), reverse=self.desc)
            if self.row_limit is not None:
                data = data[:self.row_limit]
            if self.columns:
                data = [{c: r.get(c) for c in self.columns} for r in data]
        elif self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            rows.extend(dict(p) for p in payload)
            data = [dict(p) for p in payload]
        elif self.action == "upsert":
            keys = [k.strip() for k in self.on_conflict.split(",")]
            payload = dict(self.payload)
            for row in rows:
                if all(row.get(k) == payload.get(k) for k in keys):
                    row.update(payload)
                    data = [dict(row)]
                    break
            else:
                rows.append(payload)
                data = [dict(payload)]
        elif self.action == "update":
            data = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    data.append(dict(row))
        else:
            data = [dict(r) for r in rows if self._matches(r)]
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
        return SimpleNamespace(data=data)


class FakeSupabase:
    def __init__(self, tables: Optional[Dict[str, List[dict]]] = None):
        self.tables: Dict[str, List[dict]] = tables or {}
        self.queries: List = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


def seed_tables() -> Dict[str, List[dict]]:
    """User 123456789 holds role 111 in guild G; category C grants it view+create, D has no grants."""
    return {
        "users": [
            {"id": USER_ID, "name": "pilot", "is_admin": False},
            {"id": ADMIN_ID, "name": "director", "is_admin": True},
        ],
        "user_guilds": [
            {"user_id": USER_ID, "guild_id": GUILD_G},
            {"user_id": ADMIN_ID, "guild_id": GUILD_G},
        ],
        "guild_roles": [
            {"guild_id": GUILD_G, "role_id": ROLE_111, "name": "Line Member", "color": "#99aab5", "position": 1},
            {"guild_id": GUILD_G, "role_id": 222, "name": "FC", "color": "#ff5733", "position": 2},
            {"guild_id": OTHER_GUILD, "role_id": 333, "name": "Elsewhere", "color": "#000000", "position": 1},
        ],
        "user_role_memberships": [
            {"user_id": USER_ID, "role_id": ROLE_111},
        ],
        "fleet_categories": [
            {"id": CATEGORY_C, "guild_id": GUILD_G, "name": "Roams"},
            {"id": CATEGORY_D, "guild_id": GUILD_G, "name": "Doctrine Ops"},
            {"id": 3, "guild_id": OTHER_GUILD, "name": "Away Ops"},
        ],
        "category_access_grants": [
            {"category_id": CATEGORY_C, "role_id": ROLE_111, "can_view": True, "can_create": True, "can_manage": False},
        ],
    }


@pytest.fixture
def supabase() -> FakeSupabase:
    return FakeSupabase(seed_tables())


@pytest.fixture
def store(supabase) -> IdentityStore:
    return IdentityStore(supabase)


TEST_LOGIN_PATH = "/test/login/{user_id}"


def _test_login(user_id: str, request: Request):
    AuthSession(request.session).set_user_id(user_id)
    return {"user_id": user_id}


@pytest.fixture
def client(store, monkeypatch):
    # No real Supabase project in tests; startup skips the admin bootstrap
    monkeypatch.setattr(settings, "supabase_url", "")
    app.dependency_overrides[get_identity_store] = lambda: store
    app.dependency_overrides[get_service_identity_store] = lambda: store
    app.add_api_route(TEST_LOGIN_PATH, _test_login, methods=["POST"])
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.router.routes[:] = [
            route for route in app.router.routes
            if getattr(route, "path", None) != TEST_LOGIN_PATH
        ]
        app.openapi_schema = None
        app.dependency_overrides.clear()


@pytest.fixture
def login(client):
    """Log the test client in as user_id by writing the session cookie"""
    def _login(user_id) -> None:
        response = client.post(f"/test/login/{user_id}")
        assert response.status_code == 200
    return _login
