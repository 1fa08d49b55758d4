"""
Shared fixtures.

HTTP tests run against the real FastAPI app with every repository function
replaced by an in-memory store, so no database is needed. The app lifespan
(pool, schema, seeding) is not started because TestClient is not used as a
context manager.
"""

from __future__ import annotations

import itertools
from typing import Any

import asyncpg
import pytest
from fastapi.testclient import TestClient

from auth import repository as auth_repository
from children import repository as children_repository
from reindeer import repository as reindeer_repository

TEST_SECRET = "test-signing-secret-with-enough-bytes-for-hs256"


def _unique_violation(table: str, row_id: int) -> asyncpg.UniqueViolationError:
    exc = asyncpg.UniqueViolationError(f'duplicate key value violates unique constraint "{table}_pkey"')
    exc.detail = f"Key (id)=({row_id}) already exists."
    return exc


class InMemoryStore:
    """
    Dict-backed stand-in for the children, reindeer and users tables.

    Mirrors the repository contracts: children come back with "toys",
    reindeer with "fans", deletes cascade to toys and favorites.
    """

    def __init__(self) -> None:
        self.children: dict[int, dict[str, Any]] = {}
        self.toys: dict[int, dict[str, Any]] = {}
        self.reindeer: dict[int, dict[str, Any]] = {}
        self.favorites: set[tuple[int, int]] = set()
        self.users: dict[str, dict[str, Any]] = {}
        self._child_ids = itertools.count(1)
        self._toy_ids = itertools.count(1)
        self._reindeer_ids = itertools.count(1)
        self._user_ids = itertools.count(1)

    # children

    def _child_view(self, child_id: int) -> dict[str, Any]:
        child = dict(self.children[child_id])
        child["toys"] = [dict(t) for t in sorted(self.toys.values(), key=lambda t: t["id"]) if t["child_id"] == child_id]
        return child

    async def list_children(self, *, delivered: int | None = None, name: str | None = None) -> list[dict[str, Any]]:
        return [
            self._child_view(child_id)
            for child_id, child in sorted(self.children.items())
            if (delivered is None or child["delivered"] == delivered)
            and (name is None or name in child["name"])
        ]

    async def get_child(self, child_id: int, *, conn=None) -> dict[str, Any] | None:
        if child_id not in self.children:
            return None
        return self._child_view(child_id)

    async def child_exists(self, child_id: int) -> bool:
        return child_id in self.children

    async def count_children(self, *, conn=None) -> int:
        return len(self.children)

    async def insert_child(self, *, name: str, delivered: int = 0, child_id: int | None = None, conn=None) -> dict[str, Any]:
        if child_id is None:
            child_id = next(self._child_ids)
        if child_id in self.children:
            raise _unique_violation("children", child_id)
        self.children[child_id] = {"id": child_id, "name": name, "delivered": delivered}
        return self._child_view(child_id)

    async def insert_toy(self, *, name: str, child_id: int, conn=None) -> dict[str, Any]:
        toy_id = next(self._toy_ids)
        self.toys[toy_id] = {"id": toy_id, "name": name, "child_id": child_id}
        return dict(self.toys[toy_id])

    async def insert_child_with_toy(self, *, child_name: str, toy_name: str) -> dict[str, Any]:
        child = await self.insert_child(name=child_name)
        await self.insert_toy(name=toy_name, child_id=child["id"])
        return self._child_view(child["id"])

    async def update_child(self, child_id: int, *, name: str, delivered: int) -> bool:
        if child_id not in self.children:
            return False
        self.children[child_id].update(name=name, delivered=delivered)
        return True

    async def delete_child(self, child_id: int) -> dict[str, Any] | None:
        if child_id not in self.children:
            return None
        child = self._child_view(child_id)
        del self.children[child_id]
        self.toys = {k: t for k, t in self.toys.items() if t["child_id"] != child_id}
        self.favorites = {f for f in self.favorites if f[0] != child_id}
        return child

    # reindeer

    def _reindeer_view(self, reindeer_id: int) -> dict[str, Any]:
        reindeer = dict(self.reindeer[reindeer_id])
        reindeer["fans"] = [
            dict(self.children[child_id])
            for child_id in sorted(c for (c, r) in self.favorites if r == reindeer_id)
        ]
        return reindeer

    async def list_reindeer(self) -> list[dict[str, Any]]:
        return [self._reindeer_view(reindeer_id) for reindeer_id in sorted(self.reindeer)]

    async def get_reindeer(self, reindeer_id: int, *, conn=None) -> dict[str, Any] | None:
        if reindeer_id not in self.reindeer:
            return None
        return self._reindeer_view(reindeer_id)

    async def reindeer_exists(self, reindeer_id: int) -> bool:
        return reindeer_id in self.reindeer

    async def count_reindeer(self, *, conn=None) -> int:
        return len(self.reindeer)

    async def insert_reindeer(self, *, name: str, reindeer_id: int | None = None, conn=None) -> dict[str, Any]:
        if reindeer_id is None:
            reindeer_id = next(self._reindeer_ids)
        if reindeer_id in self.reindeer:
            raise _unique_violation("reindeer", reindeer_id)
        self.reindeer[reindeer_id] = {"id": reindeer_id, "name": name}
        return self._reindeer_view(reindeer_id)

    async def insert_favorite(self, *, child_id: int, reindeer_id: int, conn=None) -> None:
        self.favorites.add((child_id, reindeer_id))

    async def update_reindeer(self, reindeer_id: int, *, name: str) -> bool:
        if reindeer_id not in self.reindeer:
            return False
        self.reindeer[reindeer_id]["name"] = name
        return True

    async def delete_reindeer(self, reindeer_id: int) -> dict[str, Any] | None:
        if reindeer_id not in self.reindeer:
            return None
        reindeer = self._reindeer_view(reindeer_id)
        del self.reindeer[reindeer_id]
        self.favorites = {f for f in self.favorites if f[1] != reindeer_id}
        return reindeer

    # users

    async def get_user_by_username(self, username: str) -> dict[str, Any] | None:
        user = self.users.get(username)
        return dict(user) if user is not None else None

    async def create_user(self, *, username: str, password_hash: str, roles: list[str], conn=None) -> dict[str, Any]:
        user = {"id": next(self._user_ids), "username": username, "password_hash": password_hash, "roles": list(roles)}
        self.users[username] = user
        return dict(user)


_CHILDREN_FUNCS = (
    "list_children",
    "get_child",
    "child_exists",
    "count_children",
    "insert_child",
    "insert_toy",
    "insert_child_with_toy",
    "update_child",
    "delete_child",
)
_REINDEER_FUNCS = (
    "list_reindeer",
    "get_reindeer",
    "reindeer_exists",
    "count_reindeer",
    "insert_reindeer",
    "insert_favorite",
    "update_reindeer",
    "delete_reindeer",
)
_AUTH_FUNCS = ("get_user_by_username", "create_user")


@pytest.fixture(autouse=True)
def _auth_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    for name in ("ACCESS_TOKEN_EXPIRE_HOURS", "JWT_CLOCK_SKEW_SECONDS", "DEFAULT_ROLE", "AUTH_REQUIRE_REGISTERED_USER"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryStore:
    fake = InMemoryStore()
    for name in _CHILDREN_FUNCS:
        monkeypatch.setattr(children_repository, name, getattr(fake, name))
    for name in _REINDEER_FUNCS:
        monkeypatch.setattr(reindeer_repository, name, getattr(fake, name))
    for name in _AUTH_FUNCS:
        monkeypatch.setattr(auth_repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(store: InMemoryStore) -> TestClient:
    from main import app

    return TestClient(app)
