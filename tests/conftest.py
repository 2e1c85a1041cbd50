"""Shared pytest fixtures and in-memory test doubles."""

import copy
from collections.abc import Callable
from typing import Any

import pytest
from pymongo import ReturnDocument
from pymongo.errors import ServerSelectionTimeoutError

from recipebox.config import Config
from recipebox.core.core import Core

TEST_DATABASE_URL = "mongodb://localhost:27017/recipebox_test"
TEST_JWT_SECRET = "test-signing-secret"


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeInsertResult:
    def __init__(self, inserted_id: Any) -> None:
        self.inserted_id = inserted_id


class FakeUpdateResult:
    def __init__(self, matched_count: int) -> None:
        self.matched_count = matched_count
        self.modified_count = matched_count


class FakeCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        self._docs.sort(key=lambda d: d[key], reverse=direction < 0)
        return self

    def __aiter__(self) -> "FakeCursor":
        self._iter = iter(self._docs)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    """The subset of AsyncCollection the services use, kept in a list."""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.writes = 0
        self.fail_writes = False
        self.indexes: list[Any] = []

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        if self.fail_writes:
            raise ServerSelectionTimeoutError("createIndexes failed")
        self.indexes.append(keys)
        return "index"

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._find(query)
        return copy.deepcopy(doc) if doc is not None else None

    def find(self, query: dict[str, Any] | None = None) -> FakeCursor:
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query or {})])

    async def insert_one(self, doc: dict[str, Any]) -> FakeInsertResult:
        self._write()
        self.docs.append(copy.deepcopy(doc))
        return FakeInsertResult(doc["_id"])

    async def update_one(self, query: dict[str, Any], update: dict[str, Any]) -> FakeUpdateResult:
        doc = self._find(query)
        if doc is None:
            return FakeUpdateResult(0)
        self._write()
        doc.update(copy.deepcopy(update["$set"]))
        return FakeUpdateResult(1)

    async def find_one_and_update(
        self, query: dict[str, Any], update: dict[str, Any], return_document: Any = ReturnDocument.BEFORE
    ) -> dict[str, Any] | None:
        doc = self._find(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        self._write()
        doc.update(copy.deepcopy(update["$set"]))
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def find_one_and_delete(self, query: dict[str, Any]) -> dict[str, Any] | None:
        doc = self._find(query)
        if doc is None:
            return None
        self._write()
        self.docs.remove(doc)
        return doc

    def _find(self, query: dict[str, Any]) -> dict[str, Any] | None:
        return next((d for d in self.docs if _matches(d, query)), None)

    def _write(self) -> None:
        if self.fail_writes:
            raise ServerSelectionTimeoutError("write failed")
        self.writes += 1


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}
        self.reachable = True

    def get_collection(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def command(self, name: str) -> dict[str, Any]:
        if not self.reachable:
            raise ServerSelectionTimeoutError("No servers found yet")
        return {"ok": 1}


class FakeMongoClient:
    def __init__(self) -> None:
        self.database = FakeDatabase()
        self.closed = False

    def get_database(self, name: str) -> FakeDatabase:
        return self.database

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def make_config() -> Callable[..., Config]:
    """Build a Config that ignores the environment's .env file."""

    def factory(**overrides: Any) -> Config:
        values: dict[str, Any] = {
            "database_url": TEST_DATABASE_URL,
            "jwt_secret": TEST_JWT_SECRET,
            "admin_username": "admin",
            "admin_password": "admin123",
        }
        values.update(overrides)
        return Config(_env_file=None, **values)  # type: ignore[call-arg]

    return factory


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def mongo_client():
    return FakeMongoClient()


@pytest.fixture
def admins(mongo_client) -> FakeCollection:
    return mongo_client.database.get_collection("admins")


@pytest.fixture
def recipes(mongo_client) -> FakeCollection:
    return mongo_client.database.get_collection("recipes")


@pytest.fixture
def make_core(mongo_client):
    """Build a Core over the shared fake database with the given config."""

    def factory(config: Config) -> Core:
        return Core(config, mongo_client)  # type: ignore[arg-type]

    return factory


@pytest.fixture
def core(make_core, config):
    return make_core(config)
