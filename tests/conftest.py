"""Shared pytest fixtures and an in-memory stand-in for the async MongoDB API."""

import copy
from typing import Any

import pytest
from bson import ObjectId
from pymongo import WriteConcern
from pymongo.errors import DuplicateKeyError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from accountstore.core.modules.account.service import AccountStore
from accountstore.core.modules.user.models import User


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCollection:
    """Subset of AsyncCollection used by the account store.

    Supports equality filters, $set updates, upserts and unique single-field
    indexes. Set `failures[method_name]` to an exception to make that method raise it.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[tuple[list[tuple[str, int]], bool]] = []
        self.write_concerns: list[WriteConcern] = []
        self.failures: dict[str, Exception] = {}
        self.acknowledged = True

    def with_options(self, write_concern: WriteConcern | None = None, **_: Any) -> "FakeCollection":
        if write_concern is not None:
            self.write_concerns.append(write_concern)
        return self

    def _maybe_fail(self, method: str) -> None:
        if method in self.failures:
            raise self.failures[method]

    def _check_unique(self, doc: dict[str, Any], ignore: dict[str, Any] | None = None) -> None:
        for keys, unique in self.indexes:
            if not unique:
                continue
            field = keys[0][0]
            for existing in self.docs:
                if existing is not ignore and field in doc and existing.get(field) == doc[field]:
                    raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} index: {field}_1", 11000)

    async def create_index(self, keys: list[tuple[str, int]], unique: bool = False, **_: Any) -> str:
        self._maybe_fail("create_index")
        self.indexes.append((keys, unique))
        return "_".join(f"{field}_{direction}" for field, direction in keys)

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        self._maybe_fail("insert_one")
        doc = copy.deepcopy(document)
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(doc)
        return InsertOneResult(doc["_id"], self.acknowledged)

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self._maybe_fail("find_one")
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def count_documents(self, query: dict[str, Any], limit: int = 0) -> int:
        self._maybe_fail("count_documents")
        count = sum(1 for doc in self.docs if _matches(doc, query))
        return min(count, limit) if limit else count

    async def update_one(self, query: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> UpdateResult:
        self._maybe_fail("update_one")
        changes = update["$set"]
        for doc in self.docs:
            if _matches(doc, query):
                modified = any(doc.get(key) != value for key, value in changes.items())
                doc.update(copy.deepcopy(changes))
                return UpdateResult({"n": 1, "nModified": int(modified)}, self.acknowledged)

        if not upsert:
            return UpdateResult({"n": 0, "nModified": 0}, self.acknowledged)

        doc = {"_id": ObjectId(), **copy.deepcopy(query), **copy.deepcopy(changes)}
        self._check_unique(doc)
        self.docs.append(doc)
        return UpdateResult({"n": 1, "nModified": 0, "upserted": doc["_id"]}, self.acknowledged)

    async def delete_one(self, query: dict[str, Any]) -> DeleteResult:
        self._maybe_fail("delete_one")
        for doc in self.docs:
            if _matches(doc, query):
                self.docs.remove(doc)
                return DeleteResult({"n": 1}, self.acknowledged)
        return DeleteResult({"n": 0}, self.acknowledged)

    async def delete_many(self, query: dict[str, Any]) -> DeleteResult:
        self._maybe_fail("delete_many")
        kept = [doc for doc in self.docs if not _matches(doc, query)]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return DeleteResult({"n": deleted}, self.acknowledged)


class FakeDatabase:
    """Subset of AsyncDatabase: hands out one FakeCollection per name."""

    def __init__(self) -> None:
        self.collections: dict[str, FakeCollection] = {}

    def get_collection(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]


@pytest.fixture
def database():
    """Create an empty in-memory database."""
    return FakeDatabase()


@pytest.fixture
async def store(database):
    """Create an account store with its indexes in place."""
    account_store = AccountStore(database)  # type: ignore[arg-type]
    await account_store.on_start()
    return account_store


@pytest.fixture
def users(database):
    return database.get_collection("users")


@pytest.fixture
def sessions(database):
    return database.get_collection("sessions")


@pytest.fixture
def mock_user():
    """Create a user with an opaque pass-through field."""
    return User(email="real@x.com", name="Real User", password="$2b$12$hashed_password_here")
