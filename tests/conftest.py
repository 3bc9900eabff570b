# tests/conftest.py
import copy
from types import SimpleNamespace

import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo.errors import DuplicateKeyError
from httpx import AsyncClient, ASGITransport

from jobjournal.db.mongo import get_users_collection
from jobjournal.main import app
from jobjournal.repositories.users import UserRepository


class InMemoryCursor:
    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._items:
            raise StopAsyncIteration
        return self._items.pop(0)


class InMemoryCollection:
    """Async stand-in for the handful of Motor collection calls the repository makes."""

    def __init__(self):
        self.docs = []
        self.unique_keys = []

    @staticmethod
    def _matches(doc, query):
        for key, cond in query.items():
            value = doc.get(key)
            if isinstance(cond, dict) and "$ne" in cond:
                if value == cond["$ne"]:
                    return False
            elif value != cond:
                return False
        return True

    def _check_unique(self, doc):
        for key in self.unique_keys:
            for d in self.docs:
                if d["_id"] != doc["_id"] and key in doc and d.get(key) == doc[key]:
                    raise DuplicateKeyError(f"E11000 duplicate key error on {key}", code=11000)

    async def create_index(self, key, unique=False):
        if unique and key not in self.unique_keys:
            self.unique_keys.append(key)
        return f"{key}_1"

    def find(self, query=None):
        return InMemoryCursor(copy.deepcopy(d) for d in self.docs if self._matches(d, query or {}))

    async def find_one(self, query):
        for d in self.docs:
            if self._matches(d, query):
                return copy.deepcopy(d)
        return None

    async def count_documents(self, query):
        return sum(1 for d in self.docs if self._matches(d, query))

    async def insert_one(self, doc):
        doc.setdefault("_id", ObjectId())
        self._check_unique(doc)
        self.docs.append(copy.deepcopy(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def replace_one(self, query, doc):
        for i, d in enumerate(self.docs):
            if self._matches(d, query):
                self._check_unique(doc)
                self.docs[i] = copy.deepcopy(doc)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for i, d in enumerate(self.docs):
            if self._matches(d, query):
                del self.docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


@pytest.fixture
def users_collection():
    return InMemoryCollection()


@pytest_asyncio.fixture
async def client(users_collection):
    await UserRepository(users_collection).ensure_indexes()
    app.dependency_overrides[get_users_collection] = lambda: users_collection
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    async def _register(username="User", password="Pass"):
        r = await client.post("/users", json={"username": username, "password": password})
        assert r.status_code == 201, r.text
        return r.json()
    return _register
