import copy
import os
from types import SimpleNamespace

# Cheap hashes for tests; must be set before settings are loaded
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.main import app
from app.api.validators import mongo_checker
from app.db.mongo import get_bikes_collection, get_users_collection


class InMemoryCursor:
    def __init__(self, docs):
        self._docs = docs

    async def to_list(self, length=None):
        return copy.deepcopy(self._docs[:length] if length else self._docs)


class InMemoryCollection:
    """
    The subset of the motor collection API the user service calls.
    Set `fail_with` to make every call raise that driver error.
    """

    def __init__(self, unique=()):
        self.docs = []
        self.unique = unique
        self.calls = []
        self.fail_with = None

    def _enter(self, name, *args):
        self.calls.append((name,) + args)
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _matches(doc, query):
        return all(doc.get(key) == value for key, value in query.items())

    def _find(self, query):
        for doc in self.docs:
            if self._matches(doc, query):
                return doc
        return None

    def find(self, query=None):
        self._enter("find", query)
        return InMemoryCursor([doc for doc in self.docs if self._matches(doc, query or {})])

    async def find_one(self, query):
        self._enter("find_one", query)
        return copy.deepcopy(self._find(query))

    async def insert_one(self, document):
        self._enter("insert_one", document)
        for field in self.unique:
            if self._find({field: document.get(field)}) is not None:
                raise DuplicateKeyError(f"E11000 duplicate key error: {field}")
        document.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query, update):
        self._enter("update_one", query)
        doc = self._find(query)
        if doc is not None:
            doc.update(copy.deepcopy(update.get("$set", {})))
        return SimpleNamespace(matched_count=int(doc is not None))

    async def find_one_and_update(self, query, update, return_document=ReturnDocument.BEFORE):
        self._enter("find_one_and_update", query)
        doc = self._find(query)
        if doc is None:
            return None
        before = copy.deepcopy(doc)
        doc.update(copy.deepcopy(update.get("$set", {})))
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def find_one_and_delete(self, query):
        self._enter("find_one_and_delete", query)
        doc = self._find(query)
        if doc is not None:
            self.docs.remove(doc)
        return doc


@pytest.fixture
def users_collection():
    return InMemoryCollection(unique=("email",))


@pytest.fixture
def bikes_collection():
    return InMemoryCollection()


@pytest.fixture
def client(users_collection, bikes_collection):
    app.dependency_overrides[get_users_collection] = lambda: users_collection
    app.dependency_overrides[get_bikes_collection] = lambda: bikes_collection
    app.dependency_overrides[mongo_checker] = lambda: None
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def registered_user(client):
    response = client.post(
        "/api/users",
        json={"email": "a@b.com", "password": "secret1", "name": "Al"},
    )
    assert response.status_code == 200
    return response.json()
