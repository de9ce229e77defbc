"""
Pytest configuration and fixtures
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from config import Settings
from database import Database
from main import create_app
from routes.auth import TokenService
from storage import ThumbnailStorage

TEST_SECRET = "test-secret"
TEST_BUCKET = "assignments-test.appspot.com"


def _matches(doc, query):
    return all(doc.get(k) == v for k, v in query.items())


class FakeCursor:
    """Mimics the chaining surface of a motor cursor."""

    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, keys):
        for key, direction in reversed(keys):
            self._docs.sort(key=lambda d: d.get(key), reverse=direction < 0)
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    async def to_list(self, length):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        return [dict(d) for d in docs]


class FakeCollection:
    """In-memory stand-in for a motor collection."""

    def __init__(self):
        self.docs = []
        self.error = None

    def _check(self):
        if self.error is not None:
            raise self.error

    def seed(self, **fields):
        doc = {"_id": ObjectId(), **fields}
        self.docs.append(doc)
        return doc

    def get(self, _id):
        for doc in self.docs:
            if doc["_id"] == ObjectId(str(_id)):
                return doc
        return None

    async def insert_one(self, doc):
        self._check()
        doc = dict(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query):
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    def find(self, query):
        self._check()
        return FakeCursor([d for d in self.docs if _matches(d, query)])

    async def count_documents(self, query):
        self._check()
        return len([d for d in self.docs if _matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        self._check()
        fields = update["$set"]
        for doc in self.docs:
            if _matches(doc, query):
                before = dict(doc)
                doc.update(fields)
                return SimpleNamespace(matched_count=1, modified_count=int(before != doc), upserted_id=None)
        if upsert:
            doc = {**query, **update.get("$setOnInsert", {}), **fields}
            doc.setdefault("_id", ObjectId())
            self.docs.append(doc)
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=doc["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def delete_one(self, query):
        self._check()
        for doc in self.docs:
            if _matches(doc, query):
                self.docs.remove(doc)
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)


class FakeAdmin:
    def __init__(self):
        self.ping_error = None

    async def command(self, name):
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1}


class FakeDatabase:
    def __init__(self, client):
        self._client = client

    def __getitem__(self, name):
        return self._client.collection(name)


class FakeMotorClient:
    def __init__(self):
        self.collections = {}
        self.admin = FakeAdmin()
        self.closed = False

    def __getitem__(self, db_name):
        return FakeDatabase(self)

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())

    def close(self):
        self.closed = True


@pytest.fixture
def settings():
    return Settings(token_secret=TEST_SECRET, storage_bucket=TEST_BUCKET)


@pytest.fixture
def motor_client():
    return FakeMotorClient()


@pytest.fixture
def database(settings, motor_client):
    return Database(settings.mongodb_uri, settings.db_name, client=motor_client)


@pytest.fixture
def assignments(motor_client):
    return motor_client.collection("assignments")


@pytest.fixture
def submissions(motor_client):
    return motor_client.collection("submissions")


@pytest.fixture
def s3():
    client = MagicMock()
    client.put_object.return_value = {"ETag": '"abc"'}
    return client


@pytest.fixture
def storage(s3, settings):
    return ThumbnailStorage(TEST_BUCKET, s3, settings.storage_public_base_url)


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET)


@pytest.fixture
def app(settings, database, storage, tokens):
    return create_app(settings, database=database, storage=storage, tokens=tokens)


@pytest.fixture
def client(app):
    # https so the Secure token cookie is sent back by the client
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture
def login(client):
    def _login(email):
        response = client.post("/jwt", json={"email": email})
        assert response.status_code == 200
        return response
    return _login


@pytest.fixture
def seed_assignments(assignments):
    def _seed(difficulties):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return [
            assignments.seed(
                title=f"Assignment {i}",
                difficulty=difficulty,
                marks=10,
                createdAt=base + timedelta(minutes=i),
            )
            for i, difficulty in enumerate(difficulties)
        ]
    return _seed


@pytest.fixture
def storageless_client(database, tokens):
    # No STORAGE_BUCKET configured, so thumbnail uploads are disabled
    app = create_app(Settings(token_secret=TEST_SECRET), database=database, tokens=tokens)
    with TestClient(app, base_url="https://testserver") as c:
        yield c
