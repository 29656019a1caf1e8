"""
Pytest configuration and fixtures
"""
import sys
import textwrap
from pathlib import Path

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError

# Project root holds the modules (flat layout)
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import database  # noqa: E402
from config import Settings  # noqa: E402
from main import create_app  # noqa: E402


def write_post(posts_dir: Path, slug: str, title: str, date: str, featured: bool = False,
               body: str = "Some *markdown* body.") -> Path:
    path = posts_dir / f"{slug}.md"
    path.write_text(textwrap.dedent(f"""\
        ---
        title: {title}
        image: {slug}.png
        excerpt: Excerpt for {title}
        date: {date}
        isFeatured: {"true" if featured else "false"}
        ---

        """) + body + "\n", encoding="utf-8")
    return path


@pytest.fixture
def posts_dir(tmp_path):
    """Three posts with distinct dates, one featured"""
    directory = tmp_path / "posts"
    directory.mkdir()
    write_post(directory, "first-post", "First Post", "2022-01-05")
    write_post(directory, "second-post", "Second Post", "2022-02-10", featured=True)
    write_post(directory, "third-post", "Third Post", "2022-03-15")
    return directory


class FakeMongo:
    """Stands in for pymongo.MongoClient; records what the app does with it"""

    def __init__(self):
        self.fail_connect = False
        self.fail_insert = False
        self.clients = []
        self.inserted = []

    def __call__(self, uri, **kwargs):
        client = _FakeClient(self, uri, kwargs)
        self.clients.append(client)
        return client

    @property
    def open_clients(self):
        return [client for client in self.clients if not client.closed]


class _FakeClient:
    def __init__(self, mongo, uri, kwargs):
        self.mongo = mongo
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        self.admin = self

    def command(self, name):
        if self.mongo.fail_connect:
            raise ServerSelectionTimeoutError("no servers available")
        return {"ok": 1}

    def get_default_database(self):
        return _FakeDatabase(self.mongo, "blog")

    def __getitem__(self, name):
        return _FakeDatabase(self.mongo, name)

    def close(self):
        self.closed = True


class _FakeDatabase:
    def __init__(self, mongo, name):
        self.mongo = mongo
        self.name = name

    def __getitem__(self, collection):
        return _FakeCollection(self.mongo, self.name, collection)

    def list_collection_names(self):
        return sorted({collection for _, collection, _ in self.mongo.inserted})


class _InsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class _FakeCollection:
    def __init__(self, mongo, database, name):
        self.mongo = mongo
        self.database = database
        self.name = name

    def insert_one(self, document):
        if self.mongo.fail_insert:
            raise OperationFailure("insert not allowed")
        inserted_id = ObjectId()
        self.mongo.inserted.append((self.database, self.name, dict(document)))
        return _InsertResult(inserted_id)


@pytest.fixture
def fake_mongo(monkeypatch):
    mongo = FakeMongo()
    monkeypatch.setattr(database, "MongoClient", mongo)
    return mongo


@pytest.fixture
def settings(posts_dir):
    return Settings(
        mongo_uri="mongodb://db.test:27017/blog",
        posts_dir=posts_dir,
        posts_revalidate_seconds=1800,
    )


@pytest.fixture
def client(settings, fake_mongo):
    """Test client for an app built from the test settings"""
    with TestClient(create_app(settings)) as test_client:
        yield test_client
