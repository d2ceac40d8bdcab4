import mongomock
import pytest

import database


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["herreria_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def no_db(monkeypatch):
    monkeypatch.setattr(database, "db", None)


@pytest.fixture
def colonial_door():
    return {
        "name": "Puerta Colonial",
        "image": "https://x/y.jpg",
        "category": "puertas",
        "subcategory": "Puertas Clásicas",
        "price": "$850",
    }
