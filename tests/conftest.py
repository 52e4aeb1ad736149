"""
Pytest configuration and shared fixtures.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_book_service
from api.service import BookService
from api.storage import JSONFileStorage


@pytest.fixture
def sample_books():
    """A small stored collection in ascending id order."""
    return [
        {"id": 1, "title": "A", "author": "X"},
        {"id": 2, "title": "Dune", "author": "Frank Herbert", "year": 1965},
    ]


@pytest.fixture
def data_file(tmp_path):
    """Path of a not-yet-created data file."""
    return tmp_path / "books.json"


@pytest.fixture
def file_storage(data_file):
    return JSONFileStorage(data_file)


@pytest.fixture
def book_service(file_storage):
    """Service over a temporary JSON file using the default error policy."""
    return BookService(file_storage)


@pytest.fixture
def make_client():
    """Build a test client bound to a given service."""
    def _make(service: BookService) -> TestClient:
        app.dependency_overrides[get_book_service] = lambda: service
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, book_service):
    """Test client backed by an empty temporary JSON file."""
    return make_client(book_service)
