"""Shared pytest fixtures for Travelly tests."""
import sys
sys.dont_write_bytecode = True

import pytest  # noqa: E402

from helpers import FixedClock, make_customer, make_rate_card  # noqa: E402
from travelly.infra.storage import InMemoryStorage  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_storage_singleton():
    """Reset the API storage singleton to avoid cross-test contamination."""
    from travelly.api.deps import reset_storage

    reset_storage()
    yield
    reset_storage()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def customer(storage):
    return storage.add_customer(make_customer())


@pytest.fixture
def rate_card(storage):
    """basePrice=200, markup=20% -> 240 per night."""
    return storage.add_rate_card(make_rate_card())


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def client(storage):
    """TestClient bound to the in-memory storage fixture."""
    from fastapi.testclient import TestClient

    from travelly.api.factory import create_app

    return TestClient(create_app(storage=storage))
