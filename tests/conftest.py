"""Shared pytest fixtures and configuration."""

import os
from types import SimpleNamespace

import pytest

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-with-enough-length")

from fastapi.testclient import TestClient  # noqa: E402

from app.config import get_settings  # noqa: E402
from app.main import app  # noqa: E402
from app.middleware.auth import create_access_token  # noqa: E402
from app.services.favorite_store import get_favorite_store  # noqa: E402
from app.services.payments import get_payment_gateway, StubPaymentGateway  # noqa: E402
from app.services.property_store import get_property_store  # noqa: E402
from app.services.transaction_store import get_transaction_store  # noqa: E402
from app.services.user_store import get_user_store  # noqa: E402
from tests.utils.stores import (  # noqa: E402
    MemoryFavoriteStore,
    MemoryPropertyStore,
    MemoryTransactionStore,
    MemoryUserStore,
)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def stores():
    """Fresh in-memory stores for one test."""
    return SimpleNamespace(
        users=MemoryUserStore(),
        properties=MemoryPropertyStore(),
        favorites=MemoryFavoriteStore(),
        transactions=MemoryTransactionStore(),
        gateway=StubPaymentGateway(),
    )


@pytest.fixture
def client(stores):
    """Test client with every store replaced by its in-memory version."""
    app.dependency_overrides[get_user_store] = lambda: stores.users
    app.dependency_overrides[get_property_store] = lambda: stores.properties
    app.dependency_overrides[get_favorite_store] = lambda: stores.favorites
    app.dependency_overrides[get_transaction_store] = lambda: stores.transactions
    app.dependency_overrides[get_payment_gateway] = lambda: stores.gateway

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(stores, settings):
    """Create a user directly in the store; returns (user, auth headers)."""
    phones = iter(f"07{n:08d}" for n in range(10000000, 10001000))

    def _make(user_type="tenant", full_name="Test User", **extra):
        user = stores.users.create({
            "full_name": full_name,
            "phone_number": extra.pop("phone_number", next(phones)),
            "user_type": user_type,
            **extra,
        })
        token = create_access_token(user["id"], settings)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def landlord(make_user):
    return make_user("landlord", full_name="Jane Wanjiru")


@pytest.fixture
def tenant(make_user):
    return make_user("tenant", full_name="Otieno Tenant")


@pytest.fixture
def sample_property():
    """Valid create-property payload."""
    return {
        "title": "Cozy Studio",
        "description": "Bright studio close to the stage with reliable water",
        "location": "Ruaka",
        "area": "Ndenderu",
        "nearby": ["Two Rivers Mall"],
        "property_type": "studio",
        "price": 15000,
        "amenities": ["water", "security"],
        "rules": {"pets": False, "children": True, "visitors": "allowed", "deposit_months": 1},
    }


@pytest.fixture
def create_listing(client, sample_property):
    """POST a listing through the API and return the created property."""

    def _create(headers, **overrides):
        response = client.post("/api/v1/properties", json={**sample_property, **overrides}, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()["data"]["property"]

    return _create
