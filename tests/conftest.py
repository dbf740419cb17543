from uuid import uuid4

import pytest

from rest_framework.test import APIClient

from modules.orders.guard import ConcurrencyGuard
from modules.orders.services import OrderFulfillmentService
from tests.fakes import (
    Backend,
    FakeClientRepository,
    FakeOrderRepository,
    FakeProductRepository,
)


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# In-memory backend
# ---------------------------------------------------------------------------


@pytest.fixture()
def supplier_id():
    return uuid4()


@pytest.fixture()
def backend():
    return Backend()


@pytest.fixture()
def order_repo(backend):
    return FakeOrderRepository(backend)


@pytest.fixture()
def client_repo(backend):
    return FakeClientRepository(backend)


@pytest.fixture()
def product_repo(backend):
    return FakeProductRepository(backend)


@pytest.fixture()
def guard():
    return ConcurrencyGuard()


@pytest.fixture()
def service(order_repo, client_repo, product_repo, guard):
    return OrderFulfillmentService(
        order_repository=order_repo,
        client_repository=client_repo,
        product_repository=product_repo,
        guard=guard,
        restore_mode="atomic",
    )
