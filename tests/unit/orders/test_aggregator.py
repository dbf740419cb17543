"""Unit tests for OrderAggregator against the in-memory backend.

Covers:
- Ordering by descending sequence number.
- One batched round trip per relation.
- Placeholder substitution for missing clients and products.
- Derived subtotal and total item count.
- Whole-load abort on any fetch failure.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import uuid4

import pytest
from asgiref.sync import async_to_sync

from modules.orders.aggregator import OrderAggregator
from modules.orders.constants import MISSING_CLIENT_NAME, MISSING_PRODUCT_NAME
from modules.orders.exceptions import FetchFailure, OrderNotFound

pytestmark = pytest.mark.unit


@pytest.fixture()
def aggregator(order_repo, client_repo, product_repo):
    return OrderAggregator(order_repo, client_repo, product_repo)


@pytest.fixture()
def catalog(backend, supplier_id):
    ana = backend.add_client(name="Ana Torres")
    shirt = backend.add_product(name="Shirt-M", quantity=10, supplier_id=supplier_id)
    jeans = backend.add_product(name="Jeans-32", quantity=4, supplier_id=supplier_id)
    return ana, shirt, jeans


def _load(aggregator, supplier_id):
    return async_to_sync(aggregator.load_orders)(supplier_id)


class TestLoadOrders:
    def test_orders_sorted_by_sequence_number_descending(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, _, _ = catalog
        for number in (3, 11, 7):
            backend.add_order(
                supplier_id=supplier_id, client_id=ana.id, sequence_number=number
            )

        views = _load(aggregator, supplier_id)

        assert [v.sequence_number for v in views] == [11, 7, 3]

    def test_only_supplier_orders_are_returned(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, _, _ = catalog
        backend.add_order(supplier_id=supplier_id, client_id=ana.id, sequence_number=1)
        backend.add_order(supplier_id=uuid4(), client_id=ana.id, sequence_number=2)

        views = _load(aggregator, supplier_id)

        assert [v.sequence_number for v in views] == [1]

    def test_no_orders_skips_the_other_relations(self, aggregator, backend, supplier_id):
        assert _load(aggregator, supplier_id) == []
        assert backend.calls == ["orders.list_for_supplier"]

    def test_each_relation_fetched_once(self, aggregator, backend, supplier_id, catalog):
        ana, shirt, jeans = catalog
        for number in range(1, 6):
            order = backend.add_order(
                supplier_id=supplier_id, client_id=ana.id, sequence_number=number
            )
            backend.add_detail(order_id=order.id, product_id=shirt.id, quantity=1)
            backend.add_detail(order_id=order.id, product_id=jeans.id, quantity=2)

        _load(aggregator, supplier_id)

        assert backend.calls == [
            "orders.list_for_supplier",
            "clients.get_many",
            "order_details.list",
            "products.get_many",
        ]

    def test_orders_without_details_skip_product_fetch(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, _, _ = catalog
        backend.add_order(supplier_id=supplier_id, client_id=ana.id, sequence_number=1)

        views = _load(aggregator, supplier_id)

        assert views[0].details == []
        assert views[0].total_items == 0
        assert backend.count("products.get_many") == 0

    def test_joins_client_details_and_products(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, shirt, jeans = catalog
        order = backend.add_order(
            supplier_id=supplier_id,
            client_id=ana.id,
            sequence_number=7,
            tracking_code="TRK-7",
        )
        backend.add_detail(order_id=order.id, product_id=shirt.id, quantity=3)
        backend.add_detail(order_id=order.id, product_id=jeans.id, quantity=1)

        view = _load(aggregator, supplier_id)[0]

        assert view.client.name == "Ana Torres"
        assert view.client.is_placeholder is False
        assert view.tracking_code == "TRK-7"
        assert [d.product.name for d in view.details] == ["Shirt-M", "Jeans-32"]
        assert view.total_items == 4
        assert view.can_transition is True

    def test_terminal_orders_cannot_transition(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, _, _ = catalog
        backend.add_order(
            supplier_id=supplier_id,
            client_id=ana.id,
            sequence_number=1,
            status="confirmed",
        )

        assert _load(aggregator, supplier_id)[0].can_transition is False

    def test_subtotal_derived_when_not_stored(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, shirt, jeans = catalog
        order = backend.add_order(
            supplier_id=supplier_id, client_id=ana.id, sequence_number=1
        )
        backend.add_detail(
            order_id=order.id,
            product_id=shirt.id,
            quantity=3,
            unit_price=Decimal("12.50"),
        )
        backend.add_detail(
            order_id=order.id,
            product_id=jeans.id,
            quantity=2,
            unit_price=Decimal("40.00"),
            subtotal=Decimal("75.00"),
        )

        details = _load(aggregator, supplier_id)[0].details

        assert details[0].subtotal == Decimal("37.50")
        assert details[1].subtotal == Decimal("75.00")


class TestPlaceholders:
    def test_missing_product_gets_placeholder(
        self, aggregator, backend, supplier_id, catalog
    ):
        ana, shirt, _ = catalog
        gone = uuid4()
        order = backend.add_order(
            supplier_id=supplier_id, client_id=ana.id, sequence_number=1
        )
        backend.add_detail(order_id=order.id, product_id=shirt.id, quantity=1)
        backend.add_detail(order_id=order.id, product_id=gone, quantity=2)

        view = _load(aggregator, supplier_id)[0]

        assert len(view.details) == 2
        missing = view.details[1]
        assert missing.product.name == MISSING_PRODUCT_NAME
        assert missing.product.is_placeholder is True
        assert missing.product.id == gone
        assert missing.quantity == 2
        assert view.total_items == 3

    def test_missing_client_gets_placeholder(self, aggregator, backend, supplier_id):
        backend.add_order(supplier_id=supplier_id, client_id=uuid4(), sequence_number=1)

        view = _load(aggregator, supplier_id)[0]

        assert view.client.name == MISSING_CLIENT_NAME
        assert view.client.phone == "N/A"
        assert view.client.is_placeholder is True


class TestFetchFailures:
    @pytest.mark.parametrize(
        "operation, relation",
        [
            ("orders.list_for_supplier", "orders"),
            ("clients.get_many", "clients"),
            ("order_details.list", "order_details"),
            ("products.get_many", "products"),
        ],
    )
    def test_any_failed_fetch_aborts_the_load(
        self, aggregator, backend, supplier_id, catalog, operation, relation
    ):
        ana, shirt, _ = catalog
        order = backend.add_order(
            supplier_id=supplier_id, client_id=ana.id, sequence_number=1
        )
        backend.add_detail(order_id=order.id, product_id=shirt.id, quantity=1)
        backend.fail_on.add(operation)

        with pytest.raises(FetchFailure) as exc_info:
            _load(aggregator, supplier_id)

        assert exc_info.value.relation == relation


class TestLoadOrder:
    def test_single_order_is_assembled(self, aggregator, backend, supplier_id, catalog):
        ana, shirt, _ = catalog
        order = backend.add_order(
            supplier_id=supplier_id, client_id=ana.id, sequence_number=4
        )
        backend.add_detail(order_id=order.id, product_id=shirt.id, quantity=2)

        view = async_to_sync(aggregator.load_order)(order.id)

        assert view.id == order.id
        assert view.supplier_id == supplier_id
        assert view.details[0].product.name == "Shirt-M"

    def test_unknown_order_raises(self, aggregator):
        with pytest.raises(OrderNotFound):
            async_to_sync(aggregator.load_order)(uuid4())
