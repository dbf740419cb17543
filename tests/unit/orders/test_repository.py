"""Unit tests for the Django ORM repositories used by the fulfillment engine."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from unittest import mock
from uuid import uuid4

import pytest
from asgiref.sync import async_to_sync
from django.db import DatabaseError

from modules.clients.models import Client
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.exceptions import BackendError
from modules.orders.models import Order, OrderDetail
from modules.orders.guard import ConcurrencyGuard
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import build_fulfillment_service
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def supplier():
    return uuid4()


@pytest.fixture()
def shirt(supplier):
    return Product.objects.create(
        supplier_id=supplier,
        name="Shirt-M",
        quantity=10,
        price=Decimal("35.00"),
        size="M",
        category="Polos",
    )


@pytest.fixture()
def client_row():
    return Client.objects.create(name="Ana Torres", phone="+51 987 654 321")


@pytest.fixture()
def pending_order(supplier, client_row, shirt):
    order = Order.objects.create(
        supplier_id=supplier,
        client_id=client_row.id,
        sequence_number=7,
        tracking_code="TRK-7",
    )
    OrderDetail.objects.create(
        order_id=order.id,
        product_id=shirt.id,
        quantity=3,
        unit_price=shirt.price,
        size="M",
    )
    return order


class TestOrderRepository:
    def test_list_for_supplier_newest_first(self, supplier, client_row):
        for number in (1, 3, 2):
            Order.objects.create(
                supplier_id=supplier, client_id=client_row.id, sequence_number=number
            )
        Order.objects.create(
            supplier_id=uuid4(), client_id=client_row.id, sequence_number=9
        )

        orders = async_to_sync(OrderDjangoRepository().list_for_supplier)(supplier)

        assert [o.sequence_number for o in orders] == [3, 2, 1]

    def test_get_status(self, pending_order):
        repo = OrderDjangoRepository()

        assert async_to_sync(repo.get_status)(pending_order.id) == "pending"
        assert async_to_sync(repo.get_status)(uuid4()) is None

    def test_list_details_batches_orders(self, pending_order, supplier, client_row, shirt):
        other = Order.objects.create(
            supplier_id=supplier, client_id=client_row.id, sequence_number=8
        )
        OrderDetail.objects.create(
            order_id=other.id, product_id=shirt.id, quantity=1, unit_price=shirt.price
        )

        details = async_to_sync(OrderDjangoRepository().list_details)(
            [pending_order.id, other.id]
        )

        assert {d.order_id for d in details} == {pending_order.id, other.id}

    def test_list_details_of_nothing(self):
        assert async_to_sync(OrderDjangoRepository().list_details)([]) == []

    def test_update_status_matches_pending(self, pending_order):
        moment = datetime(2026, 3, 1, 9, 30, tzinfo=dt_timezone.utc)

        written = async_to_sync(OrderDjangoRepository().update_status)(
            pending_order.id, "confirmed", expected_status="pending", updated_at=moment
        )

        pending_order.refresh_from_db()
        assert written is True
        assert pending_order.status == "confirmed"
        assert pending_order.updated_at == moment

    def test_update_status_rejected_when_not_pending(self, pending_order):
        Order.objects.filter(id=pending_order.id).update(status="cancelled")

        written = async_to_sync(OrderDjangoRepository().update_status)(
            pending_order.id,
            "confirmed",
            expected_status="pending",
            updated_at=datetime.now(dt_timezone.utc),
        )

        pending_order.refresh_from_db()
        assert written is False
        assert pending_order.status == "cancelled"

    def test_database_error_becomes_backend_error(self, pending_order):
        with mock.patch.object(
            Order.objects, "filter", side_effect=DatabaseError("connection reset")
        ):
            with pytest.raises(BackendError) as exc_info:
                async_to_sync(OrderDjangoRepository().get_status)(pending_order.id)

        assert exc_info.value.operation == "orders.get_status"


class TestProductRepository:
    def test_increment_quantity(self, shirt):
        matched = async_to_sync(ProductDjangoRepository().increment_quantity)(
            shirt.id, 3
        )

        shirt.refresh_from_db()
        assert matched is True
        assert shirt.quantity == 13

    def test_increment_unknown_product(self):
        assert async_to_sync(ProductDjangoRepository().increment_quantity)(
            uuid4(), 3
        ) is False

    def test_negative_delta_cannot_go_below_zero(self, shirt):
        matched = async_to_sync(ProductDjangoRepository().increment_quantity)(
            shirt.id, -11
        )

        shirt.refresh_from_db()
        assert matched is False
        assert shirt.quantity == 10

    def test_get_and_set_quantity(self, shirt):
        repo = ProductDjangoRepository()

        assert async_to_sync(repo.get_quantity)(shirt.id) == 10
        assert async_to_sync(repo.set_quantity)(shirt.id, 14) is True
        shirt.refresh_from_db()
        assert shirt.quantity == 14
        assert async_to_sync(repo.get_quantity)(uuid4()) is None

    def test_get_many_without_ids_skips_the_query(self, django_assert_num_queries):
        with django_assert_num_queries(0):
            assert async_to_sync(ProductDjangoRepository().get_many)([]) == []

    def test_list_for_supplier_sorted_by_name(self, supplier, shirt):
        Product.objects.create(
            supplier_id=supplier, name="Anorak", quantity=1, price=Decimal("99.00")
        )
        Product.objects.create(
            supplier_id=uuid4(), name="Beanie", quantity=1, price=Decimal("9.00")
        )

        products = async_to_sync(ProductDjangoRepository().list_for_supplier)(supplier)

        assert [p.name for p in products] == ["Anorak", "Shirt-M"]

    def test_delete_is_scoped_to_supplier(self, supplier, shirt):
        repo = ProductDjangoRepository()

        assert async_to_sync(repo.delete_for_supplier)(uuid4(), shirt.id) is False
        assert Product.objects.filter(id=shirt.id).exists()
        assert async_to_sync(repo.delete_for_supplier)(supplier, shirt.id) is True
        assert not Product.objects.filter(id=shirt.id).exists()


class TestClientRepository:
    def test_get_many_returns_found_rows_only(self, client_row):
        clients = async_to_sync(ClientDjangoRepository().get_many)(
            [client_row.id, uuid4()]
        )

        assert [c.id for c in clients] == [client_row.id]

    def test_get_by_id(self, client_row):
        repo = ClientDjangoRepository()

        assert async_to_sync(repo.get_by_id)(client_row.id).name == "Ana Torres"
        assert async_to_sync(repo.get_by_id)(uuid4()) is None


class TestFulfillmentOverDjango:
    def test_mixed_id_forms_restore_stock_once(self, pending_order, shirt):
        service = build_fulfillment_service(guard=ConcurrencyGuard())
        view = async_to_sync(service.load_order)(pending_order.id)

        async def both():
            return await asyncio.gather(
                service.transition(
                    pending_order.id, "cancelled", view.details, 7, "TRK-7"
                ),
                service.transition(
                    str(pending_order.id), "cancelled", view.details, 7, "TRK-7"
                ),
            )

        results = async_to_sync(both)()

        shirt.refresh_from_db()
        pending_order.refresh_from_db()
        assert sorted(r.outcome.value for r in results) == ["completed", "rejected"]
        assert shirt.quantity == 13
        assert pending_order.status == "cancelled"
