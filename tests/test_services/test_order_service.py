"""
Tests for OrderService: the order aggregate rules
"""
from decimal import Decimal
from unittest.mock import patch

import pytest
from sqlalchemy import text

from orders_api.core.errors import (
    ConflictError,
    InvalidInputError,
    InvalidOperationError,
    NotFoundError,
)
from orders_api.domain.order import OrderCreate, OrderItemCreate
from orders_api.models import Order as OrderRecord, OrderItem as OrderItemRecord
from orders_api.repositories import OrderItemRepository
from orders_api.services.order_service import OrderService
from orders_api.services.product_service import ProductService


@pytest.fixture
def catalog(factory):
    """One customer and a supplier with two active products and a discontinued one"""
    supplier = factory.supplier()
    return {
        "customer": factory.customer(),
        "x": factory.product(supplier, product_name="Chai", unit_price="9.99"),
        "y": factory.product(supplier, product_name="Chang", unit_price="5.00"),
        "old": factory.product(supplier, product_name="Aniseed Syrup", unit_price="10.00",
                               is_discontinued=True),
    }


@pytest.fixture
def service(db, clock):
    return OrderService(db, clock=clock)


def place(service, catalog, *lines):
    """Create an order for the catalog customer; lines are (product key, quantity)"""
    return service.create_order(OrderCreate(
        customer_id=catalog["customer"].id,
        items=[OrderItemCreate(product_id=catalog[key].id, quantity=qty) for key, qty in lines],
    ))


def count(db, model):
    return db.query(model).count()


class TestCreateOrder:
    """Order creation"""

    def test_total_is_sum_of_captured_prices(self, service, catalog, clock):
        """Scenario: 2 x 9.99 + 1 x 5.00"""
        order = place(service, catalog, ("x", 2), ("y", 1))

        assert order.total_amount == Decimal("24.98")
        assert order.order_number.startswith("ORD20250310120000")
        assert len(order.order_number) == len("ORD") + 14 + 4
        assert order.item_count == 2
        assert order.total_quantity == 3
        assert order.customer_name == "Maria Anders"
        assert [item.product_name for item in order.items] == ["Chai", "Chang"]
        assert [item.unit_price for item in order.items] == [Decimal("9.99"), Decimal("5.00")]

    def test_order_date_is_creation_instant(self, service, catalog, clock):
        order = place(service, catalog, ("x", 1))

        assert order.order_date.replace(tzinfo=None) == clock.now.replace(tzinfo=None)

    def test_order_numbers_are_unique(self, service, catalog):
        first = place(service, catalog, ("x", 1))
        second = place(service, catalog, ("x", 1))

        assert first.order_number != second.order_number

    def test_unknown_customer(self, db, service, catalog):
        with pytest.raises(NotFoundError):
            service.create_order(OrderCreate(
                customer_id=999, items=[OrderItemCreate(product_id=catalog["x"].id, quantity=1)]
            ))

        assert count(db, OrderRecord) == 0

    def test_empty_item_list(self, service, catalog):
        with pytest.raises(InvalidInputError, match="at least one item"):
            service.create_order(OrderCreate(customer_id=catalog["customer"].id, items=[]))

    def test_discontinued_product_is_rejected(self, db, service, catalog):
        """Scenario: nothing is persisted"""
        with pytest.raises(InvalidOperationError, match="discontinued"):
            place(service, catalog, ("x", 1), ("old", 1))

        assert count(db, OrderRecord) == 0
        assert count(db, OrderItemRecord) == 0

    def test_quantity_below_one(self, db, service, catalog):
        with pytest.raises(InvalidInputError):
            place(service, catalog, ("x", 0))

        assert count(db, OrderRecord) == 0

    def test_failed_create_is_idempotent(self, db, service, catalog):
        """Repeating a failing create never leaves records behind"""
        request = OrderCreate(
            customer_id=catalog["customer"].id,
            items=[
                OrderItemCreate(product_id=catalog["x"].id, quantity=1),
                OrderItemCreate(product_id=12345, quantity=1),
            ],
        )

        for _ in range(2):
            with pytest.raises(NotFoundError):
                service.create_order(request)

        assert count(db, OrderRecord) == 0
        assert count(db, OrderItemRecord) == 0

    def test_price_change_does_not_touch_existing_items(self, db, service, catalog):
        order = place(service, catalog, ("x", 2))

        ProductService(db).change_price(catalog["x"].id, Decimal("12.50"))

        reloaded = service.get_order(order.id)
        assert reloaded.items[0].unit_price == Decimal("9.99")
        assert reloaded.total_amount == Decimal("19.98")

    def test_order_number_collision_is_retried(self, db, catalog, clock):
        taken = OrderService(db, clock=clock, number_generator=lambda _: "ORD-TAKEN")
        place(taken, catalog, ("x", 1))

        numbers = iter(["ORD-TAKEN", "ORD-FREE"])
        retrying = OrderService(db, clock=clock, number_generator=lambda _: next(numbers))
        order = place(retrying, catalog, ("y", 3))

        assert order.order_number == "ORD-FREE"
        assert order.total_amount == Decimal("15.00")
        assert count(db, OrderRecord) == 2

    def test_order_number_retries_are_bounded(self, db, catalog, clock):
        place(OrderService(db, clock=clock, number_generator=lambda _: "ORD-TAKEN"), catalog, ("x", 1))

        stuck = OrderService(db, clock=clock, number_generator=lambda _: "ORD-TAKEN")
        with pytest.raises(ConflictError):
            place(stuck, catalog, ("y", 1))

        assert count(db, OrderRecord) == 1
        assert count(db, OrderItemRecord) == 1


class TestUpdateItemQuantity:
    """Quantity changes inside and outside the edit window"""

    def test_total_follows_quantity(self, service, catalog, clock):
        """Scenario: 2 -> 5 three hours after creation"""
        order = place(service, catalog, ("x", 2), ("y", 1))
        item = order.items[0]

        clock.advance(hours=3)
        service.update_item_quantity(item.id, 5)

        updated = service.get_order(order.id)
        assert updated.items[0].quantity == 5
        assert updated.total_amount == Decimal("24.98") + Decimal("9.99") * 3
        assert updated.total_amount == sum(i.unit_price * i.quantity for i in updated.items)

    def test_edit_window_closed(self, service, catalog, clock):
        order = place(service, catalog, ("x", 2))

        clock.advance(hours=25)
        with pytest.raises(InvalidOperationError, match="24 hours"):
            service.update_item_quantity(order.items[0].id, 5)

        assert service.get_order(order.id).total_amount == Decimal("19.98")

    def test_exactly_at_window_end_is_still_open(self, service, catalog, clock):
        order = place(service, catalog, ("x", 2))

        clock.advance(hours=24)
        service.update_item_quantity(order.items[0].id, 1)

        assert service.get_order(order.id).total_amount == Decimal("9.99")

    def test_quantity_below_one(self, service, catalog):
        order = place(service, catalog, ("x", 2))

        with pytest.raises(InvalidInputError):
            service.update_item_quantity(order.items[0].id, 0)

    def test_unknown_item(self, service, catalog):
        with pytest.raises(NotFoundError):
            service.update_item_quantity(404, 3)

    def test_invalid_item_id(self, service):
        with pytest.raises(InvalidInputError, match="Invalid order item ID"):
            service.update_item_quantity(0, 3)

    def test_concurrent_order_change_is_a_conflict(self, db, service, catalog):
        order = place(service, catalog, ("x", 2), ("y", 1))
        load = OrderItemRepository.get_with_order

        def load_then_bump_version(repo, item_id):
            record = load(repo, item_id)
            repo.db.execute(
                text("UPDATE orders SET version = version + 1 WHERE id = :id"),
                {"id": record.order_id},
            )
            return record

        with patch.object(OrderItemRepository, "get_with_order", autospec=True,
                          side_effect=load_then_bump_version):
            with pytest.raises(ConflictError):
                service.update_item_quantity(order.items[0].id, 7)

        unchanged = service.get_order(order.id)
        assert unchanged.items[0].quantity == 2
        assert unchanged.total_amount == Decimal("24.98")


class TestDeleteItem:
    """Item removal"""

    def test_total_drops_by_line_total(self, db, service, catalog):
        order = place(service, catalog, ("x", 2), ("y", 1))

        service.delete_item(order.items[1].id)

        updated = service.get_order(order.id)
        assert updated.item_count == 1
        assert updated.total_amount == Decimal("19.98")

    def test_last_item_cannot_be_deleted(self, db, service, catalog):
        """Scenario: delete the whole order instead"""
        order = place(service, catalog, ("x", 2))

        with pytest.raises(InvalidOperationError, match="last item"):
            service.delete_item(order.items[0].id)

        service.delete_order(order.id)

        assert count(db, OrderRecord) == 0
        assert count(db, OrderItemRecord) == 0

    def test_edit_window_closed(self, service, catalog, clock):
        order = place(service, catalog, ("x", 2), ("y", 1))

        clock.advance(days=2)
        with pytest.raises(InvalidOperationError):
            service.delete_item(order.items[1].id)

        assert service.get_order(order.id).item_count == 2


class TestDeleteOrder:

    def test_cascades_to_items(self, db, service, catalog):
        order = place(service, catalog, ("x", 2), ("y", 1))
        other = place(service, catalog, ("y", 4))

        service.delete_order(order.id)

        assert count(db, OrderRecord) == 1
        assert [item.order_id for item in service.items_of_order(other.id)] == [other.id]

    def test_unknown_order(self, service):
        with pytest.raises(NotFoundError):
            service.delete_order(77)

    def test_edit_window_closed(self, db, service, catalog, clock):
        order = place(service, catalog, ("x", 2))

        clock.advance(hours=30)
        with pytest.raises(InvalidOperationError):
            service.delete_order(order.id)

        assert count(db, OrderRecord) == 1


class TestOrderQueries:

    def test_list_filters_and_orders_newest_first(self, service, catalog, clock):
        first = place(service, catalog, ("x", 1))
        clock.advance(hours=1)
        second = place(service, catalog, ("x", 10))

        page = service.list_orders()
        assert [order.id for order in page.items] == [second.id, first.id]

        expensive = service.list_orders(min_amount=Decimal("50"))
        assert [order.id for order in expensive.items] == [second.id]
        assert expensive.total_count == 1

    def test_amount_range_validation(self, service):
        with pytest.raises(InvalidInputError, match="cannot be negative"):
            service.list_orders(min_amount=Decimal("-1"))
        with pytest.raises(InvalidInputError, match="cannot be greater"):
            service.list_orders(min_amount=Decimal("10"), max_amount=Decimal("5"))

    def test_date_range_validation(self, service, clock):
        with pytest.raises(InvalidInputError, match="From date"):
            service.list_orders(date_from=clock.now, date_to=clock.now.replace(year=2024))

    def test_recent_orders(self, service, catalog, clock):
        old = place(service, catalog, ("x", 1))
        clock.advance(days=10)
        new = place(service, catalog, ("x", 1))

        assert [order.id for order in service.recent_orders(7)] == [new.id]
        assert {order.id for order in service.recent_orders(30)} == {old.id, new.id}

        with pytest.raises(InvalidInputError):
            service.recent_orders(0)
        with pytest.raises(InvalidInputError):
            service.recent_orders(366)

    def test_lookup_by_number(self, service, catalog):
        order = place(service, catalog, ("x", 1))

        assert service.get_order_by_number(order.order_number).id == order.id
        with pytest.raises(NotFoundError):
            service.get_order_by_number("ORD000")

    def test_orders_of_unknown_customer(self, service):
        with pytest.raises(NotFoundError):
            service.orders_of_customer(55)
