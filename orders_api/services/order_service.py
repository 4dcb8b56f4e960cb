"""
Order Service - Aggregate rules for orders and their line items

An order and its items are one consistency boundary:
- total_amount always equals the sum of unit_price x quantity of its items
- each item's unit_price is the product price copied at creation time
- an order keeps at least one item; items change only inside the edit window

Every mutation runs in one unit of work, so the item and its order's total
are committed together or not at all.
"""
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from orders_api.core.clock import as_utc, utcnow
from orders_api.core.config import settings
from orders_api.core.errors import (
    ConflictError,
    InvalidInputError,
    InvalidOperationError,
    NotFoundError,
)
from orders_api.domain.order import Order, OrderCreate, OrderItem
from orders_api.domain.pagination import Page
from orders_api.models import Order as OrderRecord, OrderItem as OrderItemRecord
from orders_api.repositories import (
    CustomerRepository,
    OrderItemRepository,
    OrderRepository,
    ProductRepository,
)
from orders_api.services.order_numbers import generate_order_number
from orders_api.services.query import (
    PageRequest,
    validate_amount_range,
    validate_date_range,
    validate_days,
    validate_id,
)
from orders_api.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class OrderService:
    """
    Service for creating, mutating and reading orders

    Args:
        db: Session used for the whole call
        clock: Returns the current UTC instant (injectable for tests)
        number_generator: Builds an order number from the creation instant
    """

    def __init__(
        self,
        db: Session,
        clock: Callable[[], datetime] = utcnow,
        number_generator: Callable[[datetime], str] = generate_order_number,
    ):
        self.db = db
        self.clock = clock
        self.number_generator = number_generator
        self.orders = OrderRepository(db)
        self.items = OrderItemRepository(db)
        self.customers = CustomerRepository(db)
        self.products = ProductRepository(db)

    # ========================================================================
    # Commands
    # ========================================================================

    def create_order(self, data: OrderCreate) -> Order:
        """
        Create an order with its items as one atomic unit

        Items are validated in input order; the first failing item aborts
        the whole order and nothing is persisted.

        Raises:
            NotFoundError: Customer or a product does not exist
            InvalidInputError: Empty item list or quantity below 1
            InvalidOperationError: A product is discontinued
            ConflictError: No unique order number after the retry budget
        """
        with unit_of_work(self.db):
            if not self.customers.exists(data.customer_id):
                raise NotFoundError(f"Customer with ID {data.customer_id} not found.")

            if not data.items:
                raise InvalidInputError("Order must contain at least one item.")

            items = []
            for requested in data.items:
                product = self.products.get(requested.product_id)
                if product is None:
                    raise NotFoundError(f"Product with ID {requested.product_id} not found.")
                if product.is_discontinued:
                    raise InvalidOperationError(
                        f"Product '{product.product_name}' is discontinued and cannot be ordered."
                    )
                if requested.quantity < 1:
                    raise InvalidInputError("Quantity must be greater than 0.")

                items.append(OrderItemRecord(
                    product_id=product.id,
                    unit_price=product.unit_price,
                    quantity=requested.quantity,
                ))

            created_at = self.clock()
            record = OrderRecord(
                customer_id=data.customer_id,
                order_date=created_at,
                total_amount=sum(
                    (item.unit_price * item.quantity for item in items), Decimal("0.00")
                ),
                items=items,
            )
            self._insert_with_unique_number(record, created_at)
            order_id = record.id
            order_number = record.order_number

        logger.info(f"Order {order_number} created for customer {data.customer_id}")
        return self.orders.find_by_id(order_id)

    def _insert_with_unique_number(self, record: OrderRecord, created_at: datetime) -> None:
        """
        Insert the order inside a savepoint, regenerating the number on collision

        Only a collision on order_number is retried; any other integrity
        error propagates to the unit of work.
        """
        for attempt in range(1, settings.ORDER_NUMBER_MAX_RETRIES + 1):
            record.order_number = self.number_generator(created_at)
            try:
                with self.db.begin_nested():
                    self.db.add(record)
                    self.db.flush()
                return
            except IntegrityError:
                if not self.orders.number_exists(record.order_number):
                    raise
                logger.warning(
                    f"Order number collision on {record.order_number} "
                    f"(attempt {attempt}/{settings.ORDER_NUMBER_MAX_RETRIES})"
                )

        raise ConflictError("Could not generate a unique order number. Please retry.")

    def update_item_quantity(self, item_id: int, quantity: int) -> None:
        """
        Change the quantity of one item and re-derive its order's total

        Raises:
            NotFoundError: Item does not exist (or vanished concurrently)
            InvalidOperationError: Edit window closed
            InvalidInputError: Quantity below 1
            ConflictError: Item or order changed concurrently
        """
        validate_id(item_id, "order item")

        with unit_of_work(self.db, on_conflict=lambda: self._ensure_item_exists(item_id)):
            item = self._get_item_for_update(item_id)
            self._check_edit_window(item.order)

            if quantity < 1:
                raise InvalidInputError("Quantity must be greater than 0.")

            old_quantity = item.quantity
            order = item.order
            order.total_amount = order.total_amount + item.unit_price * (quantity - old_quantity)
            item.quantity = quantity

        logger.info(f"Order item {item_id} quantity changed from {old_quantity} to {quantity}")

    def delete_item(self, item_id: int) -> None:
        """
        Remove one item and subtract its line total from the order

        Raises:
            NotFoundError: Item does not exist
            InvalidOperationError: Edit window closed, or it is the last item
            ConflictError: Item or order changed concurrently
        """
        validate_id(item_id, "order item")

        with unit_of_work(self.db, on_conflict=lambda: self._ensure_item_exists(item_id)):
            item = self._get_item_for_update(item_id)
            self._check_edit_window(item.order)

            if self.items.count_for_order(item.order_id) <= 1:
                logger.warning(f"Refused to delete last item {item_id} of order {item.order_id}")
                raise InvalidOperationError(
                    "Cannot delete the last item from an order. Delete the entire order instead."
                )

            order = item.order
            order.total_amount = order.total_amount - item.unit_price * item.quantity
            self.items.delete(item)

        logger.info(f"Order item {item_id} deleted")

    def delete_order(self, order_id: int) -> None:
        """
        Delete an order together with all of its items

        Raises:
            NotFoundError: Order does not exist
            InvalidOperationError: Edit window closed
        """
        validate_id(order_id, "order")

        with unit_of_work(self.db, on_conflict=lambda: self._ensure_order_exists(order_id)):
            record = self.orders.get(order_id)
            if record is None:
                raise NotFoundError(f"Order with ID {order_id} not found.")

            self._check_edit_window(record)
            order_number = record.order_number
            self.orders.delete(record)

        logger.info(f"Order {order_number} deleted")

    def _get_item_for_update(self, item_id: int) -> OrderItemRecord:
        item = self.items.get_with_order(item_id)
        if item is None:
            raise NotFoundError(f"Order item with ID {item_id} not found.")
        return item

    def _check_edit_window(self, order: OrderRecord) -> None:
        window = timedelta(hours=settings.ORDER_EDIT_WINDOW_HOURS)
        if self.clock() - as_utc(order.order_date) > window:
            logger.warning(f"Edit window closed for order {order.order_number}")
            raise InvalidOperationError(
                f"Cannot modify orders older than {settings.ORDER_EDIT_WINDOW_HOURS} hours."
            )

    def _ensure_item_exists(self, item_id: int) -> None:
        if not self.items.exists(item_id):
            raise NotFoundError(f"Order item with ID {item_id} no longer exists.")

    def _ensure_order_exists(self, order_id: int) -> None:
        if not self.orders.exists(order_id):
            raise NotFoundError(f"Order with ID {order_id} no longer exists.")

    # ========================================================================
    # Queries
    # ========================================================================

    def get_order(self, order_id: int) -> Order:
        validate_id(order_id, "order")
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found.")
        return order

    def get_order_by_number(self, order_number: str) -> Order:
        if not order_number or not order_number.strip():
            raise InvalidInputError("Order number is required.")
        order = self.orders.find_by_number(order_number)
        if order is None:
            raise NotFoundError(f"Order with number {order_number} not found.")
        return order

    def list_orders(
        self,
        customer_id: Optional[int] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        min_amount: Optional[Decimal] = None,
        max_amount: Optional[Decimal] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Page[Order]:
        if customer_id is not None:
            validate_id(customer_id, "customer")
        date_from = as_utc(date_from) if date_from else None
        date_to = as_utc(date_to) if date_to else None
        validate_amount_range(min_amount, max_amount)
        validate_date_range(date_from, date_to)

        return self.orders.find_all(
            customer_id=customer_id,
            date_from=date_from,
            date_to=date_to,
            min_amount=min_amount,
            max_amount=max_amount,
            request=PageRequest.normalize(page, page_size),
        )

    def orders_of_customer(self, customer_id: int) -> List[Order]:
        validate_id(customer_id, "customer")
        if not self.customers.exists(customer_id):
            raise NotFoundError(f"Customer with ID {customer_id} not found.")
        return self.orders.find_by_customer(customer_id)

    def recent_orders(self, days: int = 7) -> List[Order]:
        """Orders of the last `days` days, newest first, capped"""
        validate_days(days)
        return self.orders.find_since(self.clock() - timedelta(days=days))

    def get_item(self, item_id: int) -> OrderItem:
        validate_id(item_id, "order item")
        item = self.items.find_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Order item with ID {item_id} not found.")
        return item

    def items_of_order(self, order_id: int) -> List[OrderItem]:
        validate_id(order_id, "order")
        if not self.orders.exists(order_id):
            raise NotFoundError(f"Order with ID {order_id} not found.")
        return self.items.find_by_order(order_id)
