"""
Product Service - Catalog commands and listings for products

Price changes only touch the product row; order items keep the price
captured when their order was placed.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session

from orders_api.core.errors import InvalidInputError, InvalidOperationError, NotFoundError
from orders_api.domain.pagination import Page
from orders_api.domain.product import Product, ProductCreate, ProductUpdate
from orders_api.models import Product as ProductRecord
from orders_api.repositories import ProductRepository, SupplierRepository
from orders_api.services.query import (
    PageRequest,
    validate_amount_range,
    validate_id,
    validate_search_term,
)
from orders_api.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class ProductService:
    """Service for the product catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.suppliers = SupplierRepository(db)

    # ========================================================================
    # Queries
    # ========================================================================

    def list_products(
        self,
        supplier_id: Optional[int] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        is_discontinued: Optional[bool] = None,
        search: Optional[str] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Page[Product]:
        if supplier_id is not None:
            validate_id(supplier_id, "supplier")
        validate_amount_range(min_price, max_price, label="price")

        return self.products.find_all(
            supplier_id=supplier_id,
            min_price=min_price,
            max_price=max_price,
            is_discontinued=is_discontinued,
            search=search,
            request=PageRequest.normalize(page, page_size),
        )

    def get_product(self, product_id: int) -> Product:
        validate_id(product_id, "product")
        product = self.products.find_by_id(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found.")
        return product

    def active_products(self) -> List[Product]:
        return self.products.find_by_discontinued(False)

    def discontinued_products(self) -> List[Product]:
        return self.products.find_by_discontinued(True)

    def products_of_supplier(self, supplier_id: int) -> List[Product]:
        validate_id(supplier_id, "supplier")
        if not self.suppliers.exists(supplier_id):
            raise NotFoundError(f"Supplier with ID {supplier_id} not found.")
        return self.products.find_by_supplier(supplier_id)

    def search(self, term: str) -> List[Product]:
        return self.products.search(validate_search_term(term))

    # ========================================================================
    # Commands
    # ========================================================================

    def create_product(self, data: ProductCreate) -> Product:
        with unit_of_work(self.db):
            self._require_supplier(data.supplier_id)
            record = self.products.add(ProductRecord(**data.model_dump()))
            product_id = record.id

        logger.info(f"Product {product_id} created")
        return self.products.find_by_id(product_id)

    def update_product(self, product_id: int, data: ProductUpdate) -> None:
        validate_id(product_id, "product")

        with unit_of_work(self.db):
            record = self._require_product(product_id)
            self._require_supplier(data.supplier_id)

            for field, value in data.model_dump().items():
                setattr(record, field, value)

        logger.info(f"Product {product_id} updated")

    def change_price(self, product_id: int, unit_price: Decimal) -> None:
        """
        Set a new unit price

        Raises:
            InvalidInputError: Price is not greater than zero
            NotFoundError: Product does not exist
        """
        validate_id(product_id, "product")
        if unit_price is None or unit_price <= 0:
            raise InvalidInputError("Price must be greater than 0.")

        with unit_of_work(self.db):
            record = self._require_product(product_id)
            old_price = record.unit_price
            record.unit_price = unit_price

        logger.info(f"Product {product_id} price changed from {old_price} to {unit_price}")

    def discontinue(self, product_id: int) -> None:
        self._set_discontinued(product_id, True)

    def reactivate(self, product_id: int) -> None:
        self._set_discontinued(product_id, False)

    def _set_discontinued(self, product_id: int, discontinued: bool) -> None:
        validate_id(product_id, "product")

        with unit_of_work(self.db):
            record = self._require_product(product_id)
            if record.is_discontinued == discontinued:
                state = "discontinued" if discontinued else "active"
                logger.warning(f"Product {product_id} is already {state}")
                raise InvalidOperationError(f"Product is already {state}.")
            record.is_discontinued = discontinued

        logger.info(f"Product {product_id} {'discontinued' if discontinued else 'reactivated'}")

    def delete_product(self, product_id: int) -> None:
        """
        Hard-delete a product that no order item references

        Raises:
            NotFoundError: Product does not exist
            InvalidOperationError: Product appears in orders (discontinue it instead)
        """
        validate_id(product_id, "product")

        with unit_of_work(self.db):
            record = self._require_product(product_id)
            if self.products.is_referenced(product_id):
                logger.warning(f"Refused to delete product {product_id}: referenced by orders")
                raise InvalidOperationError(
                    "Cannot delete product that has been ordered. Consider discontinuing it instead."
                )
            self.products.delete(record)

        logger.info(f"Product {product_id} deleted")

    def _require_product(self, product_id: int) -> ProductRecord:
        record = self.products.get(product_id)
        if record is None:
            raise NotFoundError(f"Product with ID {product_id} not found.")
        return record

    def _require_supplier(self, supplier_id: int) -> None:
        if not self.suppliers.exists(supplier_id):
            raise NotFoundError(f"Supplier with ID {supplier_id} not found.")
