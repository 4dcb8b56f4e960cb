"""
Product Repository - Data Access Layer for Products

Handles all queries for products and returns Product domain models.
Products are always loaded with their supplier so supplier_name is filled.
"""
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from orders_api.core.config import settings
from orders_api.domain.pagination import Page
from orders_api.domain.product import Product
from orders_api.models import (
    OrderItem as OrderItemRecord,
    Product as ProductRecord,
    Supplier as SupplierRecord,
)
from orders_api.services.query import PageRequest, contains, paginate


class ProductRepository:
    """
    Repository for Product data access

    All product queries are centralized here; default ordering is product
    name, then id.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _map_row_to_product(row: ProductRecord) -> Product:
        return Product(
            id=row.id,
            product_name=row.product_name,
            supplier_id=row.supplier_id,
            supplier_name=row.supplier.company_name if row.supplier else "",
            unit_price=row.unit_price,
            package=row.package,
            is_discontinued=row.is_discontinued,
        )

    def _base_query(self):
        return self.db.query(ProductRecord).options(joinedload(ProductRecord.supplier))

    def get(self, product_id: int) -> Optional[ProductRecord]:
        return self.db.get(ProductRecord, product_id)

    def find_by_id(self, product_id: int) -> Optional[Product]:
        row = self._base_query().filter(ProductRecord.id == product_id).first()
        return self._map_row_to_product(row) if row else None

    def exists(self, product_id: int) -> bool:
        return self.db.query(
            self.db.query(ProductRecord).filter(ProductRecord.id == product_id).exists()
        ).scalar()

    def is_referenced(self, product_id: int) -> bool:
        """True when at least one order item points at the product"""
        return self.db.query(
            self.db.query(OrderItemRecord).filter(OrderItemRecord.product_id == product_id).exists()
        ).scalar()

    def find_all(
        self,
        supplier_id: Optional[int] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        is_discontinued: Optional[bool] = None,
        search: Optional[str] = None,
        request: PageRequest = PageRequest(),
    ) -> Page[Product]:
        """
        Find products with filters

        Args:
            supplier_id: Filter by owning supplier
            min_price: Lower bound of unit price (inclusive)
            max_price: Upper bound of unit price (inclusive)
            is_discontinued: Filter by discontinued flag
            search: Substring of product name, package or supplier company name
            request: Page to return
        """
        query = self._base_query()

        if supplier_id is not None:
            query = query.filter(ProductRecord.supplier_id == supplier_id)

        if min_price is not None:
            query = query.filter(ProductRecord.unit_price >= min_price)

        if max_price is not None:
            query = query.filter(ProductRecord.unit_price <= max_price)

        if is_discontinued is not None:
            query = query.filter(ProductRecord.is_discontinued == is_discontinued)

        if search:
            query = query.filter(self._search_condition(search))

        query = query.order_by(ProductRecord.product_name, ProductRecord.id)
        return paginate(query, request, self._map_row_to_product)

    @staticmethod
    def _search_condition(term: str):
        return (
            contains(ProductRecord.product_name, term)
            | contains(ProductRecord.package, term)
            | ProductRecord.supplier.has(contains(SupplierRecord.company_name, term))
        )

    def search(self, term: str) -> List[Product]:
        """Term search over name, package and supplier name (capped)"""
        rows = (
            self._base_query()
            .filter(self._search_condition(term))
            .order_by(ProductRecord.product_name, ProductRecord.id)
            .limit(settings.SEARCH_RESULT_LIMIT)
            .all()
        )
        return [self._map_row_to_product(row) for row in rows]

    def find_by_discontinued(self, is_discontinued: bool) -> List[Product]:
        rows = (
            self._base_query()
            .filter(ProductRecord.is_discontinued == is_discontinued)
            .order_by(ProductRecord.product_name, ProductRecord.id)
            .all()
        )
        return [self._map_row_to_product(row) for row in rows]

    def find_by_supplier(self, supplier_id: int, active_only: bool = False) -> List[Product]:
        query = self._base_query().filter(ProductRecord.supplier_id == supplier_id)
        if active_only:
            query = query.filter(ProductRecord.is_discontinued.is_(False))

        rows = query.order_by(ProductRecord.product_name, ProductRecord.id).all()
        return [self._map_row_to_product(row) for row in rows]

    def add(self, record: ProductRecord) -> ProductRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def delete(self, record: ProductRecord) -> None:
        self.db.delete(record)
        self.db.flush()
