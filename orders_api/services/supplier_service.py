"""
Supplier Service - Commands and listings for suppliers
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from orders_api.core.errors import InvalidOperationError, NotFoundError
from orders_api.domain.pagination import Page
from orders_api.domain.product import Product
from orders_api.domain.supplier import Supplier, SupplierCreate, SupplierUpdate
from orders_api.models import Supplier as SupplierRecord
from orders_api.repositories import ProductRepository, SupplierRepository
from orders_api.services.query import PageRequest, validate_id, validate_search_term
from orders_api.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class SupplierService:

    def __init__(self, db: Session):
        self.db = db
        self.suppliers = SupplierRepository(db)
        self.products = ProductRepository(db)

    def list_suppliers(
        self,
        country: Optional[str] = None,
        city: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Page[Supplier]:
        return self.suppliers.find_all(
            country=country,
            city=city,
            search=search,
            request=PageRequest.normalize(page, page_size),
        )

    def get_supplier(self, supplier_id: int) -> Supplier:
        validate_id(supplier_id, "supplier")
        supplier = self.suppliers.find_by_id(supplier_id)
        if supplier is None:
            raise NotFoundError(f"Supplier with ID {supplier_id} not found.")
        return supplier

    def search(self, term: str) -> List[Supplier]:
        return self.suppliers.search(validate_search_term(term))

    def countries(self) -> List[str]:
        return self.suppliers.find_countries()

    def cities(self, country: Optional[str] = None) -> List[str]:
        return self.suppliers.find_cities(country)

    def products_of_supplier(self, supplier_id: int, active_only: bool = False) -> List[Product]:
        self.get_supplier(supplier_id)
        return self.products.find_by_supplier(supplier_id, active_only=active_only)

    def create_supplier(self, data: SupplierCreate) -> Supplier:
        with unit_of_work(self.db):
            record = self.suppliers.add(SupplierRecord(**data.model_dump()))
            supplier_id = record.id

        logger.info(f"Supplier {supplier_id} created")
        return self.suppliers.find_by_id(supplier_id)

    def update_supplier(self, supplier_id: int, data: SupplierUpdate) -> None:
        validate_id(supplier_id, "supplier")

        with unit_of_work(self.db):
            record = self.suppliers.get(supplier_id)
            if record is None:
                raise NotFoundError(f"Supplier with ID {supplier_id} not found.")

            for field, value in data.model_dump().items():
                setattr(record, field, value)

        logger.info(f"Supplier {supplier_id} updated")

    def delete_supplier(self, supplier_id: int) -> None:
        """
        Delete a supplier that owns no products

        Raises:
            NotFoundError: Supplier does not exist
            InvalidOperationError: Supplier still owns products
        """
        validate_id(supplier_id, "supplier")

        with unit_of_work(self.db):
            record = self.suppliers.get(supplier_id)
            if record is None:
                raise NotFoundError(f"Supplier with ID {supplier_id} not found.")

            if self.suppliers.has_products(supplier_id):
                logger.warning(f"Refused to delete supplier {supplier_id}: has products")
                raise InvalidOperationError("Cannot delete supplier with existing products.")

            self.suppliers.delete(record)

        logger.info(f"Supplier {supplier_id} deleted")
