"""
Supplier Repository - Data Access Layer for Suppliers

Handles all queries for suppliers and returns Supplier domain models.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from orders_api.core.config import settings
from orders_api.domain.pagination import Page
from orders_api.domain.supplier import Supplier
from orders_api.models import Product as ProductRecord, Supplier as SupplierRecord
from orders_api.services.query import PageRequest, contains, paginate


class SupplierRepository:
    """Repository for Supplier data access (default order: company name, id)"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _map_row_to_supplier(row: SupplierRecord) -> Supplier:
        return Supplier(
            id=row.id,
            company_name=row.company_name,
            contact_name=row.contact_name,
            city=row.city,
            country=row.country,
            phone=row.phone,
            fax=row.fax,
        )

    def get(self, supplier_id: int) -> Optional[SupplierRecord]:
        return self.db.get(SupplierRecord, supplier_id)

    def find_by_id(self, supplier_id: int) -> Optional[Supplier]:
        row = self.get(supplier_id)
        return self._map_row_to_supplier(row) if row else None

    def exists(self, supplier_id: int) -> bool:
        return self.db.query(
            self.db.query(SupplierRecord).filter(SupplierRecord.id == supplier_id).exists()
        ).scalar()

    def has_products(self, supplier_id: int) -> bool:
        return self.db.query(
            self.db.query(ProductRecord).filter(ProductRecord.supplier_id == supplier_id).exists()
        ).scalar()

    def find_all(
        self,
        country: Optional[str] = None,
        city: Optional[str] = None,
        search: Optional[str] = None,
        request: PageRequest = PageRequest(),
    ) -> Page[Supplier]:
        """
        Find suppliers with filters

        Args:
            country: Substring of the country
            city: Substring of the city
            search: Substring of company name, contact name or phone
            request: Page to return
        """
        query = self.db.query(SupplierRecord)

        if country:
            query = query.filter(contains(SupplierRecord.country, country))

        if city:
            query = query.filter(contains(SupplierRecord.city, city))

        if search:
            query = query.filter(
                contains(SupplierRecord.company_name, search)
                | contains(SupplierRecord.contact_name, search)
                | contains(SupplierRecord.phone, search)
            )

        query = query.order_by(SupplierRecord.company_name, SupplierRecord.id)
        return paginate(query, request, self._map_row_to_supplier)

    def search(self, term: str) -> List[Supplier]:
        """Term search over name, contact, phone, city and country (capped)"""
        rows = (
            self.db.query(SupplierRecord)
            .filter(
                contains(SupplierRecord.company_name, term)
                | contains(SupplierRecord.contact_name, term)
                | contains(SupplierRecord.phone, term)
                | contains(SupplierRecord.city, term)
                | contains(SupplierRecord.country, term)
            )
            .order_by(SupplierRecord.company_name, SupplierRecord.id)
            .limit(settings.SEARCH_RESULT_LIMIT)
            .all()
        )
        return [self._map_row_to_supplier(row) for row in rows]

    def find_countries(self) -> List[str]:
        rows = (
            self.db.query(SupplierRecord.country)
            .filter(SupplierRecord.country.isnot(None), SupplierRecord.country != "")
            .distinct()
            .order_by(SupplierRecord.country)
            .all()
        )
        return [row.country for row in rows]

    def find_cities(self, country: Optional[str] = None) -> List[str]:
        query = self.db.query(SupplierRecord.city).filter(
            SupplierRecord.city.isnot(None), SupplierRecord.city != ""
        )
        if country:
            query = query.filter(SupplierRecord.country == country)

        rows = query.distinct().order_by(SupplierRecord.city).all()
        return [row.city for row in rows]

    def add(self, record: SupplierRecord) -> SupplierRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def delete(self, record: SupplierRecord) -> None:
        self.db.delete(record)
        self.db.flush()
