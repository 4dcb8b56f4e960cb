"""
Customer Repository - Data Access Layer for Customers

Handles all queries for customers and returns Customer domain models.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from orders_api.domain.customer import Customer
from orders_api.domain.pagination import Page
from orders_api.models import Customer as CustomerRecord, Order as OrderRecord
from orders_api.services.query import PageRequest, contains, paginate


class CustomerRepository:
    """
    Repository for Customer data access

    Default ordering is last name, first name, then id so pages are stable.
    """

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def _map_row_to_customer(row: CustomerRecord) -> Customer:
        return Customer(
            id=row.id,
            first_name=row.first_name,
            last_name=row.last_name,
            city=row.city,
            country=row.country,
            phone=row.phone,
        )

    def get(self, customer_id: int) -> Optional[CustomerRecord]:
        """Load the ORM record (for mutations)"""
        return self.db.get(CustomerRecord, customer_id)

    def find_by_id(self, customer_id: int) -> Optional[Customer]:
        row = self.get(customer_id)
        return self._map_row_to_customer(row) if row else None

    def exists(self, customer_id: int) -> bool:
        return self.db.query(
            self.db.query(CustomerRecord).filter(CustomerRecord.id == customer_id).exists()
        ).scalar()

    def has_orders(self, customer_id: int) -> bool:
        return self.db.query(
            self.db.query(OrderRecord).filter(OrderRecord.customer_id == customer_id).exists()
        ).scalar()

    def find_all(
        self,
        country: Optional[str] = None,
        city: Optional[str] = None,
        search: Optional[str] = None,
        request: PageRequest = PageRequest(),
    ) -> Page[Customer]:
        """
        Find customers with filters

        Args:
            country: Substring of the country
            city: Substring of the city
            search: Substring of first name, last name or phone
            request: Page to return

        Returns:
            Page of customers
        """
        query = self.db.query(CustomerRecord)

        if country:
            query = query.filter(contains(CustomerRecord.country, country))

        if city:
            query = query.filter(contains(CustomerRecord.city, city))

        if search:
            query = query.filter(
                contains(CustomerRecord.first_name, search)
                | contains(CustomerRecord.last_name, search)
                | contains(CustomerRecord.phone, search)
            )

        query = query.order_by(
            CustomerRecord.last_name, CustomerRecord.first_name, CustomerRecord.id
        )
        return paginate(query, request, self._map_row_to_customer)

    def find_countries(self) -> List[str]:
        """Distinct non-empty countries, sorted"""
        rows = (
            self.db.query(CustomerRecord.country)
            .filter(CustomerRecord.country.isnot(None), CustomerRecord.country != "")
            .distinct()
            .order_by(CustomerRecord.country)
            .all()
        )
        return [row.country for row in rows]

    def find_cities(self, country: Optional[str] = None) -> List[str]:
        """Distinct non-empty cities, optionally of one country (exact match)"""
        query = self.db.query(CustomerRecord.city).filter(
            CustomerRecord.city.isnot(None), CustomerRecord.city != ""
        )
        if country:
            query = query.filter(CustomerRecord.country == country)

        rows = query.distinct().order_by(CustomerRecord.city).all()
        return [row.city for row in rows]

    def add(self, record: CustomerRecord) -> CustomerRecord:
        self.db.add(record)
        self.db.flush()
        return record

    def delete(self, record: CustomerRecord) -> None:
        self.db.delete(record)
        self.db.flush()
