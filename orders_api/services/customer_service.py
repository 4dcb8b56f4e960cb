"""
Customer Service - Commands and listings for customers
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from orders_api.core.errors import InvalidOperationError, NotFoundError
from orders_api.domain.customer import Customer, CustomerCreate, CustomerUpdate
from orders_api.domain.pagination import Page
from orders_api.models import Customer as CustomerRecord
from orders_api.repositories import CustomerRepository
from orders_api.services.query import PageRequest, validate_id
from orders_api.services.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


class CustomerService:

    def __init__(self, db: Session):
        self.db = db
        self.customers = CustomerRepository(db)

    def list_customers(
        self,
        country: Optional[str] = None,
        city: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Page[Customer]:
        return self.customers.find_all(
            country=country,
            city=city,
            search=search,
            request=PageRequest.normalize(page, page_size),
        )

    def get_customer(self, customer_id: int) -> Customer:
        validate_id(customer_id, "customer")
        customer = self.customers.find_by_id(customer_id)
        if customer is None:
            raise NotFoundError(f"Customer with ID {customer_id} not found.")
        return customer

    def countries(self) -> List[str]:
        return self.customers.find_countries()

    def cities(self, country: Optional[str] = None) -> List[str]:
        return self.customers.find_cities(country)

    def create_customer(self, data: CustomerCreate) -> Customer:
        with unit_of_work(self.db):
            record = self.customers.add(CustomerRecord(**data.model_dump()))
            customer_id = record.id

        logger.info(f"Customer {customer_id} created")
        return self.customers.find_by_id(customer_id)

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> None:
        validate_id(customer_id, "customer")

        with unit_of_work(self.db):
            record = self.customers.get(customer_id)
            if record is None:
                raise NotFoundError(f"Customer with ID {customer_id} not found.")

            for field, value in data.model_dump().items():
                setattr(record, field, value)

        logger.info(f"Customer {customer_id} updated")

    def delete_customer(self, customer_id: int) -> None:
        """
        Delete a customer that owns no orders

        Raises:
            NotFoundError: Customer does not exist
            InvalidOperationError: Customer still owns orders
        """
        validate_id(customer_id, "customer")

        with unit_of_work(self.db):
            record = self.customers.get(customer_id)
            if record is None:
                raise NotFoundError(f"Customer with ID {customer_id} not found.")

            if self.customers.has_orders(customer_id):
                logger.warning(f"Refused to delete customer {customer_id}: has orders")
                raise InvalidOperationError("Cannot delete customer with existing orders.")

            self.customers.delete(record)

        logger.info(f"Customer {customer_id} deleted")
