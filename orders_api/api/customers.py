"""
Customers API Endpoints
Customer management, lookup lists and customer statistics
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.domain.customer import CustomerCreate, CustomerUpdate
from orders_api.services.customer_service import CustomerService
from orders_api.services.order_service import OrderService
from orders_api.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/")
def get_customers(
    response: Response,
    country: Optional[str] = Query(None, description="Filter by country (substring)"),
    city: Optional[str] = Query(None, description="Filter by city (substring)"),
    search: Optional[str] = Query(None, description="Search first name, last name or phone"),
    page: int = Query(1),
    page_size: int = Query(10),
    db: Session = Depends(get_db),
):
    """
    Get customers with optional filters

    Pagination metadata is returned in the X-Total-Count, X-Page,
    X-Page-Size and X-Total-Pages headers.
    """
    result = CustomerService(db).list_customers(
        country=country, city=city, search=search, page=page, page_size=page_size
    )
    response.headers.update(result.headers())
    return [customer.to_dict() for customer in result.items]


@router.get("/countries")
def get_countries(db: Session = Depends(get_db)):
    return CustomerService(db).countries()


@router.get("/cities")
def get_cities(
    country: Optional[str] = Query(None, description="Restrict to one country (exact match)"),
    db: Session = Depends(get_db),
):
    return CustomerService(db).cities(country)


@router.get("/statistics")
def get_customer_statistics(db: Session = Depends(get_db)):
    """Totals, customers with/without orders and top countries"""
    return StatisticsService(db).customer_statistics().to_dict()


@router.get("/{customer_id}")
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return CustomerService(db).get_customer(customer_id).to_dict()


@router.get("/{customer_id}/orders")
def get_customer_orders(customer_id: int, db: Session = Depends(get_db)):
    return [order.to_dict() for order in OrderService(db).orders_of_customer(customer_id)]


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_customer(data: CustomerCreate, db: Session = Depends(get_db)):
    return CustomerService(db).create_customer(data).to_dict()


@router.put("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_customer(customer_id: int, data: CustomerUpdate, db: Session = Depends(get_db)):
    CustomerService(db).update_customer(customer_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """Fails with 400 while the customer owns orders"""
    CustomerService(db).delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
