"""
Orders API Endpoints
Order creation, lookup, deletion, statistics and revenue series
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.domain.order import OrderCreate
from orders_api.services.order_service import OrderService
from orders_api.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/")
def get_orders(
    response: Response,
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    date_from: Optional[datetime] = Query(None, description="Orders placed at or after (UTC)"),
    date_to: Optional[datetime] = Query(None, description="Orders placed at or before (UTC)"),
    min_amount: Optional[Decimal] = Query(None, description="Minimum total amount"),
    max_amount: Optional[Decimal] = Query(None, description="Maximum total amount"),
    page: int = Query(1),
    page_size: int = Query(10),
    db: Session = Depends(get_db),
):
    """
    Get orders with optional filters, newest first

    Each order includes its customer name and line items.
    """
    result = OrderService(db).list_orders(
        customer_id=customer_id,
        date_from=date_from,
        date_to=date_to,
        min_amount=min_amount,
        max_amount=max_amount,
        page=page,
        page_size=page_size,
    )
    response.headers.update(result.headers())
    return [order.to_dict() for order in result.items]


@router.get("/recent")
def get_recent_orders(
    days: int = Query(7, description="Look-back window in days (1-365)"),
    db: Session = Depends(get_db),
):
    return [order.to_dict() for order in OrderService(db).recent_orders(days)]


@router.get("/statistics")
def get_order_statistics(db: Session = Depends(get_db)):
    return StatisticsService(db).order_statistics().to_dict()


@router.get("/revenue-by-period")
def get_revenue_by_period(
    date_from: Optional[datetime] = Query(None, description="Range start (default: 30 days ago)"),
    date_to: Optional[datetime] = Query(None, description="Range end (default: now)"),
    period: str = Query("day", description="Bucket unit: day, week or month"),
    db: Session = Depends(get_db),
):
    """Revenue grouped by day, week or month, ascending by period"""
    return StatisticsService(db).revenue_by_period(date_from, date_to, period).to_dict()


@router.get("/number/{order_number}")
def get_order_by_number(order_number: str, db: Session = Depends(get_db)):
    return OrderService(db).get_order_by_number(order_number).to_dict()


@router.get("/customer/{customer_id}")
def get_orders_by_customer(customer_id: int, db: Session = Depends(get_db)):
    return [order.to_dict() for order in OrderService(db).orders_of_customer(customer_id)]


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id).to_dict()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_order(data: OrderCreate, db: Session = Depends(get_db)):
    """
    Create an order

    Prices are captured from the products at this moment; the order total
    is the sum of the item totals.
    """
    return OrderService(db).create_order(data).to_dict()


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(order_id: int, db: Session = Depends(get_db)):
    """Delete an order and its items (only within the edit window)"""
    OrderService(db).delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
