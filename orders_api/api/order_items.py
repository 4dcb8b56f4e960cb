"""
Order Items API Endpoints
Item lookups, quantity changes, deletion and sales figures
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.domain.order import OrderItemUpdate
from orders_api.services.order_service import OrderService
from orders_api.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/order/{order_id}")
def get_items_of_order(order_id: int, db: Session = Depends(get_db)):
    return [item.to_dict() for item in OrderService(db).items_of_order(order_id)]


@router.get("/statistics")
def get_order_item_statistics(db: Session = Depends(get_db)):
    return StatisticsService(db).order_item_statistics().to_dict()


@router.get("/product/{product_id}/sales")
def get_product_sales(
    product_id: int,
    date_from: Optional[datetime] = Query(None),
    date_to: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
):
    return StatisticsService(db).product_sales(product_id, date_from, date_to).to_dict()


@router.get("/{item_id}")
def get_order_item(item_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_item(item_id).to_dict()


@router.put("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_order_item(item_id: int, data: OrderItemUpdate, db: Session = Depends(get_db)):
    """Change the quantity; the order total is re-derived in the same transaction"""
    OrderService(db).update_item_quantity(item_id, data.quantity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order_item(item_id: int, db: Session = Depends(get_db)):
    OrderService(db).delete_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
