"""
Products API Endpoints
Catalog management: listings, search, price changes and discontinuation
"""
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.domain.product import ProductCreate, ProductPriceUpdate, ProductUpdate
from orders_api.services.product_service import ProductService
from orders_api.services.statistics_service import StatisticsService

router = APIRouter()


@router.get("/")
def get_products(
    response: Response,
    supplier_id: Optional[int] = Query(None, description="Filter by supplier"),
    min_price: Optional[Decimal] = Query(None, description="Minimum unit price"),
    max_price: Optional[Decimal] = Query(None, description="Maximum unit price"),
    is_discontinued: Optional[bool] = Query(None, description="Filter by discontinued flag"),
    search: Optional[str] = Query(None, description="Search name, package or supplier name"),
    page: int = Query(1),
    page_size: int = Query(10),
    db: Session = Depends(get_db),
):
    """
    Get products with optional filters

    Returns products with their supplier name; pagination metadata in headers
    """
    result = ProductService(db).list_products(
        supplier_id=supplier_id,
        min_price=min_price,
        max_price=max_price,
        is_discontinued=is_discontinued,
        search=search,
        page=page,
        page_size=page_size,
    )
    response.headers.update(result.headers())
    return [product.to_dict() for product in result.items]


@router.get("/active")
def get_active_products(db: Session = Depends(get_db)):
    return [product.to_dict() for product in ProductService(db).active_products()]


@router.get("/discontinued")
def get_discontinued_products(db: Session = Depends(get_db)):
    return [product.to_dict() for product in ProductService(db).discontinued_products()]


@router.get("/supplier/{supplier_id}")
def get_products_by_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return [product.to_dict() for product in ProductService(db).products_of_supplier(supplier_id)]


@router.get("/search/{term}")
def search_products(term: str, db: Session = Depends(get_db)):
    return [product.to_dict() for product in ProductService(db).search(term)]


@router.get("/statistics")
def get_product_statistics(db: Session = Depends(get_db)):
    """
    Get product statistics

    Returns:
    - Overview (total, active, discontinued, average price)
    - Most expensive and cheapest product
    - Breakdown per supplier
    - Top selling products by quantity
    """
    return StatisticsService(db).product_statistics().to_dict()


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductService(db).get_product(product_id).to_dict()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    return ProductService(db).create_product(data).to_dict()


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_product(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    ProductService(db).update_product(product_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/price", status_code=status.HTTP_204_NO_CONTENT)
def update_product_price(product_id: int, data: ProductPriceUpdate, db: Session = Depends(get_db)):
    """Change the price; existing order items keep their captured price"""
    ProductService(db).change_price(product_id, data.unit_price)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/discontinue", status_code=status.HTTP_204_NO_CONTENT)
def discontinue_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).discontinue(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}/reactivate", status_code=status.HTTP_204_NO_CONTENT)
def reactivate_product(product_id: int, db: Session = Depends(get_db)):
    ProductService(db).reactivate(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """Fails with 400 when the product has been ordered; discontinue it instead"""
    ProductService(db).delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
