"""
Suppliers API Endpoints
Supplier management, term search, lookup lists, statistics and performance
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.domain.supplier import SupplierCreate, SupplierUpdate
from orders_api.services.statistics_service import StatisticsService
from orders_api.services.supplier_service import SupplierService

router = APIRouter()


@router.get("/")
def get_suppliers(
    response: Response,
    country: Optional[str] = Query(None, description="Filter by country (substring)"),
    city: Optional[str] = Query(None, description="Filter by city (substring)"),
    search: Optional[str] = Query(None, description="Search company name, contact name or phone"),
    page: int = Query(1),
    page_size: int = Query(10),
    db: Session = Depends(get_db),
):
    result = SupplierService(db).list_suppliers(
        country=country, city=city, search=search, page=page, page_size=page_size
    )
    response.headers.update(result.headers())
    return [supplier.to_dict() for supplier in result.items]


@router.get("/countries")
def get_countries(db: Session = Depends(get_db)):
    return SupplierService(db).countries()


@router.get("/cities")
def get_cities(country: Optional[str] = Query(None), db: Session = Depends(get_db)):
    return SupplierService(db).cities(country)


@router.get("/search/{term}")
def search_suppliers(term: str, db: Session = Depends(get_db)):
    """Search name, contact, phone, city and country (min 2 chars, max 20 results)"""
    return [supplier.to_dict() for supplier in SupplierService(db).search(term)]


@router.get("/statistics")
def get_supplier_statistics(db: Session = Depends(get_db)):
    return StatisticsService(db).supplier_statistics().to_dict()


@router.get("/{supplier_id}")
def get_supplier(supplier_id: int, db: Session = Depends(get_db)):
    return SupplierService(db).get_supplier(supplier_id).to_dict()


@router.get("/{supplier_id}/products")
def get_supplier_products(supplier_id: int, db: Session = Depends(get_db)):
    products = SupplierService(db).products_of_supplier(supplier_id)
    return [product.to_dict() for product in products]


@router.get("/{supplier_id}/products/active")
def get_supplier_active_products(supplier_id: int, db: Session = Depends(get_db)):
    products = SupplierService(db).products_of_supplier(supplier_id, active_only=True)
    return [product.to_dict() for product in products]


@router.get("/{supplier_id}/performance")
def get_supplier_performance(supplier_id: int, db: Session = Depends(get_db)):
    """Product overview, sales metrics, 12-month trend and top products"""
    return StatisticsService(db).supplier_performance(supplier_id).to_dict()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_supplier(data: SupplierCreate, db: Session = Depends(get_db)):
    return SupplierService(db).create_supplier(data).to_dict()


@router.put("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_supplier(supplier_id: int, data: SupplierUpdate, db: Session = Depends(get_db)):
    SupplierService(db).update_supplier(supplier_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(supplier_id: int, db: Session = Depends(get_db)):
    SupplierService(db).delete_supplier(supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
