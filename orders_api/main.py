"""
Orders API - Backend application
Customers, suppliers, products and orders with their line items
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from orders_api.api import customers, order_items, orders, products, suppliers
from orders_api.core.config import settings
from orders_api.core.database import check_database_connection, get_db, init_db
from orders_api.core.errors import (
    ConflictError,
    InvalidInputError,
    InvalidOperationError,
    NotFoundError,
    OrdersError,
    StorageFailureError,
)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

ERROR_STATUS = {
    NotFoundError: 404,
    InvalidInputError: 400,
    InvalidOperationError: 400,
    ConflictError: 409,
    StorageFailureError: 500,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        init_db()
        logger.info("Database tables verified")
    yield


app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    debug=settings.API_DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count", "X-Page", "X-Page-Size", "X-Total-Pages"],
)


@app.exception_handler(OrdersError)
async def orders_error_handler(request: Request, exc: OrdersError):
    status_code = ERROR_STATUS.get(type(exc), 500)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"message": exc.message})


# Include API routers
app.include_router(customers.router, prefix="/api/v1/customers", tags=["Customers"])
app.include_router(suppliers.router, prefix="/api/v1/suppliers", tags=["Suppliers"])
app.include_router(products.router, prefix="/api/v1/products", tags=["Products"])
app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
app.include_router(order_items.router, prefix="/api/v1/order-items", tags=["Order Items"])


@app.get("/")
def root():
    """Root endpoint - API status"""
    return {
        "message": settings.API_TITLE,
        "status": "online",
        "version": settings.API_VERSION,
        "description": settings.API_DESCRIPTION,
    }


@app.get("/health")
def health(db: Session = Depends(get_db)):
    """Health check endpoint - tests database connectivity"""
    start_time = time.time()

    db_status = "unknown"
    db_latency_ms = None
    db_error = None

    try:
        # Fast check: a single retry at most
        db_latency_ms = check_database_connection(max_retries=1, retry_delay=0.5, bind=db.get_bind())
        db_status = "connected"
    except SQLAlchemyError as e:
        db_status = "disconnected"
        db_error = str(e)

    total_latency_ms = round((time.time() - start_time) * 1000, 2)

    return {
        "status": "healthy" if db_status == "connected" else "degraded",
        "service": "orders-api",
        "version": settings.API_VERSION,
        "database": {
            "status": db_status,
            "latency_ms": db_latency_ms,
            "error": db_error,
        },
        "total_latency_ms": total_latency_ms,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("orders_api.main:app", host=settings.API_HOST, port=settings.API_PORT)
