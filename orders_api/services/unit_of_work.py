"""
Transaction boundary shared by every mutating service call
"""
import logging
from contextlib import contextmanager
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from orders_api.core.errors import ConflictError, OrdersError, StorageFailureError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, on_conflict: Optional[Callable[[], None]] = None):
    """
    Commit on success, roll back on any failure

    Args:
        db: Session the work runs in
        on_conflict: Existence re-check run once after a stale write; it
            raises NotFoundError when the record is gone, otherwise the
            write surfaces as ConflictError

    Raises:
        OrdersError: Business errors raised inside the block, unchanged
        ConflictError: A versioned row changed since it was read
        StorageFailureError: Any other SQLAlchemy failure
    """
    try:
        yield db
        db.commit()
    except OrdersError:
        db.rollback()
        raise
    except StaleDataError as e:
        db.rollback()
        logger.warning(f"Concurrent modification detected: {e}")
        if on_conflict is not None:
            on_conflict()
        raise ConflictError(
            "The record was modified by another request. Reload it and try again."
        ) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure: {e}")
        raise StorageFailureError("An unexpected storage error occurred.") from e
    except Exception:
        db.rollback()
        raise
