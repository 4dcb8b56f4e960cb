"""
Query / Pagination Engine

Shared building blocks for every listing endpoint:
- PageRequest: clamps page/page_size to their valid ranges
- validate_* helpers: reject malformed filter input with InvalidInputError
- contains(): case-insensitive substring predicate over a column
- paginate(): count + offset/limit over an SQLAlchemy query, returning a Page

Repositories compose these with entity-specific predicates and a stable
default ordering so that consecutive pages never overlap or skip records.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, TypeVar

from sqlalchemy.orm import Query

from orders_api.core.config import settings
from orders_api.core.errors import InvalidInputError
from orders_api.domain.pagination import Page

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    """A normalized (page, page_size) pair"""

    page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE

    @classmethod
    def normalize(cls, page: Optional[int] = 1, page_size: Optional[int] = None) -> "PageRequest":
        """
        Clamp caller input

        page below 1 becomes 1; page_size outside [1, MAX_PAGE_SIZE] is
        reset to DEFAULT_PAGE_SIZE (not clamped to the nearest bound).
        """
        if page is None or page < 1:
            page = 1
        if page_size is None or page_size < 1 or page_size > settings.MAX_PAGE_SIZE:
            page_size = settings.DEFAULT_PAGE_SIZE
        return cls(page=page, page_size=page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ============================================================================
# Input validation
# ============================================================================

def validate_id(value: int, label: str) -> int:
    """Identifiers are positive integers"""
    if value is None or value <= 0:
        raise InvalidInputError(f"Invalid {label} ID.")
    return value


def validate_amount_range(
    minimum: Optional[Decimal],
    maximum: Optional[Decimal],
    label: str = "amount",
) -> None:
    """
    Validate an optional [minimum, maximum] money range

    Each bound must be non-negative; when both are given minimum <= maximum.
    """
    if minimum is not None and minimum < 0:
        raise InvalidInputError(f"Minimum {label} cannot be negative.")
    if maximum is not None and maximum < 0:
        raise InvalidInputError(f"Maximum {label} cannot be negative.")
    if minimum is not None and maximum is not None and minimum > maximum:
        raise InvalidInputError(f"Minimum {label} cannot be greater than maximum {label}.")


def validate_date_range(date_from: Optional[datetime], date_to: Optional[datetime]) -> None:
    if date_from is not None and date_to is not None and date_from > date_to:
        raise InvalidInputError("From date cannot be greater than to date.")


def validate_search_term(term: Optional[str]) -> str:
    """Term searches need a non-blank term of at least SEARCH_MIN_LENGTH characters"""
    if term is None or not term.strip():
        raise InvalidInputError("Search term is required.")
    if len(term) < settings.SEARCH_MIN_LENGTH:
        raise InvalidInputError(
            f"Search term must be at least {settings.SEARCH_MIN_LENGTH} characters long."
        )
    return term


def validate_days(days: int, maximum: int = 365) -> int:
    if days < 1 or days > maximum:
        raise InvalidInputError(f"Days must be between 1 and {maximum}.")
    return days


# ============================================================================
# Query helpers
# ============================================================================

def contains(column, term: str):
    """Case-insensitive substring match; NULL columns never match"""
    return column.ilike(f"%{escape_like(term)}%", escape="\\")


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term matches literally"""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def paginate(query: Query, request: PageRequest, mapper: Callable[..., T]) -> Page[T]:
    """
    Run a count and one page of an already filtered and ordered query

    Args:
        query: SQLAlchemy query with filters and ORDER BY applied
        request: Normalized page request
        mapper: Converts one ORM row into its domain model

    Returns:
        Page with the mapped rows and the total count of the unpaged query
    """
    total = query.order_by(None).count()
    rows = query.offset(request.offset).limit(request.page_size).all()

    return Page(
        items=[mapper(row) for row in rows],
        total_count=total,
        page=request.page,
        page_size=request.page_size,
    )
