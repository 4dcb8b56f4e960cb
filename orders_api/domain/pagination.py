"""
Paged result container
"""
from typing import Generic, List, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    One page of a filtered, sorted listing plus its sizing metadata

    total_pages is ceil(total_count / page_size); a page past the end has
    no items but still reports the full total_count.
    """

    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 10

    @property
    def total_pages(self) -> int:
        return -(-self.total_count // self.page_size)

    def headers(self) -> dict:
        """Pagination metadata as response headers"""
        return {
            "X-Total-Count": str(self.total_count),
            "X-Page": str(self.page),
            "X-Page-Size": str(self.page_size),
            "X-Total-Pages": str(self.total_pages),
        }
