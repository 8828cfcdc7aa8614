"""Pydantic schemas shared by paginated list endpoints."""
import math

from pydantic import BaseModel


class Pagination(BaseModel):
    """Page-number pagination metadata."""

    page: int
    page_size: int
    total: int  # Total count of rows matching the query (before pagination)
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, page_size: int, total: int) -> "Pagination":
        """
        Compute pagination metadata from the matching-row count.

        An empty result yields total=0 and total_pages=0.
        """
        total_pages = math.ceil(total / page_size) if total else 0
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ErrorResponse(BaseModel):
    """Body returned for every handled service error."""

    error: str
    detail: str
