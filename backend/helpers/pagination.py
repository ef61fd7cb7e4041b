"""
Page-based pagination for list endpoints.

The web and mobile clients page with a 1-indexed `page` and a `limit`, and
expect the total page count back.
"""

import math
from typing import Annotated

from fastapi import Query

from models.config import settings

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20

PaginationPage = Annotated[int, Query(ge=1, description="1-indexed page number")]
PaginationLimit = Annotated[
    int,
    Query(
        ge=1,
        le=settings.REPORTS_PAGE_SIZE_MAX,
        description="Maximum number of records per page",
    ),
]


def page_to_offset(page: int, limit: int) -> int:
    """
    Convert a 1-indexed page into a row offset.

    Args:
        page: Page number, starting at 1
        limit: Page size

    Returns:
        Number of rows to skip
    """
    return (max(page, 1) - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> dict[str, int]:
    """
    Build pagination metadata for a list response.

    Args:
        page: Requested page
        limit: Page size
        total: Number of matching records across all pages

    Returns:
        Dict with page, limit, total and total_pages
    """
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
