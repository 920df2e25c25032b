"""Page/limit normalisation and page metadata.

Out-of-range input is clamped, never rejected: ``page < 1`` becomes 1,
``limit < 1`` becomes :data:`DEFAULT_LIMIT`, ``limit > MAX_LIMIT`` becomes
:data:`MAX_LIMIT`.
"""

from __future__ import annotations

from agrihub.services.models import Pagination

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def normalize_pagination(page: int, limit: int) -> tuple[int, int]:
    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1:
        limit = DEFAULT_LIMIT
    elif limit > MAX_LIMIT:
        limit = MAX_LIMIT
    return page, limit


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    """Page metadata for *total* items split into pages of *limit*."""
    total = max(total, 0)
    total_pages = (total + limit - 1) // limit
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )
