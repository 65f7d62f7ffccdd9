# vehicle_booking/utils/pagination.py
"""
Page/limit handling shared by every list endpoint.
Responses look like {"items": [...], "pagination": {page, limit, total, pages}}.
"""

import math
from dataclasses import dataclass
from vehicle_booking.config import settings
from vehicle_booking.errors import ValidationError


@dataclass(frozen=True)
class PageParams:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def validate_page_params(page, limit) -> PageParams:
    """Raise ValidationError unless 1 <= page and 1 <= limit <= MAX_PAGE_SIZE."""
    if page is None:
        page = 1
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    if page < 1:
        raise ValidationError("page must be a positive integer")
    if limit < 1:
        raise ValidationError("limit must be a positive integer")
    if limit > settings.MAX_PAGE_SIZE:
        raise ValidationError(f"limit must not exceed {settings.MAX_PAGE_SIZE}")
    return PageParams(page=page, limit=limit)


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def paginate(query, params: PageParams) -> dict:
    """Run a SQLAlchemy query for one page. The query must already be ordered."""
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return {
        "items": items,
        "pagination": {
            "page": params.page,
            "limit": params.limit,
            "total": total,
            "pages": page_count(total, params.limit),
        },
    }
