"""Offset pagination for list endpoints"""
from typing import Any, Dict, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from app.core.config import settings


def clamp_page(page: int, page_size: Optional[int]) -> Tuple[int, int]:
    """1-indexed page; page_size falls back to DEFAULT_PAGE_SIZE and is capped at MAX_PAGE_SIZE"""
    size = page_size or settings.DEFAULT_PAGE_SIZE
    return max(page, 1), min(max(size, 1), settings.MAX_PAGE_SIZE)


def page_envelope(items: Sequence[Any], total: int, page: int, page_size: int) -> Dict[str, Any]:
    pages = max(1, -(-total // page_size))
    return {
        "items": list(items),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": pages,
        "has_next": page < pages,
        "has_previous": page > 1,
    }


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run an ordered ORM ``query`` for one page.

    The total is counted over the same query with its ordering stripped.
    """
    page, page_size = clamp_page(page, page_size)

    total = await db.scalar(select(func.count()).select_from(query.order_by(None).subquery()))
    rows = await db.scalars(query.offset((page - 1) * page_size).limit(page_size))

    return page_envelope(rows.all(), total or 0, page, page_size)
