# rutacafe/utils/pagination.py
from typing import Any, List

from pydantic import BaseModel

from rutacafe.core.config import settings


class PageMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_prev: bool
    has_next: bool

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size


def meta(total: int, page: int, page_size: int | None = None) -> PageMeta:
    """Página pedida, acotada a [1, total_pages] y a MAX_PAGE_SIZE."""
    page_size = min(page_size or settings.default_page_size, settings.max_page_size)
    total_pages = max((total + page_size - 1) // page_size, 1)
    page = min(max(page, 1), total_pages)
    return PageMeta(
        page=page, page_size=page_size, total=total, total_pages=total_pages,
        has_prev=page > 1, has_next=page < total_pages,
    )


def page_of(items: List[Any], m: PageMeta) -> dict:
    return {"items": items, "meta": m.model_dump()}
