"""Fixed-size pagination over the filtered and sorted collection."""
import math
from dataclasses import dataclass, field
from typing import Any, List, Sequence, Union

PAGE_SIZE = 7
MAX_VISIBLE_PAGES = 5
ELLIPSIS = '...'


@dataclass
class Page:
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    items: List[Any] = field(default_factory=list)

    @property
    def start_item(self) -> int:
        """Zero-based offset of the first item on the page."""
        return (self.current_page - 1) * self.page_size

    @property
    def end_item(self) -> int:
        """Exclusive offset of the last item, capped at total_items."""
        return min(self.start_item + self.page_size, self.total_items)

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    def to_dict(self) -> dict:
        return {
            'current_page': self.current_page,
            'total_pages': self.total_pages,
            'total_items': self.total_items,
            'page_size': self.page_size,
            'start_item': self.start_item,
            'end_item': self.end_item,
            'page_numbers': page_numbers(self.current_page, self.total_pages),
            'items': self.items,
        }


def total_pages(total_items: int, page_size: int = PAGE_SIZE) -> int:
    return math.ceil(total_items / page_size)


def clamp_page(page: int, pages: int) -> int:
    if pages <= 0:
        return 1
    return max(1, min(page, pages))


def paginate(items: Sequence[Any], page: int = 1, page_size: int = PAGE_SIZE) -> Page:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    pages = total_pages(len(items), page_size)
    current = clamp_page(page, pages)
    start = (current - 1) * page_size
    return Page(
        current_page=current,
        total_pages=pages,
        total_items=len(items),
        page_size=page_size,
        items=list(items[start:start + page_size]),
    )


def page_numbers(current: int, total: int) -> List[Union[int, str]]:
    """Page buttons to show, with '...' standing in for skipped ranges."""
    if total <= MAX_VISIBLE_PAGES:
        return list(range(1, total + 1))
    if current <= 3:
        return [1, 2, 3, 4, ELLIPSIS, total]
    if current >= total - 2:
        return [1, ELLIPSIS, total - 3, total - 2, total - 1, total]
    return [1, ELLIPSIS, current - 1, current, current + 1, ELLIPSIS, total]
