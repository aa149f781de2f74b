"""Clamped pagination over fetched collections."""
from __future__ import annotations

from typing import Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


class PagedCollection(Generic[T]):
    """A fixed-size window over an ordered collection.

    Page numbers are 0-indexed and always kept inside
    ``[0, total_pages - 1]``; an empty collection has exactly one (empty)
    page. ``on_navigate`` is called with the new page number whenever the
    page actually changes, e.g. to scroll the list back into view.
    """

    def __init__(
        self,
        items: Sequence[T] = (),
        page_size: int = 8,
        *,
        on_navigate: Optional[Callable[[int], None]] = None,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be a positive integer.")
        self._page_size = page_size
        self._source: List[T] = list(items)
        self._page = 0
        self._on_navigate = on_navigate

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def current_page(self) -> int:
        return self._page

    @property
    def total(self) -> int:
        return len(self._source)

    @property
    def total_pages(self) -> int:
        return max(1, -(-len(self._source) // self._page_size))

    @property
    def items(self) -> List[T]:
        start = self._page * self._page_size
        return self._source[start : start + self._page_size]

    @property
    def has_previous(self) -> bool:
        return self._page > 0

    @property
    def has_next(self) -> bool:
        return self._page < self.total_pages - 1

    @property
    def label(self) -> str:
        return f"Page {self._page + 1} of {self.total_pages}"

    def _clamp(self, page: int) -> int:
        return min(max(page, 0), self.total_pages - 1)

    def set_page(self, page: int) -> int:
        target = self._clamp(page)
        if target != self._page:
            self._page = target
            if self._on_navigate is not None:
                self._on_navigate(target)
        return self._page

    def next_page(self) -> int:
        return self.set_page(self._page + 1)

    def previous_page(self) -> int:
        return self.set_page(self._page - 1)

    def replace(self, items: Sequence[T]) -> None:
        self._source = list(items)
        self._page = self._clamp(self._page)


__all__ = ["PagedCollection"]
