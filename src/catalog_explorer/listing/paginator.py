"""
Deterministic sorting and pagination of result lists.

Sorting is stable so that the same view state always produces
the same pages.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

from catalog_explorer.client.contracts import CatalogEntry

T = TypeVar("T")


class SortKey(str, Enum):
    """Sortable catalog entry fields."""

    LABEL = "label"
    TYPE = "type"
    SIZE = "size"
    RESOURCE_TYPE = "resource_type"
    MODIFIED_AT = "modified_at"


class SortDirection(str, Enum):
    """Ascending means lower values first."""

    ASC = "asc"
    DESC = "desc"


def _field_value(entry: Any, key: SortKey) -> Any:
    if isinstance(entry, dict):
        return entry.get(key.value)
    return getattr(entry, key.value, None)


def sort_entries(
    entries: Sequence[T],
    key: SortKey | str = SortKey.LABEL,
    direction: SortDirection | str = SortDirection.ASC,
) -> list[T]:
    """
    Return the entries ordered by one field.

    Strings compare case-insensitively and everything else by natural
    order. Entries with equal keys keep their input order in both
    directions. For ``modified_at`` an unknown timestamp (missing or
    not positive) sorts last regardless of direction.

    Args:
        entries: CatalogEntry models or plain dicts
        key: Field to sort on
        direction: ``asc`` or ``desc``

    Returns:
        list: New sorted list (input untouched)

    Raises:
        ValueError: On an unknown key or direction
    """
    key = SortKey(key)
    descending = SortDirection(direction) is SortDirection.DESC

    if key is SortKey.MODIFIED_AT:
        known = [e for e in entries if (_field_value(e, key) or 0) > 0]
        unknown = [e for e in entries if (_field_value(e, key) or 0) <= 0]
        known.sort(key=lambda e: _field_value(e, key), reverse=descending)
        return known + unknown

    def sort_value(entry: T) -> Any:
        value = _field_value(entry, key)
        if value is None:
            return "" if key in (SortKey.LABEL, SortKey.TYPE) else 0
        if isinstance(value, str):
            return value.lower()
        return value

    # list.sort is stable, including with reverse=True
    return sorted(entries, key=sort_value, reverse=descending)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One window of a result list."""

    items: list[T]
    page: int
    total_pages: int
    total: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def total_pages(count: int, page_size: int) -> int:
    """Number of pages for a list; never less than one."""
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    return max(1, math.ceil(count / page_size))


def clamp_page(requested: int, pages: int) -> int:
    return min(max(1, requested), pages)


def paginate(entries: Sequence[T], page_size: int, requested_page: int = 1) -> Page[T]:
    """
    Slice one page out of a list.

    The requested page is clamped into ``[1, total_pages]`` first, so
    out-of-range requests return the nearest valid page.

    Args:
        entries: Already sorted entries
        page_size: Entries per page (>= 1)
        requested_page: 1-based page number

    Returns:
        Page: Items, clamped page number and page count
    """
    pages = total_pages(len(entries), page_size)
    page = clamp_page(requested_page, pages)
    start = (page - 1) * page_size
    return Page(
        items=list(entries[start : start + page_size]),
        page=page,
        total_pages=pages,
        total=len(entries),
    )


def page_window(page: int, pages: int) -> list[int | None]:
    """
    Page numbers for a pager control.

    Always shows the first and last page plus the neighbours of the
    current page; None marks an elided gap.

    Example:
        >>> page_window(5, 10)
        [1, None, 4, 5, 6, None, 10]
    """
    window: list[int | None] = []
    for number in range(1, pages + 1):
        if number == 1 or number == pages or abs(number - page) <= 1:
            window.append(number)
        elif number in (page - 2, page + 2):
            window.append(None)
    return window


@dataclass
class ResultListView:
    """
    A result list plus its user-adjustable view state.

    Every mutation re-sorts and re-clamps against the current list, so
    the page number never points past the end of a shrunken list.
    """

    entries: list[CatalogEntry] = field(default_factory=list)
    sort_key: SortKey = SortKey.LABEL
    sort_direction: SortDirection = SortDirection.ASC
    page_size: int = 48
    page: int = 1
    _sorted: list[CatalogEntry] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self.sort_key = SortKey(self.sort_key)
        self.sort_direction = SortDirection(self.sort_direction)
        total_pages(0, self.page_size)
        self._refresh()

    def _refresh(self) -> None:
        self._sorted = sort_entries(self.entries, self.sort_key, self.sort_direction)
        self.page = clamp_page(self.page, total_pages(len(self._sorted), self.page_size))

    def set_entries(self, entries: Sequence[CatalogEntry]) -> None:
        """Replace the underlying list (e.g. after filtering)."""
        self.entries = list(entries)
        self._refresh()

    def set_sort(self, key: SortKey | str, direction: SortDirection | str) -> None:
        self.sort_key = SortKey(key)
        self.sort_direction = SortDirection(direction)
        self._refresh()

    def set_page_size(self, page_size: int) -> None:
        total_pages(0, page_size)
        self.page_size = page_size
        self._refresh()

    def go_to(self, page: int) -> Page[CatalogEntry]:
        self.page = clamp_page(page, total_pages(len(self._sorted), self.page_size))
        return self.current_page()

    @property
    def sorted_entries(self) -> list[CatalogEntry]:
        return list(self._sorted)

    def current_page(self) -> Page[CatalogEntry]:
        return paginate(self._sorted, self.page_size, self.page)
