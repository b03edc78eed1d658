"""
Result list sorting and pagination.
"""

from catalog_explorer.listing.paginator import (
    Page,
    ResultListView,
    SortDirection,
    SortKey,
    page_window,
    paginate,
    sort_entries,
    total_pages,
)

__all__ = [
    "Page",
    "ResultListView",
    "SortDirection",
    "SortKey",
    "page_window",
    "paginate",
    "sort_entries",
    "total_pages",
]
