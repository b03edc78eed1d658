"""
Diff presentation.

Filters, windows and summarizes a precomputed diff result. The
summary always comes from the service's declared counts; the item
list may be truncated and is never used to recompute them.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from catalog_explorer.client.contracts import (
    DiffEntry,
    DiffItem,
    DiffResult,
    DiffStatus,
    DiffSummary,
)

STATUS_ALL = "all"
CHECKSUM_PLACEHOLDER = "-"
_CHECKSUM_MAX = 14
_CHECKSUM_EDGE = 7


class HintKind(str, Enum):
    """Which status line to show above the diff table."""

    EMPTY = "empty"
    NO_MATCH = "no_match"
    TRUNCATED = "truncated"
    LOADED = "loaded"


@dataclass(frozen=True)
class DiffHint:
    """Status line with the numbers its message needs."""

    kind: HintKind
    total: int = 0
    limit: int = 0
    loaded: int = 0

    @property
    def message_key(self) -> str:
        """Localization key for the hint text."""
        return f"master.diffHint.{self.kind.value}"

    @property
    def params(self) -> dict[str, int]:
        if self.kind is HintKind.TRUNCATED:
            return {"total": self.total, "limit": self.limit}
        if self.kind is HintKind.LOADED:
            return {"loaded": self.loaded, "total": self.total}
        return {}


@dataclass(frozen=True)
class DiffRow:
    """Display-ready diff item."""

    label: str
    status: DiffStatus
    from_type: str
    to_type: str
    from_size: str
    to_size: str
    from_checksum: str
    to_checksum: str
    from_name: str
    to_name: str
    can_open: bool


@dataclass(frozen=True)
class DiffView:
    """Everything needed to render a diff table."""

    rows: list[DiffRow]
    items: list[DiffItem]
    summary: DiffSummary
    hint: DiffHint
    truncated: bool


def format_checksum(value: str | None) -> str:
    """
    Shorten a checksum for display.

    Values longer than 14 characters become ``first7...last7``;
    missing values become a single dash.
    """
    if not value:
        return CHECKSUM_PLACEHOLDER
    if len(value) > _CHECKSUM_MAX:
        return f"{value[:_CHECKSUM_EDGE]}...{value[-_CHECKSUM_EDGE:]}"
    return value


def format_bytes(size: int | None) -> str:
    """Human-readable size, e.g. ``1.5 KB`` or ``12 MB``."""
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    value = float(size)
    idx = 0
    while value >= 1024 and idx < len(units) - 1:
        value /= 1024
        idx += 1
    return f"{value:.{0 if value >= 10 else 1}f} {units[idx]}"


def _search_text(item: DiffItem) -> str:
    source = item.from_ or DiffEntry()
    target = item.to or DiffEntry()
    return " ".join(
        [
            item.label,
            item.status.value,
            source.type,
            target.type,
            source.real_name,
            target.real_name,
        ]
    ).lower()


def filter_items(
    items: Iterable[DiffItem],
    status: str = STATUS_ALL,
    keyword: str = "",
) -> list[DiffItem]:
    """
    Filter diff items by status and keyword, keeping order.

    Args:
        items: Diff items as received
        status: ``all`` or an exact status value
        keyword: Case-insensitive substring of label, status, types and names

    Returns:
        list[DiffItem]: Matching items
    """
    needle = keyword.lower()
    kept = []
    for item in items:
        if status != STATUS_ALL and item.status.value != status:
            continue
        if needle and needle not in _search_text(item):
            continue
        kept.append(item)
    return kept


def select_hint(result: DiffResult, visible: int) -> DiffHint:
    """
    Pick the hint for a filtered diff.

    Order: empty result, no filter match, truncation, loaded count.
    """
    if result.total == 0 and not result.items:
        return DiffHint(HintKind.EMPTY)
    if visible == 0:
        return DiffHint(HintKind.NO_MATCH, total=result.total)
    if result.truncated:
        return DiffHint(HintKind.TRUNCATED, total=result.total, limit=result.limit)
    return DiffHint(HintKind.LOADED, total=result.total, loaded=visible)


def can_open_entry(item: DiffItem, selected_to: str, live_version: str) -> bool:
    """
    Whether the entry page may be linked from a diff row.

    Entry pages show the live catalog, so only items that still exist
    in a "to" snapshot equal to the live version may link there.
    """
    if item.status == DiffStatus.REMOVED:
        return False
    return bool(selected_to) and selected_to == live_version


def to_row(item: DiffItem, selected_to: str = "", live_version: str = "") -> DiffRow:
    source = item.from_
    target = item.to
    return DiffRow(
        label=item.label,
        status=item.status,
        from_type=source.type if source else CHECKSUM_PLACEHOLDER,
        to_type=target.type if target else CHECKSUM_PLACEHOLDER,
        from_size=format_bytes(source.size) if source else CHECKSUM_PLACEHOLDER,
        to_size=format_bytes(target.size) if target else CHECKSUM_PLACEHOLDER,
        from_checksum=format_checksum(source.checksum if source else None),
        to_checksum=format_checksum(target.checksum if target else None),
        from_name=source.real_name if source else "",
        to_name=target.real_name if target else "",
        can_open=can_open_entry(item, selected_to, live_version),
    )


def present(
    result: DiffResult,
    status_filter: str = STATUS_ALL,
    keyword_filter: str = "",
    *,
    selected_to: str = "",
    live_version: str = "",
) -> DiffView:
    """
    Build the display model for a diff result.

    Args:
        result: Diff result as received from the service
        status_filter: ``all`` or a status value
        keyword_filter: Free-text filter
        selected_to: The "to" version the result was computed for
        live_version: The catalog's current version

    Returns:
        DiffView: Filtered rows, authoritative summary and hint
    """
    items = filter_items(result.items, status_filter, keyword_filter)
    return DiffView(
        rows=[to_row(item, selected_to, live_version) for item in items],
        items=items,
        summary=result.summary.model_copy(),
        hint=select_hint(result, len(items)),
        truncated=result.truncated,
    )
