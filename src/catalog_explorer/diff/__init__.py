"""
Snapshot diff presentation and version selection.
"""

from catalog_explorer.diff.presenter import (
    DiffHint,
    DiffRow,
    DiffView,
    HintKind,
    can_open_entry,
    filter_items,
    format_bytes,
    format_checksum,
    present,
    select_hint,
)
from catalog_explorer.diff.versions import (
    SelectionState,
    VersionSelection,
    default_selection,
    normalize_versions,
    validate_selection,
)

__all__ = [
    "DiffHint",
    "DiffRow",
    "DiffView",
    "HintKind",
    "SelectionState",
    "VersionSelection",
    "can_open_entry",
    "default_selection",
    "filter_items",
    "format_bytes",
    "format_checksum",
    "normalize_versions",
    "present",
    "select_hint",
    "validate_selection",
]
