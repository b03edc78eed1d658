"""
Snapshot version list handling for the diff view.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from catalog_explorer.client.contracts import VersionInfo


class SelectionState(str, Enum):
    """Whether a from/to pair can be diffed."""

    READY = "ready"
    UNAVAILABLE = "unavailable"  # fewer than two versions exist
    INCOMPLETE = "incomplete"  # from or to not chosen
    IDENTICAL = "identical"  # from == to


@dataclass(frozen=True)
class VersionSelection:
    from_version: str
    to_version: str


def normalize_versions(raw: Iterable[VersionInfo]) -> list[VersionInfo]:
    """
    Clean a version list from the service.

    Rows without an id are dropped, duplicate ids keep their first
    occurrence, and the result is ordered newest id first.
    """
    seen: set[str] = set()
    cleaned: list[VersionInfo] = []
    for info in raw:
        version = (info.version or "").strip()
        if not version or version in seen:
            continue
        seen.add(version)
        cleaned.append(info.model_copy(update={"version": version}))
    cleaned.sort(key=lambda info: info.version or "", reverse=True)
    return cleaned


def default_selection(
    versions: list[VersionInfo],
    current: str = "",
    previous_from: str = "",
    previous_to: str = "",
) -> VersionSelection:
    """
    Choose the from/to versions to preselect.

    Previous picks survive when still listed. Otherwise "to" falls back
    to the live version (or the newest one) and "from" to the newest
    version different from "to".

    Args:
        versions: Normalized version list (newest first)
        current: Live catalog version
        previous_from: Earlier "from" pick
        previous_to: Earlier "to" pick

    Returns:
        VersionSelection: Empty strings when nothing can be chosen
    """
    if not versions:
        return VersionSelection("", "")

    ids = [info.version or "" for info in versions]
    to_version = previous_to if previous_to in ids else (current or ids[0])
    if previous_from in ids:
        from_version = previous_from
    else:
        from_version = next((v for v in ids if v != to_version), "")
    return VersionSelection(from_version, to_version)


def validate_selection(
    from_version: str,
    to_version: str,
    versions: list[VersionInfo],
) -> SelectionState:
    """Classify a from/to pick; problems are reported, never raised."""
    distinct = {info.version for info in versions if info.version}
    if len(distinct) < 2:
        return SelectionState.UNAVAILABLE
    if not from_version or not to_version:
        return SelectionState.INCOMPLETE
    if from_version == to_version:
        return SelectionState.IDENTICAL
    return SelectionState.READY
