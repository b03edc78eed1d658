"""Tests for snapshot version handling."""

from catalog_explorer.client.contracts import VersionInfo, VersionList
from catalog_explorer.diff.versions import (
    SelectionState,
    VersionSelection,
    default_selection,
    normalize_versions,
    validate_selection,
)


def versions(*ids: str | None) -> list[VersionInfo]:
    return [VersionInfo(version=v) for v in ids]


class TestNormalizeVersions:
    """Tests for normalize_versions()."""

    def test_dedupe_and_sort(self) -> None:
        """Test duplicates collapse and newest ids come first."""
        raw = [
            VersionInfo(version="1.4.0", source="archive"),
            VersionInfo(version=" 1.5.0 ", current=True),
            VersionInfo(version="1.4.0", source="live"),
        ]

        result = normalize_versions(raw)

        assert [v.version for v in result] == ["1.5.0", "1.4.0"]
        assert result[1].source == "archive"

    def test_blank_ids_dropped(self) -> None:
        """Test rows without an id are ignored."""
        assert normalize_versions(versions(None, "", "  ", "2.0")) == versions("2.0")

    def test_malformed_rows_from_payload(self) -> None:
        """Test non-object rows in a payload are dropped on parse."""
        payload = VersionList.model_validate(
            {"current": 20, "versions": [{"version": "20"}, "bogus", None, {"version": "19"}]}
        )

        assert payload.current == "20"
        assert [v.version for v in normalize_versions(payload.versions)] == ["20", "19"]


class TestDefaultSelection:
    """Tests for default_selection()."""

    def test_prefers_live_version(self) -> None:
        """Test 'to' defaults to the live version and 'from' to the next newest."""
        listed = versions("1.6.0", "1.5.0", "1.4.0")

        assert default_selection(listed, "1.5.0") == VersionSelection("1.6.0", "1.5.0")

    def test_without_live_version(self) -> None:
        """Test the newest version is used when none is live."""
        listed = versions("1.6.0", "1.5.0")

        assert default_selection(listed) == VersionSelection("1.5.0", "1.6.0")

    def test_previous_picks_survive(self) -> None:
        """Test earlier picks are kept when still listed."""
        listed = versions("1.6.0", "1.5.0", "1.4.0")

        result = default_selection(listed, "1.6.0", "1.4.0", "1.5.0")

        assert result == VersionSelection("1.4.0", "1.5.0")

    def test_stale_picks_replaced(self) -> None:
        """Test picks that vanished from the list fall back to defaults."""
        listed = versions("1.6.0", "1.5.0")

        result = default_selection(listed, "1.6.0", "0.9.0", "0.8.0")

        assert result == VersionSelection("1.5.0", "1.6.0")

    def test_single_version(self) -> None:
        """Test one version leaves 'from' empty."""
        assert default_selection(versions("1.0"), "1.0") == VersionSelection("", "1.0")

    def test_no_versions(self) -> None:
        assert default_selection([]) == VersionSelection("", "")


class TestValidateSelection:
    """Tests for validate_selection()."""

    def test_ready(self) -> None:
        assert validate_selection("1.0", "2.0", versions("2.0", "1.0")) is SelectionState.READY

    def test_unavailable_with_one_version(self) -> None:
        """Test fewer than two distinct versions blocks diffing."""
        listed = versions("1.0", "1.0")

        assert validate_selection("1.0", "1.0", listed) is SelectionState.UNAVAILABLE

    def test_incomplete(self) -> None:
        assert validate_selection("", "2.0", versions("2.0", "1.0")) is SelectionState.INCOMPLETE

    def test_identical(self) -> None:
        assert validate_selection("2.0", "2.0", versions("2.0", "1.0")) is SelectionState.IDENTICAL
