"""Tests for diff presentation."""

from typing import Any

import pytest
from pydantic import ValidationError

from catalog_explorer.client.contracts import DiffItem, DiffResult, DiffStatus
from catalog_explorer.diff.presenter import (
    HintKind,
    can_open_entry,
    filter_items,
    format_bytes,
    format_checksum,
    present,
    select_hint,
    to_row,
)


def item(label: str, status: str, **sides: Any) -> dict[str, Any]:
    return {"label": label, "status": status, **sides}


@pytest.fixture
def diff_payload() -> dict[str, Any]:
    return {
        "from": "1.4.0",
        "to": "1.5.0",
        "items": [
            item("bgm_kaho_01.acb", "added", to={"type": "acb", "size": 2048, "checksum": "aa"}),
            item(
                "image_old.png",
                "removed",
                **{"from": {"type": "png", "size": 10, "checksum": "bb", "realName": "Old Card"}},
            ),
            item(
                "vo_sayaka_02.awb",
                "modified",
                **{
                    "from": {"type": "awb", "size": 100, "checksum": "0123456789abcdef"},
                    "to": {"type": "awb", "size": 120, "checksum": "fedcba9876543210"},
                },
            ),
            item("story_main_01.txt", "added", to={"type": "txt", "size": 1}),
        ],
        "summary": {"total": 4, "added": 2, "removed": 1, "modified": 1},
        "total": 4,
        "limit": 5000,
        "truncated": False,
    }


@pytest.fixture
def result(diff_payload: dict[str, Any]) -> DiffResult:
    return DiffResult.model_validate(diff_payload)


class TestFilterItems:
    """Tests for status and keyword filtering."""

    def test_no_filter_keeps_order(self, result: DiffResult) -> None:
        """Test 'all' with an empty keyword returns the original items in order."""
        assert filter_items(result.items) == result.items

    def test_status_filter(self, result: DiffResult) -> None:
        """Test filtering by an exact status."""
        labels = [i.label for i in filter_items(result.items, "added")]

        assert labels == ["bgm_kaho_01.acb", "story_main_01.txt"]

    def test_keyword_is_case_insensitive(self, result: DiffResult) -> None:
        """Test keywords match label, type and display name ignoring case."""
        assert [i.label for i in filter_items(result.items, keyword="KAHO")] == [
            "bgm_kaho_01.acb"
        ]
        assert [i.label for i in filter_items(result.items, keyword="old card")] == [
            "image_old.png"
        ]
        assert len(filter_items(result.items, keyword="awb")) == 1

    def test_keyword_matches_status(self, result: DiffResult) -> None:
        """Test the status value is part of the searchable text."""
        assert [i.label for i in filter_items(result.items, keyword="modif")] == [
            "vo_sayaka_02.awb"
        ]

    def test_missing_sides_do_not_match_none(self, result: DiffResult) -> None:
        """Test absent sides contribute empty text rather than 'none'."""
        assert filter_items(result.items, keyword="none") == []

    def test_status_and_keyword_combine(self, result: DiffResult) -> None:
        """Test both filters must hold."""
        assert filter_items(result.items, "removed", "kaho") == []

    def test_filter_is_subset_in_order(self, result: DiffResult) -> None:
        """Test every filtered list is an ordered subsequence of the input."""
        for status in ("all", "added", "removed", "modified", "unchanged"):
            for keyword in ("", "a", "txt", "zzz"):
                kept = filter_items(result.items, status, keyword)
                positions = [result.items.index(i) for i in kept]
                assert positions == sorted(positions)


class TestSelectHint:
    """Tests for select_hint()."""

    def test_empty(self) -> None:
        """Test an empty diff."""
        assert select_hint(DiffResult(), 0).kind is HintKind.EMPTY

    def test_no_match(self, result: DiffResult) -> None:
        """Test a filter that hides everything."""
        assert select_hint(result, 0).kind is HintKind.NO_MATCH

    def test_loaded(self, result: DiffResult) -> None:
        """Test the loaded hint reports visible and total counts."""
        hint = select_hint(result, 2)

        assert hint.kind is HintKind.LOADED
        assert hint.params == {"loaded": 2, "total": 4}
        assert hint.message_key == "master.diffHint.loaded"

    def test_truncated(self, diff_payload: dict[str, Any]) -> None:
        """Test truncation reports the server total and limit."""
        diff_payload.update(total=12000, truncated=True)
        truncated = DiffResult.model_validate(diff_payload)

        hint = select_hint(truncated, 4)

        assert hint.kind is HintKind.TRUNCATED
        assert hint.params == {"total": 12000, "limit": 5000}


class TestPresent:
    """Tests for present()."""

    def test_summary_is_not_recomputed(self, diff_payload: dict[str, Any]) -> None:
        """Test a truncated result keeps the declared summary."""
        diff_payload.update(
            items=diff_payload["items"][:1],
            summary={"total": 12000, "added": 7000, "removed": 3000, "modified": 2000},
            total=12000,
            truncated=True,
        )
        truncated = DiffResult.model_validate(diff_payload)

        view = present(truncated, "removed", "")

        assert view.items == []
        assert view.summary.added == 7000
        assert view.summary.total == 12000
        assert view.truncated is True
        assert view.hint.kind is HintKind.NO_MATCH

    def test_truncated_at_limit(self) -> None:
        """Test a result exactly at the limit shows the truncation hint."""
        items = [item(f"label_{i}", "added", to={"type": "png"}) for i in range(5000)]
        truncated = DiffResult.model_validate(
            {"items": items, "total": 5000, "limit": 5000, "truncated": True}
        )

        view = present(truncated)

        assert len(view.rows) == 5000
        assert view.hint.kind is HintKind.TRUNCATED
        assert view.hint.params == {"total": 5000, "limit": 5000}

    def test_rows(self, result: DiffResult) -> None:
        """Test rows carry formatted sides and entry links."""
        view = present(result, selected_to="1.5.0", live_version="1.5.0")

        added, removed, modified, _ = view.rows
        assert added.from_type == "-"
        assert added.to_size == "2.0 KB"
        assert added.can_open is True
        assert removed.can_open is False
        assert removed.from_name == "Old Card"
        assert modified.from_checksum == "0123456...9abcdef"

    def test_rows_not_linkable_for_old_snapshot(self, result: DiffResult) -> None:
        """Test rows do not link when 'to' is not the live version."""
        view = present(result, selected_to="1.5.0", live_version="1.6.0")

        assert not any(row.can_open for row in view.rows)


class TestCanOpenEntry:
    """Tests for can_open_entry()."""

    @pytest.mark.parametrize(
        ("status", "selected_to", "live", "expected"),
        [
            ("added", "2.0", "2.0", True),
            ("modified", "2.0", "2.0", True),
            ("removed", "2.0", "2.0", False),
            ("added", "1.9", "2.0", False),
            ("added", "", "", False),
        ],
    )
    def test_rules(self, status: str, selected_to: str, live: str, expected: bool) -> None:
        sides: dict[str, Any] = {}
        if status != "removed":
            sides["to"] = {"type": "png"}
        if status != "added":
            sides["from"] = {"type": "png"}
        diff_item = DiffItem.model_validate(item("x", status, **sides))

        assert can_open_entry(diff_item, selected_to, live) is expected


class TestFormatting:
    """Tests for checksum and size formatting."""

    def test_long_checksum_shortened(self) -> None:
        assert format_checksum("0123456789abcdef") == "0123456...9abcdef"

    def test_fourteen_chars_verbatim(self) -> None:
        assert format_checksum("0123456789abcd") == "0123456789abcd"

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_checksum(self, value: str | None) -> None:
        assert format_checksum(value) == "-"

    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0 B"), (None, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (12 * 1024 * 1024, "12 MB")],
    )
    def test_format_bytes(self, size: int | None, expected: str) -> None:
        assert format_bytes(size) == expected

    def test_numeric_checksum_row(self) -> None:
        """Test checksums delivered as numbers are displayed as strings."""
        diff_item = DiffItem.model_validate(item("x", "added", to={"checksum": 1234}))

        assert to_row(diff_item).to_checksum == "1234"


class TestDiffItemValidation:
    """Tests for side consistency of diff items."""

    def test_added_with_from_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiffItem.model_validate(item("x", "added", **{"from": {}, "to": {}}))

    def test_removed_with_to_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiffItem.model_validate(item("x", "removed", **{"from": {}, "to": {}}))

    def test_modified_needs_both_sides(self) -> None:
        with pytest.raises(ValidationError):
            DiffItem.model_validate(item("x", "modified", to={}))

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DiffItem.model_validate(item("x", "renamed"))

    def test_status_enum(self) -> None:
        assert DiffItem.model_validate(item("x", "missing")).status is DiffStatus.MISSING
