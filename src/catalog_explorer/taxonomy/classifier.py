"""
Classification facade.

Answers category membership questions for catalog entries using the
rules held by a TaxonomyStore.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from catalog_explorer.client.contracts import CatalogEntry
from catalog_explorer.logger import get_logger
from catalog_explorer.taxonomy.matcher import (
    matches,
    matches_fields,
    tokenize_fields,
    tokenize_label,
)
from catalog_explorer.taxonomy.rules import CategoryRule, TaxonomyGroup
from catalog_explorer.taxonomy.store import TaxonomyStore

logger = get_logger(__name__, component="classifier")


class MatchMode(str, Enum):
    """How selected categories within one group combine."""

    ANY = "any"
    ALL = "all"


@dataclass
class CategorySelection:
    """Selected category keys per group, plus an optional exact type filter."""

    media: list[str] = field(default_factory=list)
    character: list[str] = field(default_factory=list)
    tag: list[str] = field(default_factory=list)
    type: str = ""

    def keys(self, group: TaxonomyGroup) -> list[str]:
        return getattr(self, group.value)

    @property
    def is_empty(self) -> bool:
        return not (self.media or self.character or self.tag or self.type)


@dataclass(frozen=True)
class CategoryShortcut:
    """A ready-made navigation link to one category."""

    key: str
    display: str
    query_param: str
    count: int | None = None


class Classifier:
    """
    Classifies labels and filters entries by category.

    Reads the store's live rules on every call, so results reflect
    overrides as soon as they are merged and built-ins before that.
    """

    def __init__(self, store: TaxonomyStore) -> None:
        self._store = store

    @property
    def store(self) -> TaxonomyStore:
        return self._store

    def categories_for(
        self,
        label: str,
        group: TaxonomyGroup,
        tokens: frozenset[str] | None = None,
    ) -> list[str]:
        """Keys of every rule in the group that the label matches."""
        haystack = tokenize_label(label) if tokens is None else tokens
        return [rule.key for rule in self._store.rules(group) if matches(label, rule, haystack)]

    def classify(self, label: str) -> dict[TaxonomyGroup, list[str]]:
        """Match a label against every group."""
        tokens = tokenize_label(label)
        return {group: self.categories_for(label, group, tokens) for group in TaxonomyGroup}

    def belongs_to(self, label: str, group: TaxonomyGroup, key: str) -> bool:
        """Check membership in a single category; unknown keys never match."""
        rule = self._store.find(group, key)
        if rule is None:
            return False
        return matches(label, rule)

    def _resolve(self, group: TaxonomyGroup, keys: Sequence[str]) -> list[CategoryRule]:
        rules = []
        for key in keys:
            rule = self._store.find(group, key)
            if rule is not None:
                rules.append(rule)
        return rules

    def filter_entries(
        self,
        entries: Iterable[CatalogEntry],
        selection: CategorySelection,
        mode: MatchMode | str = MatchMode.ANY,
    ) -> list[CatalogEntry]:
        """
        Keep the entries matching the selection.

        Groups combine with AND. Within a group, ``any`` keeps entries
        matching at least one selected rule and ``all`` keeps entries
        matching every selected rule. Keys unknown to the store are
        ignored; a group with nothing resolvable does not filter.

        An entry is matched on its label, display name, type, content
        types and categories. Patterns are searched in each of those on
        its own; tokens are pooled across all of them.

        Args:
            entries: Candidate entries, order preserved
            selection: Selected keys per group
            mode: Within-group combination

        Returns:
            list[CatalogEntry]: Matching entries
        """
        mode = MatchMode(mode)
        active: dict[TaxonomyGroup, list[CategoryRule]] = {}
        for group in TaxonomyGroup:
            rules = self._resolve(group, selection.keys(group))
            if rules:
                active[group] = rules

        kept: list[CatalogEntry] = []
        for entry in entries:
            if selection.type and entry.type != selection.type:
                continue
            fields = entry.search_fields
            tokens = tokenize_fields(fields)
            if all(self._group_match(fields, tokens, rules, mode) for rules in active.values()):
                kept.append(entry)
        return kept

    @staticmethod
    def _group_match(
        fields: list[str],
        tokens: frozenset[str],
        rules: list[CategoryRule],
        mode: MatchMode,
    ) -> bool:
        if mode is MatchMode.ALL:
            return all(matches_fields(fields, rule, tokens) for rule in rules)
        return any(matches_fields(fields, rule, tokens) for rule in rules)

    def count_matches(
        self,
        entries: Iterable[CatalogEntry],
    ) -> dict[TaxonomyGroup, dict[str, int]]:
        """Count matching entries for every rule of every group."""
        counts = {
            group: {rule.key: 0 for rule in self._store.rules(group)} for group in TaxonomyGroup
        }
        total = 0
        for entry in entries:
            total += 1
            fields = entry.search_fields
            tokens = tokenize_fields(fields)
            for group in TaxonomyGroup:
                for rule in self._store.rules(group):
                    if matches_fields(fields, rule, tokens):
                        counts[group][rule.key] += 1

        logger.debug("Category counts computed", entries=total)
        return counts

    def shortcuts(
        self,
        group: TaxonomyGroup,
        counts: Mapping[str, int] | None = None,
    ) -> list[CategoryShortcut]:
        """
        Build navigation shortcuts for every rule of a group.

        Args:
            group: Category group
            counts: Optional per-key counts (see count_matches)

        Returns:
            list[CategoryShortcut]: One shortcut per rule, declaration order
        """
        return [
            CategoryShortcut(
                key=rule.key,
                display=rule.display,
                query_param=group.query_param,
                count=counts.get(rule.key) if counts is not None else None,
            )
            for rule in self._store.rules(group)
        ]
