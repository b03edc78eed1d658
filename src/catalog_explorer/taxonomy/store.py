"""
Taxonomy Store.

Owns the category rules of every group, seeds them from the built-in
tables and merges server-supplied overrides into them.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from catalog_explorer.client.contracts import TaxonomyOverrides
from catalog_explorer.logger import get_logger
from catalog_explorer.taxonomy.rules import (
    BUILTIN_TABLES,
    CategoryRule,
    TaxonomyGroup,
    compile_rule,
)

OverridesFetcher = Callable[[], Awaitable[TaxonomyOverrides | Mapping[str, Any] | None]]


@dataclass(frozen=True)
class RuleView:
    """Read-only copy of a CategoryRule."""

    key: str
    label: str | None
    label_key: str | None
    patterns: tuple[str, ...]
    tokens: tuple[str, ...]

    @classmethod
    def from_rule(cls, rule: CategoryRule) -> "RuleView":
        return cls(
            key=rule.key,
            label=rule.label,
            label_key=rule.label_key,
            patterns=tuple(p.pattern for p in rule.patterns),
            tokens=tuple(rule.tokens),
        )


@dataclass(frozen=True)
class TaxonomySnapshot:
    """Point-in-time copy of all rule groups."""

    media: tuple[RuleView, ...]
    character: tuple[RuleView, ...]
    tag: tuple[RuleView, ...]

    def group(self, group: TaxonomyGroup) -> tuple[RuleView, ...]:
        return getattr(self, group.value)


class TaxonomyStore:
    """
    Holds the media, character and tag rule groups.

    The only mutation path is merge_overrides(). Media categories are a
    closed set (override tokens extend existing rules only); character
    categories are open (unknown override tokens become new rules).

    Example:
        >>> store = TaxonomyStore()
        >>> store.merge_overrides({"characters": ["Izumi"]})
        >>> store.find(TaxonomyGroup.CHARACTER, "izumi").label
        'Izumi'
    """

    def __init__(
        self,
        *,
        media: list[CategoryRule] | None = None,
        characters: list[CategoryRule] | None = None,
        tags: list[CategoryRule] | None = None,
    ) -> None:
        """
        Initialize the store.

        Args:
            media: Media rules (built-in table if None)
            characters: Character rules (built-in table if None)
            tags: Tag rules (built-in table if None)
        """
        self._groups: dict[TaxonomyGroup, list[CategoryRule]] = {
            TaxonomyGroup.MEDIA: self._seed(TaxonomyGroup.MEDIA, media),
            TaxonomyGroup.CHARACTER: self._seed(TaxonomyGroup.CHARACTER, characters),
            TaxonomyGroup.TAG: self._seed(TaxonomyGroup.TAG, tags),
        }
        self._merge_task: asyncio.Future[None] | None = None
        self._overrides_loaded = False
        self._logger = get_logger(__name__, component="taxonomy_store")

    @staticmethod
    def _seed(group: TaxonomyGroup, rules: list[CategoryRule] | None) -> list[CategoryRule]:
        if rules is None:
            return [compile_rule(row) for row in BUILTIN_TABLES[group]]
        seeded: list[CategoryRule] = []
        keys: set[str] = set()
        for rule in rules:
            if rule.key in keys:
                raise ValueError(f"Duplicate {group.value} rule key: {rule.key}")
            keys.add(rule.key)
            seeded.append(rule.copy())
        return seeded

    @property
    def overrides_loaded(self) -> bool:
        """True once a server override document has been merged."""
        return self._overrides_loaded

    def rules(self, group: TaxonomyGroup) -> list[CategoryRule]:
        """Live rules of a group, in declaration order."""
        return self._groups[group]

    def find(self, group: TaxonomyGroup, key: str) -> CategoryRule | None:
        """Look up a rule by key, or None if the group has no such key."""
        for rule in self._groups[group]:
            if rule.key == key:
                return rule
        return None

    def snapshot(self) -> TaxonomySnapshot:
        """Return an immutable copy of the current rules."""
        return TaxonomySnapshot(
            media=tuple(RuleView.from_rule(r) for r in self._groups[TaxonomyGroup.MEDIA]),
            character=tuple(
                RuleView.from_rule(r) for r in self._groups[TaxonomyGroup.CHARACTER]
            ),
            tag=tuple(RuleView.from_rule(r) for r in self._groups[TaxonomyGroup.TAG]),
        )

    def merge_overrides(self, document: TaxonomyOverrides | Mapping[str, Any]) -> None:
        """
        Merge a server override document into the rules in place.

        Applying the same document more than once has no further effect.

        Args:
            document: ``{"media": {key: [token, ...]}, "characters": [token, ...]}``

        Raises:
            pydantic.ValidationError: If the document cannot be parsed
        """
        if not isinstance(document, TaxonomyOverrides):
            document = TaxonomyOverrides.model_validate(document)

        media_updated = 0
        for key, tokens in document.media.items():
            rule = self.find(TaxonomyGroup.MEDIA, key)
            if rule is None:
                continue
            rule.add_tokens(tokens)
            media_updated += 1

        characters = self._groups[TaxonomyGroup.CHARACTER]
        existing = {rule.key: rule for rule in characters}
        created = 0
        for token in document.characters:
            key = token.lower()
            if not key:
                continue
            rule = existing.get(key)
            if rule is not None:
                rule.add_tokens([key])
                continue
            rule = CategoryRule(key=key, label=token, tokens=[key])
            characters.append(rule)
            existing[key] = rule
            created += 1

        self._logger.info(
            "Taxonomy overrides merged",
            media_updated=media_updated,
            characters_created=created,
            characters_total=len(characters),
        )

    async def ensure_overrides(self, fetch: OverridesFetcher) -> None:
        """
        Fetch and merge the override document exactly once.

        Concurrent and later callers share the first call's task. Fetch
        or merge failures are logged and leave the rules untouched.

        Args:
            fetch: Coroutine function returning the override document,
                or None when unavailable
        """
        if self._merge_task is None:
            self._merge_task = asyncio.ensure_future(self._fetch_and_merge(fetch))
        await asyncio.shield(self._merge_task)

    async def _fetch_and_merge(self, fetch: OverridesFetcher) -> None:
        try:
            document = await fetch()
            if document is None:
                self._logger.warning("Taxonomy overrides unavailable, using built-in rules")
                return
            self.merge_overrides(document)
            self._overrides_loaded = True
        except Exception as e:
            self._logger.warning(
                "Taxonomy override merge failed, keeping current rules",
                error=str(e),
            )
