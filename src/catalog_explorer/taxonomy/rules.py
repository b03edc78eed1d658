"""
Category rules and the built-in rule tables.

Rules are declared as plain data (pattern strings and tokens) and
compiled into CategoryRule instances when a taxonomy is seeded.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TaxonomyGroup(str, Enum):
    """The independent category groups of the taxonomy."""

    MEDIA = "media"
    CHARACTER = "character"
    TAG = "tag"

    @property
    def query_param(self) -> str:
        """Query parameter used by navigation links for this group."""
        return {
            TaxonomyGroup.MEDIA: "media",
            TaxonomyGroup.CHARACTER: "character",
            TaxonomyGroup.TAG: "tags",
        }[self]


@dataclass
class CategoryRule:
    """
    A named matching predicate.

    A label belongs to the rule when any pattern matches it or when its
    token set shares a token with the rule. A rule with neither patterns
    nor tokens matches every label.
    """

    key: str
    label: str | None = None
    label_key: str | None = None
    patterns: list[re.Pattern[str]] = field(default_factory=list)
    tokens: list[str] = field(default_factory=list)

    @property
    def display(self) -> str:
        """Display text, or the localization key when no label is set."""
        return self.label or self.label_key or self.key

    @property
    def is_wildcard(self) -> bool:
        return not self.patterns and not self.tokens

    def add_tokens(self, tokens: Iterable[Any]) -> None:
        """Union tokens into the rule (case-folded, first insertion order kept)."""
        merged = list(self.tokens)
        seen = set(merged)
        for token in tokens:
            if not token:
                continue
            folded = str(token).lower()
            if folded not in seen:
                seen.add(folded)
                merged.append(folded)
        self.tokens = merged

    def copy(self) -> "CategoryRule":
        return CategoryRule(
            key=self.key,
            label=self.label,
            label_key=self.label_key,
            patterns=list(self.patterns),
            tokens=list(self.tokens),
        )


def compile_rule(definition: Mapping[str, Any]) -> CategoryRule:
    """
    Build a CategoryRule from a declarative table row.

    Args:
        definition: Mapping with ``key`` and optional ``label``,
            ``label_key``, ``patterns`` (regex strings) and ``tokens``

    Returns:
        CategoryRule with case-insensitive compiled patterns
    """
    rule = CategoryRule(
        key=definition["key"],
        label=definition.get("label"),
        label_key=definition.get("label_key"),
        patterns=[re.compile(p, re.IGNORECASE) for p in definition.get("patterns", ())],
    )
    rule.add_tokens(definition.get("tokens", ()))
    return rule


def _word(name: str) -> str:
    return rf"(^|[_-]){name}([_.-]|$)"


BUILTIN_MEDIA: tuple[dict[str, Any], ...] = (
    {
        "key": "image",
        "label_key": "filters.media.image",
        "patterns": (r"^image_", r"^icon_", r"^spriteasset_", r"^ui_", r"^launcher_"),
    },
    {
        "key": "video",
        "label_key": "filters.media.video",
        "patterns": (r"\.usm$", r"^music_lyric_video_", r"^picture_"),
    },
    {
        "key": "audio",
        "label_key": "filters.media.audio",
        "patterns": (r"^bgm_", r"^vo_", r"^se_", r"^music_", r"\.acb$", r"\.awb$"),
    },
    {
        "key": "model",
        "label_key": "filters.media.model",
        "patterns": (r"^3d_", r"^ingame_", r"\.playable\.assetbundle$"),
    },
    {
        "key": "motion",
        "label_key": "filters.media.motion",
        "patterns": (r"^mot_", r"\.anim\.assetbundle$", r"\.controller\.assetbundle$"),
    },
    {
        "key": "story",
        "label_key": "filters.media.story",
        "patterns": (r"^story_", r"\.txt$", r"^quest_", r"^section_"),
    },
    {
        "key": "chart",
        "label_key": "filters.media.chart",
        "patterns": (r"^rhythmgame_", r"^musicscore_", r"\.bytes$", r"\.csv$"),
    },
)

BUILTIN_CHARACTERS: tuple[dict[str, Any], ...] = tuple(
    {"key": name, "label": name.capitalize(), "patterns": (_word(name),)}
    for name in ("kaho", "sayaka", "tsuzuri", "megumi", "ginko", "rurino", "kozue", "hime")
)

BUILTIN_TAGS: tuple[dict[str, Any], ...] = tuple(
    {
        "key": name,
        "label_key": f"filters.tag.{name}",
        "tokens": (name,),
        "patterns": (_word(name),),
    }
    for name in ("skill", "middle", "full", "half", "season", "adv")
)

BUILTIN_TABLES: dict[TaxonomyGroup, tuple[dict[str, Any], ...]] = {
    TaxonomyGroup.MEDIA: BUILTIN_MEDIA,
    TaxonomyGroup.CHARACTER: BUILTIN_CHARACTERS,
    TaxonomyGroup.TAG: BUILTIN_TAGS,
}
