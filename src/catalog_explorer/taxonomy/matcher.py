"""
Label matching against category rules.

Pure functions over CategoryRule data; no taxonomy state involved.
"""

import re
from collections.abc import Iterable, Sequence

from catalog_explorer.taxonomy.rules import CategoryRule

_SEPARATORS = re.compile(r"[^a-z0-9]+")
_TRAILING_DIGITS = re.compile(r"\d+$")


def tokenize_label(label: str) -> frozenset[str]:
    """
    Split a label into lower-case tokens.

    Runs of characters outside ``[a-z0-9]`` separate tokens. A token with
    trailing digits also contributes its stripped form, so ``"skill2"``
    yields both ``skill2`` and ``skill``.

    Args:
        label: Entry label (or any searchable text)

    Returns:
        Unordered set of non-empty tokens
    """
    tokens: set[str] = set()
    for part in _SEPARATORS.split(label.lower()):
        if not part:
            continue
        tokens.add(part)
        stripped = _TRAILING_DIGITS.sub("", part)
        if stripped and stripped != part:
            tokens.add(stripped)
    return frozenset(tokens)


def tokenize_fields(fields: Iterable[str]) -> frozenset[str]:
    """Union of the tokens of every field."""
    tokens: set[str] = set()
    for text in fields:
        tokens |= tokenize_label(text)
    return frozenset(tokens)


def _shares_token(rule: CategoryRule, tokens: Iterable[str]) -> bool:
    haystack = tokens if isinstance(tokens, (set, frozenset)) else frozenset(tokens)
    return any(token in haystack for token in rule.tokens)


def matches(
    label: str,
    rule: CategoryRule,
    tokens: Iterable[str] | None = None,
) -> bool:
    """
    Check whether a label belongs to a rule.

    Patterns are tried first; the token fallback only runs when no
    pattern matched. Pass ``tokens`` to reuse an already computed
    token set when testing one label against many rules.
    """
    return matches_fields((label,), rule, tokens)


def matches_fields(
    fields: Sequence[str],
    rule: CategoryRule,
    tokens: Iterable[str] | None = None,
) -> bool:
    """
    Check whether an entry described by several texts belongs to a rule.

    Each pattern is searched in every field on its own, so anchored
    patterns such as ``\\.acb$`` still see the end of the label when a
    display name is present. The token fallback uses the union of all
    fields' tokens.

    Args:
        fields: Label first, then descriptive texts (display name, type,
            content types, categories)
        rule: Rule to test
        tokens: Precomputed tokens of all fields

    Returns:
        bool: True if a pattern matched a field or a token is shared
    """
    if rule.is_wildcard:
        return True

    if any(pattern.search(text) for text in fields for pattern in rule.patterns):
        return True

    if not rule.tokens:
        return False

    return _shares_token(rule, tokenize_fields(fields) if tokens is None else tokens)
