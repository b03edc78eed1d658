"""
Category taxonomy.

Rule tables, the label matcher, the taxonomy store and the
classification facade built on top of them.
"""

from catalog_explorer.taxonomy.classifier import (
    CategorySelection,
    CategoryShortcut,
    Classifier,
    MatchMode,
)
from catalog_explorer.taxonomy.matcher import (
    matches,
    matches_fields,
    tokenize_fields,
    tokenize_label,
)
from catalog_explorer.taxonomy.rules import CategoryRule, TaxonomyGroup, compile_rule
from catalog_explorer.taxonomy.store import RuleView, TaxonomySnapshot, TaxonomyStore

__all__ = [
    "CategoryRule",
    "CategorySelection",
    "CategoryShortcut",
    "Classifier",
    "MatchMode",
    "RuleView",
    "TaxonomyGroup",
    "TaxonomySnapshot",
    "TaxonomyStore",
    "compile_rule",
    "matches",
    "matches_fields",
    "tokenize_fields",
    "tokenize_label",
]
