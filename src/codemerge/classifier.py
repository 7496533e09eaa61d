from __future__ import annotations

import os
from typing import TYPE_CHECKING

from codemerge.config import (
    CLASSIFICATION_RULES,
    DOTFILE_CATEGORIES,
    HEADER_EXTENSIONS,
    SOURCE_EXTENSIONS,
    Category,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from codemerge.config import ClassificationRule


def classify(
    filename: str,
    rules: Sequence[ClassificationRule] = CLASSIFICATION_RULES,
) -> Category | None:
    """Map a bare filename to its category.

    Build-system rules are tried in table order and the first match wins.
    Header then source extensions are the fallback. Comparison is case-sensitive.

    Args:
        filename (str): the filename, without any directory part
        rules (Sequence[ClassificationRule], optional): the rule table. Defaults to CLASSIFICATION_RULES.

    Returns:
        Category | None: the matched category, or None when the file is not relevant
    """
    for rule in rules:
        if rule.matches(filename):
            return rule.category
    ext = os.path.splitext(filename)[1]
    if ext in HEADER_EXTENSIONS:
        return Category.HEADER
    if ext in SOURCE_EXTENSIONS:
        return Category.SOURCE
    return None


def is_hidden_allowed(filename: str, category: Category) -> bool:
    """Apply the hidden-file policy.

    Args:
        filename (str): the filename to check
        category (Category): the category `filename` was classified under

    Returns:
        bool: False for a dotfile outside DOTFILE_CATEGORIES, True otherwise
    """
    if not filename.startswith("."):
        return True
    return category in DOTFILE_CATEGORIES


def classify_entry(filename: str) -> Category | None:
    """Classify a filename and apply the hidden-file policy in one step."""
    category = classify(filename)
    if category is None or not is_hidden_allowed(filename, category):
        return None
    return category
