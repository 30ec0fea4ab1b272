"""Identifier casing, pluralization and SQL type mapping.

Converts snake_case database identifiers into the PascalCase class names and
camelCase field names used by generated entities.
"""
from __future__ import annotations

from typing import Sequence

# Checked in order; the first matching prefix wins.
DEFAULT_TYPE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("TIMESTAMP", "DATETIME"), "LocalDateTime"),
    (("DATE",), "LocalDate"),
    (("VARCHAR", "TEXT", "CHAR"), "String"),
    (("BIGINT",), "Long"),
    (("INT", "INTEGER"), "Integer"),
    (("DOUBLE", "FLOAT"), "Double"),
    (("BOOLEAN", "BIT"), "Boolean"),
)

DEFAULT_TARGET_TYPE = "String"

_VOWELS = frozenset("aeiou")


def to_class_name(identifier: str) -> str:
    """Convert a snake_case identifier to PascalCase.

    Examples:
        >>> to_class_name("user_profile")
        'UserProfile'
        >>> to_class_name("ORDER_ITEMS")
        'OrderItems'
    """
    return "".join(
        segment[0].upper() + segment[1:].lower()
        for segment in identifier.split("_")
        if segment
    )


def to_field_name(identifier: str) -> str:
    """Convert a snake_case identifier to camelCase."""
    class_name = to_class_name(identifier)
    if not class_name:
        return ""
    return class_name[0].lower() + class_name[1:]


def pluralize(word: str) -> str:
    """Pluralize an English word with simple suffix rules.

    Irregular nouns are not handled ("person" -> "persons"), and a word
    already ending in "s" still gets "es" ("status" -> "statuses").
    """
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2].lower() not in _VOWELS:
        return word[:-1] + "ies"
    return word + "s"


def singularize(word: str) -> str:
    """Undo pluralize() for the common cases.

    Words ending in "ss", "us" or "is" are taken as already singular
    ("address", "status", "analysis").

    Examples:
        >>> singularize("categories")
        'category'
        >>> singularize("courses")
        'course'
    """
    lower = word.lower()
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes")):
        return word[:-2]
    if lower.endswith(("ss", "us", "is")):
        return word
    if lower.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def map_sql_type(
    sql_type: str,
    rules: Sequence[tuple[Sequence[str], str]] | None = None,
    default: str = DEFAULT_TARGET_TYPE
) -> str:
    """Map a raw SQL type token to a target-language type.

    Args:
        sql_type: SQL type token, e.g. "VARCHAR" or "bigint"
        rules: Ordered (prefixes, target_type) pairs; defaults to DEFAULT_TYPE_RULES
        default: Type returned when no rule matches

    Returns:
        Target type name
    """
    upper = sql_type.strip().upper()
    for prefixes, target in (rules if rules is not None else DEFAULT_TYPE_RULES):
        if any(upper.startswith(prefix.upper()) for prefix in prefixes):
            return target
    return default
