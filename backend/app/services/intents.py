"""
Question intent predicates.

Each predicate is a plain substring check over the lowercased question; the
answer rule table composes them.
"""

from typing import Tuple

WHY_SHIPPED_PHRASES: Tuple[str, ...] = ("why did we ship", "why we shipped", "why shipped")
WHAT_CHANGED_PHRASES: Tuple[str, ...] = ("what changed", "recently", "caused this")
FAILURE_PHRASES: Tuple[str, ...] = ("500", "error", "broken", "fail", "not working")


def _mentions(question: str, phrases: Tuple[str, ...]) -> bool:
    q = (question or "").lower()
    return any(phrase in q for phrase in phrases)


def is_why_shipped(question: str) -> bool:
    return _mentions(question, WHY_SHIPPED_PHRASES)


def is_what_changed(question: str) -> bool:
    return _mentions(question, WHAT_CHANGED_PHRASES)


def looks_like_failure(question: str) -> bool:
    return _mentions(question, FAILURE_PHRASES)
