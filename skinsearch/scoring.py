from __future__ import annotations

"""
Relevance scoring for catalog names.

The score of a name is the sum of binary signals, each worth its
weight from :data:`~skinsearch.config.RELEVANCE_WEIGHTS` when it holds
and zero otherwise.  Signals overlap: an exact match also
satisfies prefix, whole-word and substring, so stacking rewards names
that agree with the query in several ways at once.

Scores depend only on the item name and the normalized query, which
keeps them reproducible regardless of how the store pre-filtered the
candidates.
"""

from dataclasses import fields
from typing import Dict, List

from .config import RELEVANCE_WEIGHTS, RelevanceWeights
from .normalize import normalize_name, tokenize_query
from .patterns import (
    Predicate,
    contains,
    contains_in_order,
    contains_whole_word,
    first_last_words,
    spans_first_last,
    words_joined_in_order,
)

SIGNALS = tuple(f.name for f in fields(RelevanceWeights))


def signal_predicates(query: str) -> List[Predicate]:
    """
    One predicate per scoring signal that applies to ``query``.  First /
    last signals are only built for two or more distinct end words.
    """
    if not query:
        return []
    words = tokenize_query(query)
    preds = [
        Predicate("exact", (query,), lambda n, q=query: n == q, signal="exact"),
        Predicate("prefix", (query,), lambda n, q=query: n.startswith(q), signal="prefix"),
        Predicate("whole-word", (query,), lambda n, q=query: contains_whole_word(n, q), signal="whole_word"),
        Predicate("substring", (query,), lambda n, q=query: contains(n, q), signal="substring"),
    ]
    ends = first_last_words(words)
    if ends is not None:
        first, last = ends
        preds.append(Predicate(
            "first-last-exact", ends,
            lambda n, f=first, l=last: spans_first_last(n, f, l),
            signal="first_last_exact",
        ))
        preds.append(Predicate(
            "first-last-loose", ends,
            lambda n, e=ends: contains_in_order(n, e),
            signal="first_last_loose",
        ))
    joined = tuple(words)
    preds.append(Predicate(
        "word-boundary-join", joined,
        lambda n, w=joined: words_joined_in_order(n, w),
        signal="word_boundary_join",
    ))
    return preds


def explain_score(
    name: str,
    query: str,
    weights: RelevanceWeights = RELEVANCE_WEIGHTS,
) -> Dict[str, int]:
    """
    Per-signal contributions for ``name`` against a normalized query.

    Keys follow the field names of :class:`RelevanceWeights`; values are
    either the field's weight or 0.  The name goes through the same
    whitespace and unicode cleanup as the query before comparison.
    """
    signals = {s: 0 for s in SIGNALS}
    lowered = normalize_name(name)
    if not query or not lowered:
        return signals

    for pred in signal_predicates(query):
        if pred.test(lowered):
            signals[pred.signal] = pred.weight(weights)
    return signals


def score_name(
    name: str,
    query: str,
    weights: RelevanceWeights = RELEVANCE_WEIGHTS,
) -> int:
    """Total relevance score of ``name`` for a normalized query."""
    return sum(explain_score(name, query, weights).values())
