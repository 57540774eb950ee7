from __future__ import annotations

"""
Pattern generation for catalog name search.

A normalized query is turned into a deliberately overlapping set of
predicates over the item name.  The set is a candidate pre-filter for
the catalog store, not a minimal matcher: an item reaches the scoring
stage when any one predicate holds.

Every predicate is built from literal string primitives below
(``str.find`` / ``startswith`` / ``endswith`` plus a word-boundary
test equivalent to regex ``\\b``).  Query text is never compiled into
a regular expression, so punctuation such as ``|``, ``(`` or ``*`` in
a skin name is just another character.

Example::

    from skinsearch.patterns import build_predicates
    preds = build_predicates("ak-47 redline")
    [p.name for p in preds]
    # ['query', 'word-start:ak-47', 'contains:ak-47', 'word-start:redline', ...]
"""

from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .config import RELEVANCE_WEIGHTS, RelevanceWeights
from .normalize import normalize_name, tokenize_query


# ---------------------------
# String primitives
# ---------------------------

def is_word_char(ch: str) -> bool:
    """Same character class as regex ``\\w`` in unicode mode."""
    return ch.isalnum() or ch == "_"


def at_word_boundary(text: str, pos: int) -> bool:
    """True when ``pos`` sits between a word and a non-word character."""
    before = pos > 0 and is_word_char(text[pos - 1])
    after = pos < len(text) and is_word_char(text[pos])
    return before != after


def iter_occurrences(text: str, fragment: str, start: int = 0) -> Iterator[int]:
    """Yield every (possibly overlapping) index of ``fragment`` at or after ``start``."""
    if not fragment:
        return
    idx = text.find(fragment, start)
    while idx != -1:
        yield idx
        idx = text.find(fragment, idx + 1)


def contains(text: str, fragment: str) -> bool:
    return fragment in text


def find_word_start(text: str, fragment: str, start: int = 0) -> int:
    """Index of the first occurrence of ``fragment`` that begins at a word boundary, or -1."""
    for idx in iter_occurrences(text, fragment, start):
        if at_word_boundary(text, idx):
            return idx
    return -1


def contains_word_start(text: str, fragment: str) -> bool:
    return find_word_start(text, fragment) != -1


def contains_whole_word(text: str, fragment: str) -> bool:
    """``fragment`` occurs with a word boundary on both sides."""
    for idx in iter_occurrences(text, fragment):
        if at_word_boundary(text, idx) and at_word_boundary(text, idx + len(fragment)):
            return True
    return False


def spans_first_last(text: str, first: str, last: str) -> bool:
    """Name starts with ``first`` and ends with ``last`` without the two overlapping."""
    return (
        len(text) >= len(first) + len(last)
        and text.startswith(first)
        and text.endswith(last)
    )


def contains_in_order(text: str, fragments: Sequence[str]) -> bool:
    """Each fragment appears after the end of the previous one."""
    pos = 0
    for frag in fragments:
        idx = text.find(frag, pos)
        if idx == -1:
            return False
        pos = idx + len(frag)
    return True


def word_starts_in_order(text: str, fragments: Sequence[str]) -> bool:
    """Like :func:`contains_in_order` but every fragment must begin a word."""
    pos = 0
    for frag in fragments:
        idx = find_word_start(text, frag, pos)
        if idx == -1:
            return False
        pos = idx + len(frag)
    return True


def words_joined_in_order(text: str, words: Sequence[str]) -> bool:
    """
    Every word appears in order, each starting at a word boundary, and
    the last one also ends at a word boundary.

    Taking the leftmost valid hit for all but the last word is safe:
    it leaves the most room for the words that follow.
    """
    if not words:
        return False
    pos = 0
    for word in words[:-1]:
        idx = find_word_start(text, word, pos)
        if idx == -1:
            return False
        pos = idx + len(word)
    last = words[-1]
    for idx in iter_occurrences(text, last, pos):
        if at_word_boundary(text, idx) and at_word_boundary(text, idx + len(last)):
            return True
    return False


# ---------------------------
# Predicates
# ---------------------------

@dataclass(frozen=True)
class Predicate:
    """
    A named boolean test over a normalized (lowercased, whitespace
    collapsed) item name.

    ``signal`` names the :class:`~skinsearch.config.RelevanceWeights`
    field this predicate lines up with, when there is one.  Scoring sums
    :meth:`weight` over the signal predicates that hold; candidate
    predicates without a signal only widen the candidate set.
    """
    name: str
    fragments: Tuple[str, ...]
    test: Callable[[str], bool] = field(compare=False, repr=False)
    signal: Optional[str] = None

    def matches(self, name: str) -> bool:
        return self.test(normalize_name(name))

    def weight(self, weights: RelevanceWeights = RELEVANCE_WEIGHTS) -> int:
        if self.signal is None:
            return 0
        return int(getattr(weights, self.signal))


def first_last_words(words: Sequence[str]) -> Optional[Tuple[str, str]]:
    """(first, last) for queries of two or more words whose ends differ."""
    if len(words) < 2:
        return None
    first, last = words[0], words[-1]
    if first == last:
        return None
    return first, last


def build_predicates(query: str) -> List[Predicate]:
    """
    Build the predicate set for a normalized (lowercased, trimmed)
    query.  An empty query yields no predicates; callers short-circuit
    before reaching the store.
    """
    if not query:
        return []

    words = tokenize_query(query)
    preds: List[Predicate] = [
        Predicate("query", (query,), lambda n, q=query: contains(n, q), signal="substring"),
    ]

    # repeated words yield repeated predicates
    for w in words:
        preds.append(Predicate(f"word-start:{w}", (w,), lambda n, w=w: contains_word_start(n, w)))
        preds.append(Predicate(f"contains:{w}", (w,), lambda n, w=w: contains(n, w)))

    ends = first_last_words(words)
    if ends is not None:
        first, last = ends
        preds.append(Predicate(
            "first-last-exact", ends,
            lambda n, f=first, l=last: spans_first_last(n, f, l),
            signal="first_last_exact",
        ))
        preds.append(Predicate(
            "first-last-boundary", ends,
            lambda n, f=first, l=last: word_starts_in_order(n, (f, l)),
        ))
        preds.append(Predicate(
            "first-last-any", ends,
            lambda n, f=first, l=last: contains(n, f) and contains(n, l),
        ))

    if len(words) >= 3:
        ordered = tuple(words)
        preds.append(Predicate(
            "ordered-all", ordered,
            lambda n, frags=ordered: contains_in_order(n, frags),
        ))

    return preds


def any_predicate_matches(predicates: Sequence[Predicate], name: str) -> bool:
    lowered = normalize_name(name)
    return any(p.test(lowered) for p in predicates)
