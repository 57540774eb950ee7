from __future__ import annotations

"""
Text normalization utilities shared by the catalog loader and the
search engine.

Catalog names keep their casing for display; queries are folded to
lowercase here once so every later comparison can be a plain string
operation.
"""

import math
import re
import unicodedata
from typing import List

from .config import MAX_QUERY_CHARS


# ---------------------------
# Basic helpers
# ---------------------------

def clamp_text_length(text: str, max_chars: int = MAX_QUERY_CHARS) -> str:
    """
    Hard cap on input size so a pasted paragraph cannot blow up the
    per-candidate matching work.
    """
    if not isinstance(text, str):
        text = str(text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def normalize_unicode(text: str) -> str:
    """
    Normalize unicode into NFC so visually identical names compare
    equal (e.g. composed vs. decomposed accents in sticker names).
    """
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def normalize_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs into a single space and strip edges.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


# ---------------------------
# Pipelines
# ---------------------------

def basic_clean(text) -> str:
    """
    Cleaning used for catalog fields: unicode + whitespace, casing
    preserved.  ``None`` and NaN values become an empty string.
    """
    if text is None or (isinstance(text, float) and math.isnan(text)):
        return ""
    text = normalize_unicode(str(text))
    return normalize_whitespace(text)


def normalize_name(name) -> str:
    """Catalog name as compared against a normalized query."""
    return basic_clean(name).lower()


def normalize_query(text: str | None) -> str:
    """
    Dedicated pipeline for user queries.

    - clamp length
    - normalize unicode
    - collapse whitespace and trim
    - lowercase
    """
    if not text:
        return ""
    text = clamp_text_length(text)
    text = normalize_unicode(text)
    text = normalize_whitespace(text)
    return text.lower()


def tokenize_query(query: str) -> List[str]:
    """
    Split an already-normalized query on whitespace.  Single-character
    words are kept so short tokens stay searchable.
    """
    if not query:
        return []
    return [t for t in query.split() if t]
