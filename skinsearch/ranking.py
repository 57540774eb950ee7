from __future__ import annotations

"""
Scoring, filtering, ordering and pagination of search candidates.

The store hands back an unordered candidate set; this module turns it
into a page:

1. score every candidate from its name and the normalized query
2. drop zero-score and unpublished candidates
3. order by score (desc), then name, then id, which is a total order
4. slice the requested page and report ``total`` / ``has_more``

Scores are only used for ordering here and are not part of the API
response.
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from .config import RELEVANCE_WEIGHTS, CatalogItem, RelevanceWeights
from .retrieval import Candidate
from .scoring import score_name


@dataclass(frozen=True)
class ScoredItem:
    item: CatalogItem
    score: int
    published: bool = True


@dataclass(frozen=True)
class SearchPage:
    items: List[CatalogItem] = field(default_factory=list)
    has_more: bool = False
    total: int = 0


def score_candidates(
    candidates: Iterable[Candidate],
    query: str,
    weights: RelevanceWeights = RELEVANCE_WEIGHTS,
) -> List[ScoredItem]:
    return [
        ScoredItem(item=c.item, score=score_name(c.item.name, query, weights), published=c.published)
        for c in candidates
    ]


def filter_results(scored: Iterable[ScoredItem]) -> List[ScoredItem]:
    """Keep eligible items with a positive score, whatever the store returned."""
    return [s for s in scored if s.score > 0 and s.published]


def rank(scored: Iterable[ScoredItem]) -> List[ScoredItem]:
    """Score descending, then name and id ascending (ordinal)."""
    return sorted(scored, key=lambda s: (-s.score, s.item.name, s.item.id))


def paginate(ranked: List[ScoredItem], page: int, limit: int) -> SearchPage:
    """Slice an already ranked list; ``page`` and ``limit`` must be >= 1."""
    skip = (page - 1) * limit
    window = ranked[skip:skip + limit]
    total = len(ranked)
    return SearchPage(
        items=[s.item for s in window],
        has_more=skip + len(window) < total,
        total=total,
    )


def rank_and_paginate(
    candidates: Iterable[Candidate],
    query: str,
    page: int,
    limit: int,
    weights: RelevanceWeights = RELEVANCE_WEIGHTS,
) -> SearchPage:
    ranked = rank(filter_results(score_candidates(candidates, query, weights)))
    return paginate(ranked, page, limit)
