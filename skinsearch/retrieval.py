from __future__ import annotations

"""
Candidate retrieval from the catalog store.

The store answers one question for the search engine: given a set of
predicates and an eligibility filter, which items are candidates and
how many are there?  Scoring and ordering happen later, in
:mod:`skinsearch.ranking`, so any store implementation only has to
agree on membership.

:class:`DataFrameCatalogStore` keeps the normalised snapshot in memory
and is never mutated after construction, so one instance can serve any
number of concurrent requests.

Example::

    from skinsearch.catalog_build import load_catalog_snapshot
    from skinsearch.patterns import build_predicates
    from skinsearch.retrieval import DataFrameCatalogStore

    store = DataFrameCatalogStore(load_catalog_snapshot())
    result = store.find_candidates(build_predicates("redline"))
    for cand in result.candidates:
        ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence

import pandas as pd
from loguru import logger

from .catalog_build import CANONICAL_COLUMNS, empty_catalog_df
from .config import ALL_CATEGORIES, CatalogItem
from .mapping import rows_to_items, to_api_item
from .patterns import Predicate


@dataclass(frozen=True)
class Candidate:
    """A catalog item as returned by the store, with its eligibility flag."""
    item: CatalogItem
    published: bool


@dataclass(frozen=True)
class CandidateSet:
    candidates: List[Candidate] = field(default_factory=list)
    count: int = 0


@dataclass(frozen=True)
class BrowseResult:
    items: List[CatalogItem] = field(default_factory=list)
    total_count: int = 0


class CatalogStore(ABC):
    """
    Read-only catalog interface used by the search engine and the
    browse endpoints.
    """

    @abstractmethod
    def find_candidates(
        self,
        predicates: Sequence[Predicate],
        published_only: bool = True,
    ) -> CandidateSet:
        """
        Return every item whose name satisfies at least one predicate.

        Args:
            predicates: Match predicates built from the query
            published_only: Restrict to items eligible for search

        Returns:
            CandidateSet with the candidates (store order) and their count
        """

    @abstractmethod
    def browse(self, category: str, search: str, skip: int, limit: int) -> BrowseResult:
        """Catalog-order listing filtered by category and name substring."""

    @abstractmethod
    def categories(self) -> List[str]:
        """Distinct non-empty category names, sorted."""


class DataFrameCatalogStore(CatalogStore):
    """Catalog store backed by the canonical pandas DataFrame."""

    def __init__(self, df: pd.DataFrame | None = None) -> None:
        if df is None:
            df = empty_catalog_df()
        missing = [c for c in CANONICAL_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Catalog frame is missing columns: {missing}")
        self._df = df.reset_index(drop=True)

    def __len__(self) -> int:
        return len(self._df)

    @property
    def published_count(self) -> int:
        return int(self._df["published"].sum()) if len(self._df) else 0

    def find_candidates(
        self,
        predicates: Sequence[Predicate],
        published_only: bool = True,
    ) -> CandidateSet:
        if not predicates or self._df.empty:
            return CandidateSet()

        df = self._df
        if published_only:
            df = df[df["published"].astype(bool)]

        tests = [p.test for p in predicates]
        mask = df["name_lower"].map(lambda n: any(t(n) for t in tests))
        matched = df[mask.astype(bool)]

        candidates = [
            Candidate(item=to_api_item(row), published=bool(row["published"]))
            for _, row in matched.iterrows()
        ]
        logger.debug("Store matched {} of {} rows", len(candidates), len(df))
        return CandidateSet(candidates=candidates, count=len(candidates))

    def browse(self, category: str, search: str, skip: int, limit: int) -> BrowseResult:
        df = self._df
        category = (category or "").strip().lower()
        search = (search or "").strip().lower()

        if category and category != ALL_CATEGORIES:
            df = df[df["category"].str.lower().str.contains(category, regex=False)]
        if search:
            df = df[df["name_lower"].str.contains(search, regex=False)]

        total = len(df)
        page = df.iloc[skip:skip + limit]
        return BrowseResult(items=rows_to_items(page), total_count=total)

    def categories(self) -> List[str]:
        if self._df.empty:
            return []
        values = self._df["category"].dropna().astype(str)
        return sorted({v for v in values if v})
