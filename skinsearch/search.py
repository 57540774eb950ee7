from __future__ import annotations

"""
Search engine facade: one call per request, no state between calls.

Wires the pieces together for a single query::

    query -> build_predicates -> store.find_candidates
          -> score / filter / rank -> page

Pagination parameters are clamped rather than rejected.  Any fault
below this layer surfaces as a single :class:`SearchError`; nothing is
retried and no partial page is ever returned.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from .config import (
    ALL_CATEGORIES,
    BROWSE_DEFAULT_PAGE_SIZE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    RELEVANCE_WEIGHTS,
    CatalogItem,
    RelevanceWeights,
)
from .errors import CatalogUnavailableError, SearchError
from .normalize import normalize_query
from .patterns import build_predicates
from .ranking import SearchPage, rank_and_paginate
from .retrieval import CatalogStore


@dataclass(frozen=True)
class BrowsePage:
    items: List[CatalogItem] = field(default_factory=list)
    has_more: bool = False
    total_count: int = 0


def parse_int(value, default: int) -> int:
    """Lenient integer parsing for query-string values; junk gives ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def clamp_page(page: Optional[int]) -> int:
    if page is None or page < 1:
        return 1
    return page


def clamp_limit(limit: Optional[int], default: int = DEFAULT_PAGE_SIZE, maximum: int = MAX_PAGE_SIZE) -> int:
    if limit is None or limit < 1:
        limit = default
    return min(limit, maximum)


class SkinSearchEngine:
    """Stateless search over a :class:`CatalogStore`."""

    def __init__(
        self,
        store: CatalogStore,
        weights: RelevanceWeights = RELEVANCE_WEIGHTS,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self.store = store
        self.weights = weights
        self.max_page_size = max(1, max_page_size)

    def search(self, q: Optional[str], page: Optional[int] = 1, limit: Optional[int] = DEFAULT_PAGE_SIZE) -> SearchPage:
        query = normalize_query(q)
        if not query:
            return SearchPage()

        page = clamp_page(page)
        limit = clamp_limit(limit, DEFAULT_PAGE_SIZE, self.max_page_size)

        started = time.perf_counter()
        try:
            predicates = build_predicates(query)
            found = self.store.find_candidates(predicates, published_only=True)
            result = rank_and_paginate(found.candidates, query, page, limit, self.weights)
        except CatalogUnavailableError:
            raise
        except Exception as e:
            logger.exception("Search failed for query '{}': {}", query, e)
            raise SearchError("Failed to search skins") from e

        logger.info(
            "Search q='{}' page={} limit={} -> {} of {} results in {:.1f} ms",
            query,
            page,
            limit,
            len(result.items),
            result.total,
            (time.perf_counter() - started) * 1000,
        )
        return result

    def browse(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = BROWSE_DEFAULT_PAGE_SIZE,
    ) -> BrowsePage:
        page = clamp_page(page)
        limit = clamp_limit(limit, BROWSE_DEFAULT_PAGE_SIZE, self.max_page_size)
        skip = (page - 1) * limit
        try:
            result = self.store.browse(category or "", search or "", skip, limit)
        except CatalogUnavailableError:
            raise
        except Exception as e:
            logger.exception("Browse failed (category='{}', search='{}'): {}", category, search, e)
            raise SearchError("Failed to fetch skins") from e
        return BrowsePage(
            items=result.items,
            has_more=skip + len(result.items) < result.total_count,
            total_count=result.total_count,
        )

    def categories(self) -> List[str]:
        try:
            names = self.store.categories()
        except CatalogUnavailableError:
            raise
        except Exception as e:
            logger.exception("Listing categories failed: {}", e)
            raise SearchError("Failed to fetch categories") from e
        return [ALL_CATEGORIES] + names
