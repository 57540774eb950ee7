from __future__ import annotations
"""
Configuration for the skin catalog search service.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Paths
PROJECT_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CATALOG_SNAPSHOT_PATH = DATA_DIR / "skins.json"
CATALOG_SNAPSHOT_PATH = Path(os.getenv("CATALOG_SNAPSHOT_PATH", str(DEFAULT_CATALOG_SNAPSHOT_PATH)))

# Pagination
DEFAULT_PAGE_SIZE = 20
BROWSE_DEFAULT_PAGE_SIZE = 12
DEFAULT_MAX_PAGE_SIZE = 100
MAX_PAGE_SIZE = int(os.getenv("SEARCH_MAX_PAGE_SIZE", str(DEFAULT_MAX_PAGE_SIZE)))

# Text processing
MAX_QUERY_CHARS = 200

# Category value that disables the browse filter
ALL_CATEGORIES = "all"


# Relevance policy.  Signals are binary and purely additive, so a name that
# satisfies several of them outranks one that satisfies only the strongest.
# Preference order: exact > prefix > first_last_exact > whole_word
# > first_last_loose > word_boundary_join > substring.
@dataclass(frozen=True)
class RelevanceWeights:
    exact: int = 1000
    prefix: int = 500
    whole_word: int = 300
    substring: int = 100
    first_last_exact: int = 400
    first_last_loose: int = 250
    word_boundary_join: int = 150


RELEVANCE_WEIGHTS = RelevanceWeights()


# Pydantic schemas
class Rarity(BaseModel):
    id: str = ""
    name: str = ""
    color: str = ""


class CatalogItem(BaseModel):
    id: str
    name: str
    image: str = ""
    weapon: str = ""
    category: str = ""
    rarity: Optional[Rarity] = None
    collections: List[str] = Field(default_factory=list)


class SearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[CatalogItem]
    has_more: bool = Field(alias="hasMore")
    total: int = Field(ge=0)


class BrowseResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[CatalogItem]
    has_more: bool = Field(alias="hasMore")
    total_count: int = Field(ge=0, alias="totalCount")


class CategoriesResponse(BaseModel):
    categories: List[str]


class HealthResponse(BaseModel):
    status: str
    catalog_items: int = 0


class ErrorResponse(BaseModel):
    error: str
