from __future__ import annotations

"""
Mapping utilities for the search API.

Converts rows of the canonical catalog DataFrame into the strict
Pydantic objects defined in :mod:`skinsearch.config`.  Matching-only
columns (``published``, ``name_lower``) never leave this module.
"""

from typing import List

import pandas as pd
from loguru import logger

from .catalog_build import normalize_collections
from .config import CatalogItem, Rarity


def to_api_item(row: pd.Series) -> CatalogItem:
    """Convert one catalog row into a :class:`CatalogItem`.

    If any field cannot be coerced into the expected type the exception
    is logged and re-raised.
    """
    try:
        rarity = None
        if row.get("rarity_id") or row.get("rarity_name"):
            rarity = Rarity(
                id=str(row.get("rarity_id", "")),
                name=str(row.get("rarity_name", "")),
                color=str(row.get("rarity_color", "")),
            )
        return CatalogItem(
            id=str(row.get("id", "")),
            name=str(row.get("name", "")),
            image=str(row.get("image", "") or ""),
            weapon=str(row.get("weapon", "") or ""),
            category=str(row.get("category", "") or ""),
            rarity=rarity,
            collections=normalize_collections(row.get("collections", [])),
        )
    except Exception as e:
        logger.exception("Error mapping row to API item: {}", e)
        raise


def rows_to_items(df: pd.DataFrame) -> List[CatalogItem]:
    """Convert every row of ``df`` (in order) into a :class:`CatalogItem`."""
    return [to_api_item(row) for _, row in df.iterrows()]
