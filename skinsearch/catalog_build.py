from __future__ import annotations

"""
Utilities to load and normalise the skin catalog snapshot.

The snapshot is the catalog store's on-disk form: either the JSON
export of the public CS2 skins API (a list of nested documents), a
JSON-lines dump of the same documents, or a Parquet/CSV file already in
the canonical schema.  Whatever the source, the loader returns one
DataFrame with flat, display-ready columns so the search path never has
to look inside nested documents.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from loguru import logger

from .config import CATALOG_SNAPSHOT_PATH
from .errors import CatalogUnavailableError
from .normalize import basic_clean

CANONICAL_COLUMNS: List[str] = [
    "id",
    "name",
    "image",
    "weapon",
    "category",
    "rarity_id",
    "rarity_name",
    "rarity_color",
    "collections",
    "published",
    "name_lower",
]

# Source documents are not uniform across exports; first match wins.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "_id", "skin_id"],
    "name": ["name", "market_hash_name", "title"],
    "image": ["image", "image_url", "icon_url"],
    "weapon": ["weapon", "weapon.name"],
    "category": ["category", "category.name"],
    "rarity": ["rarity"],
    "collections": ["collections", "collection"],
}


# ---------------------------
# Field parsing helpers
# ---------------------------

def _is_missing(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return False


def _display_name(value) -> str:
    """
    Flatten a nested ``{"id": ..., "name": ...}`` reference (or a bare
    string) into its display name.
    """
    if _is_missing(value):
        return ""
    if isinstance(value, dict):
        return basic_clean(value.get("name", ""))
    return basic_clean(value)


def _rarity_fields(value) -> Dict[str, str]:
    if isinstance(value, dict):
        return {
            "rarity_id": basic_clean(value.get("id", "")),
            "rarity_name": basic_clean(value.get("name", "")),
            "rarity_color": basic_clean(value.get("color", "")),
        }
    return {"rarity_id": "", "rarity_name": _display_name(value), "rarity_color": ""}


def normalize_collections(raw) -> List[str]:
    """Robustly convert a collections cell into a list of names.

    Handles lists of nested references, numpy arrays (Parquet round
    trips), and ``;``/``,`` separated strings.  Duplicates are removed
    while preserving order.
    """
    if isinstance(raw, np.ndarray):
        raw = raw.tolist()
    if isinstance(raw, (list, tuple)):
        names = [_display_name(x) for x in raw]
    elif isinstance(raw, dict):
        names = [_display_name(raw)]
    elif _is_missing(raw):
        names = []
    else:
        text = str(raw)
        # Stringified lists from CSV round trips, e.g. "['A', 'B']"
        quoted = re.findall(r"'([^']+)'", text)
        parts = quoted or text.replace(";", ",").split(",")
        names = [basic_clean(p) for p in parts]
    seen = set()
    out: List[str] = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            out.append(name)
    return out


def _canonicalise_flag(value) -> bool:
    """Normalise a published flag; anything unrecognised is unpublished."""
    if _is_missing(value):
        return False
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return bool(value)
    return str(value).strip().lower() in {"yes", "y", "true", "1", "published"}


def _published_column(df: pd.DataFrame) -> pd.Series:
    """
    Explicit ``published`` column if present, else "has been indexed":
    a non-empty ``updatedAt`` timestamp.
    """
    if "published" in df.columns:
        return df["published"].apply(_canonicalise_flag)
    if "updatedAt" in df.columns:
        return df["updatedAt"].apply(lambda v: not _is_missing(v) and str(v).strip() != "")
    logger.warning("Catalog has neither 'published' nor 'updatedAt'; no item is searchable.")
    return pd.Series(False, index=df.index, dtype=bool)


def _pick_column(df: pd.DataFrame, canon: str) -> Optional[str]:
    for candidate in COLUMN_CANDIDATES[canon]:
        if candidate in df.columns:
            return candidate
    return None


# ---------------------------
# Catalog normalisation
# ---------------------------

def empty_catalog_df() -> pd.DataFrame:
    return pd.DataFrame(columns=CANONICAL_COLUMNS)


def normalise_catalog_df(df_raw: pd.DataFrame) -> pd.DataFrame:
    """
    Normalise raw catalog documents into the canonical schema:

    - id (str)
    - name (str; display casing)
    - image, weapon, category (str)
    - rarity_id, rarity_name, rarity_color (str)
    - collections (List[str])
    - published (bool)
    - name_lower (str; used for matching)

    Frames that already carry the flat ``rarity_*`` columns (Parquet
    or CSV snapshots written by :func:`write_catalog_snapshot`) pass
    through with their values kept.
    """
    logger.info("Normalising catalog dataframe with {} raw rows", len(df_raw))
    if df_raw.empty:
        return empty_catalog_df()

    df = df_raw.copy()
    out = pd.DataFrame(index=df.index)

    id_col = _pick_column(df, "id")
    if id_col is None:
        logger.warning("Catalog has no id column; falling back to positional ids.")
        out["id"] = [f"item-{i}" for i in range(len(df))]
    else:
        out["id"] = df[id_col].apply(basic_clean)

    for canon in ("name", "image", "weapon", "category"):
        col = _pick_column(df, canon)
        out[canon] = df[col].apply(_display_name) if col else ""

    if {"rarity_id", "rarity_name", "rarity_color"} <= set(df.columns):
        for col in ("rarity_id", "rarity_name", "rarity_color"):
            out[col] = df[col].apply(basic_clean)
    else:
        rarity_col = _pick_column(df, "rarity")
        rarity = df[rarity_col] if rarity_col else pd.Series([None] * len(df), index=df.index)
        flat = pd.DataFrame(rarity.apply(_rarity_fields).tolist(), index=df.index)
        for col in ("rarity_id", "rarity_name", "rarity_color"):
            out[col] = flat[col]

    coll_col = _pick_column(df, "collections")
    if coll_col:
        out["collections"] = df[coll_col].apply(normalize_collections)
    else:
        out["collections"] = [[] for _ in range(len(df))]

    out["published"] = _published_column(df).astype(bool)

    # Drop rows without an id, then duplicate ids (first wins).
    no_id = out["id"] == ""
    if no_id.any():
        logger.warning("Dropped {} catalog items with no id", int(no_id.sum()))
        out = out[~no_id]
    before = len(out)
    out = out.drop_duplicates(subset=["id"]).reset_index(drop=True)
    if len(out) < before:
        logger.warning("Dropped {} duplicate catalog ids", before - len(out))

    # An unnamed item can never be found, so it is never listed as searchable.
    unnamed = out["name"] == ""
    if unnamed.any():
        logger.warning("{} catalog items have no name; marking them unpublished", int(unnamed.sum()))
        out.loc[unnamed, "published"] = False

    out["name_lower"] = out["name"].str.lower()

    logger.info(
        "Catalog normalisation complete. Rows: {}, published: {}",
        len(out),
        int(out["published"].sum()),
    )
    return out[CANONICAL_COLUMNS]


# ---------------------------
# IO helpers
# ---------------------------

def _read_json_documents(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() == ".jsonl":
            return [json.loads(line) for line in fh if line.strip()]
        payload = json.load(fh)
    if isinstance(payload, dict):
        # Some exports wrap the list: {"skins": [...]} / {"items": [...]}
        for key in ("skins", "items", "data"):
            if isinstance(payload.get(key), list):
                return payload[key]
        raise ValueError(f"Unrecognised JSON catalog layout in {path}")
    return list(payload)


def read_raw_catalog(path: Path) -> pd.DataFrame:
    """Read a snapshot file into a raw DataFrame based on its suffix."""
    ext = path.suffix.lower()
    if ext in {".json", ".jsonl"}:
        return pd.DataFrame(_read_json_documents(path))
    if ext == ".parquet":
        return pd.read_parquet(path)
    if ext == ".csv":
        return pd.read_csv(path, keep_default_na=False)
    raise ValueError(f"Unsupported catalog snapshot format: {path.suffix}")


def load_catalog_snapshot(path: Path = CATALOG_SNAPSHOT_PATH) -> pd.DataFrame:
    """
    Load and normalise the catalog snapshot.

    Raises :class:`CatalogUnavailableError` if the file is missing or
    cannot be parsed.
    """
    path = Path(path)
    logger.info("Loading catalog snapshot from {}", path)
    if not path.exists():
        raise CatalogUnavailableError(f"Catalog snapshot not found: {path}")
    try:
        df_raw = read_raw_catalog(path)
    except (OSError, ValueError) as e:
        logger.exception("Failed to read catalog snapshot {}: {}", path, e)
        raise CatalogUnavailableError(f"Catalog snapshot unreadable: {path}") from e
    logger.info("Loaded {} raw rows from catalog snapshot", len(df_raw))
    return normalise_catalog_df(df_raw)


def write_catalog_snapshot(df: pd.DataFrame, output_path: Path) -> Path:
    """
    Write a normalised catalog to Parquet so later loads skip the
    nested-document flattening.  Returns the output path.
    """
    output_path = Path(output_path)
    logger.info("Writing catalog snapshot to {}", output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(output_path, index=False)
    logger.info("Catalog snapshot written with {} rows", len(df))
    return output_path
