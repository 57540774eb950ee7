import json

import numpy as np
import pandas as pd
import pytest
from loguru import logger

from skinsearch.catalog_build import (
    CANONICAL_COLUMNS,
    load_catalog_snapshot,
    normalise_catalog_df,
    normalize_collections,
    write_catalog_snapshot,
)
from skinsearch.errors import CatalogUnavailableError
from skinsearch.mapping import to_api_item
from skinsearch.retrieval import DataFrameCatalogStore


def test_nested_documents_are_flattened(catalog_df):
    assert list(catalog_df.columns) == CANONICAL_COLUMNS
    row = catalog_df.set_index("id").loc["skin-2"]
    assert row["name"] == "AK-47 | Fire Serpent"
    assert row["weapon"] == "AK-47"
    assert row["category"] == "Rifles"
    assert row["rarity_name"] == "Covert"
    assert row["collections"] == ["The Phoenix Collection"]
    assert row["name_lower"] == "ak-47 | fire serpent"


def test_published_follows_updated_at(catalog_df):
    flags = dict(zip(catalog_df["id"], catalog_df["published"]))
    assert flags["skin-1"]
    assert not flags["skin-7"]
    assert sum(flags.values()) == 6


def test_explicit_published_column_wins():
    df = normalise_catalog_df(pd.DataFrame({
        "id": ["a", "b", "c", "d"],
        "name": ["A", "B", "C", "D"],
        "published": ["yes", "no", True, 0],
        "updatedAt": ["x", "x", "x", "x"],
    }))
    assert df["published"].tolist() == [True, False, True, False]


def test_duplicates_and_unnamed_items():
    df = normalise_catalog_df(pd.DataFrame({
        "id": ["a", "a", "b", ""],
        "name": ["First", "Second", "", "Orphan"],
        "updatedAt": ["t", "t", "t", "t"],
    }))
    assert df["id"].tolist() == ["a", "b"]
    assert df["name"].tolist() == ["First", ""]
    assert df["published"].tolist() == [True, False]


def test_documents_without_id_are_dropped_with_warning():
    messages = []
    sink = logger.add(messages.append, level="WARNING")
    try:
        df = normalise_catalog_df(pd.DataFrame([
            {"id": "a", "name": "AK-47 | Redline", "updatedAt": "t"},
            {"name": "AWP | Redline", "updatedAt": "t"},
            {"name": "M4A1-S | Redline", "updatedAt": "t"},
        ]))
    finally:
        logger.remove(sink)
    assert df["id"].tolist() == ["a"]
    assert "nan" not in df["id"].tolist()
    assert any("2 catalog items with no id" in m for m in messages)
    assert not any("duplicate" in m for m in messages)


def test_missing_flags_mean_unpublished():
    df = normalise_catalog_df(pd.DataFrame({"id": ["a"], "name": ["AWP | Asiimov"]}))
    assert df["published"].tolist() == [False]


def test_empty_frame_keeps_schema():
    df = normalise_catalog_df(pd.DataFrame())
    assert list(df.columns) == CANONICAL_COLUMNS
    assert df.empty


@pytest.mark.parametrize(
    "raw, expected",
    [
        ([{"name": "Alpha"}, {"name": "Bravo"}, {"name": "Alpha"}], ["Alpha", "Bravo"]),
        (np.array(["Alpha", "Bravo"]), ["Alpha", "Bravo"]),
        ("['Alpha', 'Bravo']", ["Alpha", "Bravo"]),
        ("Alpha; Bravo", ["Alpha", "Bravo"]),
        (None, []),
        (float("nan"), []),
    ],
)
def test_normalize_collections(raw, expected):
    assert normalize_collections(raw) == expected


def test_to_api_item_hides_matching_columns(catalog_df):
    item = to_api_item(catalog_df.iloc[0])
    dumped = item.model_dump()
    assert dumped["id"] == "skin-1"
    assert dumped["rarity"] == {"id": "rarity_classified", "name": "Classified", "color": "#d32ce6"}
    assert "published" not in dumped
    assert "name_lower" not in dumped


def test_to_api_item_without_rarity():
    df = normalise_catalog_df(pd.DataFrame({"id": ["a"], "name": ["A"], "updatedAt": ["t"]}))
    assert to_api_item(df.iloc[0]).rarity is None


def test_load_json_export(tmp_path, raw_docs):
    path = tmp_path / "skins.json"
    path.write_text(json.dumps(raw_docs), encoding="utf-8")
    df = load_catalog_snapshot(path)
    assert len(df) == 7
    assert int(df["published"].sum()) == 6


def test_load_wrapped_json_and_jsonl(tmp_path, raw_docs):
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"skins": raw_docs}), encoding="utf-8")
    assert len(load_catalog_snapshot(wrapped)) == 7

    lines = tmp_path / "skins.jsonl"
    lines.write_text("\n".join(json.dumps(d) for d in raw_docs) + "\n", encoding="utf-8")
    assert len(load_catalog_snapshot(lines)) == 7


def test_missing_snapshot_raises(tmp_path):
    with pytest.raises(CatalogUnavailableError):
        load_catalog_snapshot(tmp_path / "nope.json")


def test_unreadable_snapshot_raises(tmp_path):
    bad = tmp_path / "skins.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(CatalogUnavailableError):
        load_catalog_snapshot(bad)

    odd = tmp_path / "skins.txt"
    odd.write_text("AK-47 | Redline", encoding="utf-8")
    with pytest.raises(CatalogUnavailableError):
        load_catalog_snapshot(odd)


def test_parquet_round_trip(tmp_path, catalog_df):
    pytest.importorskip("pyarrow")
    out = write_catalog_snapshot(catalog_df, tmp_path / "snapshot.parquet")
    df = load_catalog_snapshot(out)
    assert df["id"].tolist() == catalog_df["id"].tolist()
    assert df["published"].tolist() == catalog_df["published"].tolist()
    assert df.iloc[0]["collections"] == ["The Phoenix Collection"]
    assert df.iloc[0]["rarity_color"] == "#d32ce6"


def test_store_rejects_frames_without_schema():
    with pytest.raises(ValueError):
        DataFrameCatalogStore(pd.DataFrame({"name": ["x"]}))


def test_store_defaults_to_empty_catalog():
    store = DataFrameCatalogStore()
    assert len(store) == 0
    assert store.categories() == []
