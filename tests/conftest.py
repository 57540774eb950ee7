import pandas as pd
import pytest

from skinsearch.catalog_build import normalise_catalog_df
from skinsearch.retrieval import DataFrameCatalogStore
from skinsearch.search import SkinSearchEngine

UPDATED_AT = "2024-05-01T00:00:00Z"


def _doc(skin_id, name, weapon, category, rarity="Classified", published=True):
    doc = {
        "id": skin_id,
        "name": name,
        "weapon": {"id": f"weapon_{weapon.lower()}", "name": weapon},
        "category": {"id": f"cat_{category.lower()}", "name": category},
        "rarity": {"id": f"rarity_{rarity.lower()}", "name": rarity, "color": "#d32ce6"},
        "collections": [{"id": "collection-1", "name": "The Phoenix Collection"}],
        "image": f"https://images.example.invalid/{skin_id}.png",
    }
    if published:
        doc["updatedAt"] = UPDATED_AT
    return doc


RAW_DOCS = [
    _doc("skin-1", "AK-47 | Redline", "AK-47", "Rifles"),
    _doc("skin-2", "AK-47 | Fire Serpent", "AK-47", "Rifles", rarity="Covert"),
    _doc("skin-3", "M4A4 | Howl", "M4A4", "Rifles", rarity="Contraband"),
    _doc("skin-4", "AWP | Redline", "AWP", "Sniper Rifles"),
    _doc("skin-5", "P250 | Fire Elemental", "P250", "Pistols"),
    _doc("skin-6", "SSG 08 | Sea Serpent", "SSG 08", "Sniper Rifles"),
    _doc("skin-7", "AK-47 | Draft Skin", "AK-47", "Rifles", published=False),
]


@pytest.fixture
def raw_docs():
    return [dict(d) for d in RAW_DOCS]


@pytest.fixture
def catalog_df(raw_docs):
    return normalise_catalog_df(pd.DataFrame(raw_docs))


@pytest.fixture
def store(catalog_df):
    return DataFrameCatalogStore(catalog_df)


@pytest.fixture
def engine(store):
    return SkinSearchEngine(store)
