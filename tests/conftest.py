import json

import pytest

from bda_search.services.search_service import FoodSearchEngine


@pytest.fixture
def sample_items():
    """Small catalog covering names, aliases, accents and missing nutrients."""
    return [
        {"id": "x1", "name": "Pasta di semola", "aliases": ["spaghetti"], "per100": {}},
        {"id": "x2", "name": "Petto di pollo", "aliases": ["pollo"], "per100": {}},
        {"id": "x3", "name": "Zucchine", "aliases": ["verdura"], "per100": {"kcal": 11}},
        {"id": "x4", "name": "Acciughe", "aliases": ["pesce", "verdura"], "per100": {"kcal": 96}},
        {"id": "x5", "name": "Caffè, infuso", "aliases": [], "per100": {"kcal": 2, "fiber": None}},
    ]


@pytest.fixture
def db_file(tmp_path, sample_items):
    path = tmp_path / "mock_db.json"
    path.write_text(json.dumps(sample_items), encoding="utf-8")
    return path


@pytest.fixture
def engine(db_file):
    eng = FoodSearchEngine(source=db_file)
    eng.load(logger=lambda _line: None)
    return eng


@pytest.fixture
def fuzzy_engine(db_file):
    eng = FoodSearchEngine(strategy="fuzzy", source=db_file)
    eng.load(logger=lambda _line: None)
    return eng
