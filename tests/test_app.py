"""
Tests for the Flask JSON API and settings.
"""
import json

import pytest

from bda_search.app import create_app
from bda_search.config import Settings, get_settings
from bda_search.services.search_service import FoodSearchEngine


@pytest.fixture
def client(db_file):
    settings = Settings(db_path=str(db_file))
    app = create_app(engine=FoodSearchEngine(source=db_file), settings=settings)
    app.config["TESTING"] = True
    return app.test_client()


def test_health_does_not_load(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.get_json()
    assert body["ok"] is True
    assert body["loaded"] is False
    assert body["strategy"] == "containment"


def test_search_endpoint(client):
    res = client.get("/search?q=pasta")
    assert res.status_code == 200
    body = res.get_json()
    assert body["count"] == 1
    assert body["results"][0]["name"] == "Pasta di semola"
    assert body["results"][0]["aliases"] == ["spaghetti"]


def test_search_endpoint_empty_query(client):
    res = client.get("/search?q=%20%20")
    assert res.status_code == 200
    assert res.get_json()["results"] == []


def test_search_endpoint_strategy_and_limit(client):
    res = client.get("/search?q=spagheti&strategy=fuzzy")
    assert [r["name"] for r in res.get_json()["results"]] == ["Pasta di semola"]

    res = client.get("/search?q=verdura&limit=1")
    assert res.get_json()["count"] == 1

    res = client.get("/search?q=pasta&strategy=bogus")
    assert res.status_code == 400


def test_meta_endpoint(client, db_file):
    res = client.get("/meta")
    assert res.status_code == 200
    meta = res.get_json()
    assert meta["source"] == str(db_file)
    assert meta["items"] == 5


def test_reload_picks_up_new_file(client, db_file):
    client.get("/meta")
    db_file.write_text(json.dumps([{"name": "Riso"}]), encoding="utf-8")
    res = client.post("/reload")
    assert res.status_code == 200
    assert res.get_json()["meta"]["items"] == 1
    names = [r["name"] for r in client.get("/search?q=riso").get_json()["results"]]
    assert names == ["Riso"]


def test_missing_dataset_is_503(tmp_path):
    missing = tmp_path / "missing.json"
    app = create_app(engine=FoodSearchEngine(source=missing), settings=Settings(db_path=str(missing)))
    res = app.test_client().get("/search?q=pasta")
    assert res.status_code == 503
    assert res.get_json()["ok"] is False


def test_malformed_dataset_is_500(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("[]", encoding="utf-8")
    app = create_app(engine=FoodSearchEngine(source=bad), settings=Settings(db_path=str(bad)))
    res = app.test_client().get("/meta")
    assert res.status_code == 500


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("BDA_DB_PATH", str(tmp_path / "db.json"))
    monkeypatch.setenv("BDA_SEARCH_STRATEGY", "Fuzzy")
    monkeypatch.setenv("BDA_SEARCH_LIMIT", "5")
    monkeypatch.setenv("PORT", "8080")
    settings = get_settings()
    assert settings.db_path == str(tmp_path / "db.json")
    assert settings.strategy == "fuzzy"
    assert settings.search_limit == 5
    assert settings.port == 8080


def test_settings_reject_unknown_strategy():
    with pytest.raises(ValueError):
        Settings(db_path="x.json", strategy="bm25")
