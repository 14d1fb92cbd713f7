# bda_search/app.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS

from .config import Settings, get_settings
from .services.search_service import FoodSearchEngine
from .utils.data_loader import DatasetError, DatasetUnavailableError, NotLoadedError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _engine() -> FoodSearchEngine:
    return current_app.extensions["bda_engine"]


def _settings() -> Settings:
    return current_app.extensions["bda_settings"]


def _ensure_loaded() -> FoodSearchEngine:
    """Load on first use; later calls hit the engine's cache."""
    engine = _engine()
    engine.load(source=_settings().db_path)
    return engine


def _to_int(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw not in (None, "") else default
    except ValueError:
        return default


def _error(message: str, status: int):
    return jsonify({"ok": False, "error": message}), status


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app(
    engine: Optional[FoodSearchEngine] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    settings = settings or get_settings()
    engine = engine or FoodSearchEngine(strategy=settings.strategy, source=settings.db_path)

    app = Flask(__name__)
    # Open CORS for dev (tighten in prod if needed)
    CORS(app)
    app.extensions["bda_engine"] = engine
    app.extensions["bda_settings"] = settings

    @app.errorhandler(DatasetUnavailableError)
    def _unavailable(e: DatasetUnavailableError):
        logger.error("[app] dataset unavailable: %s", e)
        return _error(str(e), 503)

    @app.errorhandler(NotLoadedError)
    def _not_loaded(e: NotLoadedError):
        return _error(str(e), 503)

    @app.errorhandler(DatasetError)
    def _bad_dataset(e: DatasetError):
        logger.error("[app] dataset rejected: %s", e)
        return _error(str(e), 500)

    @app.get("/health")
    def health():
        return jsonify(
            {
                "ok": True,
                "name": "BDA Food Search API",
                "loaded": _engine().is_loaded,
                "strategy": _engine().strategy.name,
                "endpoints": [
                    "GET  /health",
                    "GET  /meta",
                    "GET  /search?q=<text>&limit=<n>&strategy=<containment|fuzzy>",
                    "POST /reload",
                ],
            }
        )

    @app.get("/meta")
    def meta():
        """Audit metadata of the loaded dataset (source, items, bytes, hash, timestamp)."""
        return jsonify(_ensure_loaded().get_meta())

    @app.get("/search")
    def search():
        engine = _ensure_loaded()
        query = request.args.get("q", "")
        limit = _to_int(request.args.get("limit"), _settings().search_limit)
        strategy = request.args.get("strategy") or None
        try:
            results = engine.search(query, limit=limit, strategy=strategy)
        except ValueError as e:
            return _error(str(e), 400)
        payload: Dict[str, Any] = {
            "query": query,
            "count": len(results),
            "results": [r.to_dict() for r in results],
        }
        return jsonify(payload)

    @app.post("/reload")
    def reload():
        """Drop the cached dataset and load it again (after rebuilding the file)."""
        engine = _engine()
        engine.reset()
        engine.load(source=_settings().db_path)
        return jsonify({"ok": True, "message": "Reloaded dataset", "meta": engine.get_meta()}), 200

    return app


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
    cfg = get_settings()
    create_app(settings=cfg).run(host="127.0.0.1", port=cfg.port, debug=True)
