"""
config.py

Settings for the search API, read from environment variables (a local
.env file is loaded first when present).

Usage:
    from bda_search.config import get_settings
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .services.ranking_service import STRATEGIES
from .utils.data_loader import default_source

load_dotenv()


@dataclass(frozen=True)
class Settings:
    db_path: str
    strategy: str = "containment"
    search_limit: int = 50
    port: int = 5001

    def __post_init__(self) -> None:
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"BDA_SEARCH_STRATEGY={self.strategy!r} is not one of {sorted(STRATEGIES)}"
            )


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings(
        db_path=os.environ.get("BDA_DB_PATH") or str(default_source()),
        strategy=(os.environ.get("BDA_SEARCH_STRATEGY") or "containment").strip().lower(),
        search_limit=int(os.environ.get("BDA_SEARCH_LIMIT", "50")),
        port=int(os.environ.get("PORT", "5001")),
    )
