# bda_search/utils/data_loader.py
from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

# --------------------------------------------------------------------------- #
# Paths & filenames
# --------------------------------------------------------------------------- #

THIS_DIR: Path = Path(__file__).resolve().parent
DATA_DIR: Path = (THIS_DIR / ".." / "data").resolve()

FILE_DB = "elenco_cibo_bda.json"

PER100_FIELDS: Tuple[str, ...] = ("kcal", "protein", "carbs", "fat", "fiber")


def default_source() -> Path:
    return DATA_DIR / FILE_DB


# --------------------------------------------------------------------------- #
# Errors
# --------------------------------------------------------------------------- #

class DatasetError(Exception):
    """Base class for dataset problems."""


class DatasetUnavailableError(DatasetError, FileNotFoundError):
    """The dataset source cannot be read at all."""


class DatasetFormatError(DatasetError, ValueError):
    """The source was read but is not a non-empty list of valid records."""


class NotLoadedError(DatasetError, RuntimeError):
    """An operation needs a loaded dataset and none is loaded."""


# --------------------------------------------------------------------------- #
# Records
# --------------------------------------------------------------------------- #

def is_valid_nutrient(value: Any) -> bool:
    """None (not measured) or a finite, non-negative real number."""
    if value is None:
        return True
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value) and value >= 0
    except OverflowError:
        # int too large to convert to float
        return False


@dataclass(frozen=True)
class Per100:
    """Macro-nutrients per 100 g. None means "not measured", never zero."""
    kcal: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "Per100":
        raw = raw if isinstance(raw, dict) else {}
        values = {}
        for name in PER100_FIELDS:
            value = raw.get(name)
            if not is_valid_nutrient(value):
                raise DatasetFormatError(f"per100.{name} must be a finite number >= 0 or null, got {value!r}")
            values[name] = None if value is None else float(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {name: getattr(self, name) for name in PER100_FIELDS}


@dataclass(frozen=True)
class FoodRecord:
    name: str
    id: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    category: Optional[str] = None
    per100: Per100 = field(default_factory=Per100)
    source: str = ""
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "FoodRecord":
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise DatasetFormatError(f"record name must be a non-empty string, got {name!r}")

        aliases: List[str] = []
        for alias in raw.get("aliases") or []:
            if isinstance(alias, str) and alias and alias not in aliases:
                aliases.append(alias)

        rid = raw.get("id")
        category = raw.get("category")
        known = {"id", "name", "aliases", "category", "per100", "source"}
        return cls(
            name=name,
            id=None if rid is None else str(rid),
            aliases=tuple(aliases),
            category=category if isinstance(category, str) and category else None,
            per100=Per100.from_dict(raw.get("per100")),
            source=str(raw.get("source") or ""),
            extras={k: v for k, v in raw.items() if k not in known},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "aliases": list(self.aliases),
            "category": self.category,
            "per100": self.per100.to_dict(),
            "source": self.source,
        }
        out.update(self.extras)
        return out

    def texts(self) -> Tuple[str, ...]:
        """Name followed by aliases: everything a query may match."""
        return (self.name,) + self.aliases


# --------------------------------------------------------------------------- #
# Low-level I/O
# --------------------------------------------------------------------------- #

def read_source(source: Union[str, Path]) -> str:
    path = Path(source)
    if not path.exists():
        raise DatasetUnavailableError(
            f"Missing dataset file: {path}\n"
            "Run the catalog builder or point BDA_DB_PATH at an existing export."
        )
    try:
        with path.open("r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DatasetUnavailableError(f"Cannot read dataset file {path}: {e}") from e


def parse_json(text: str, source: str = "<raw>") -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DatasetFormatError(f"Invalid JSON in {source}: {e}") from e


def content_digest(text: str) -> Tuple[int, str]:
    """(UTF-8 byte length, sha256 hex digest) of the raw dataset text."""
    data = text.encode("utf-8")
    return len(data), hashlib.sha256(data).hexdigest()


def save_json(path: Union[str, Path], payload: Any) -> None:
    """
    Writes pretty JSON with UTF-8 and a trailing newline.
    Used by the catalog builder to store the consolidated dataset.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
        f.write("\n")
