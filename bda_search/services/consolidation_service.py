# bda_search/services/consolidation_service.py
"""
Offline consolidation of scraped BDA catalog entries.

Independent scraping passes produce several entries for the same food
("Pasta di semola, cruda", "Pasta"...). Entries are grouped by a
canonical merge-name plus their nutrient signature and collapsed into one
record; the shortest name wins and the other names become aliases.

Fetching the catalog over the network is not done here: build_catalog()
takes the per-food fetch function as an argument.
"""
from __future__ import annotations

import json
import logging
import math
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..utils.data_loader import PER100_FIELDS
from ..utils.lexicon import MERGE_DESCRIPTORS, MERGE_PREPOSITIONS, STEAMED_MARKER, STEAMED_PATTERN
from ..utils.normalizer import normalize_text

logger = logging.getLogger(__name__)

SOURCE_LABEL = "BDA (bda.ieo.it)"
PROGRESS_EVERY = 100

_TAG_RE = re.compile(r"<[^>]+>")
_SPACES_RE = re.compile(r"\s+")
_STEAMED_RE = re.compile(STEAMED_PATTERN)
_PREPOSITIONS_RE = re.compile(r"\b(?:" + "|".join(sorted(MERGE_PREPOSITIONS)) + r")\b")
_DESCRIPTORS_RE = re.compile(r"\b(?:" + "|".join(sorted(MERGE_DESCRIPTORS)) + r")\b")

# label prefix (lowercase) -> per100 field; kcal also needs unit "kcal"
_MACRO_LABELS: Tuple[Tuple[str, str], ...] = (
    ("proteine totali", "protein"),
    ("carboidrati disponibili", "carbs"),
    ("lipidi totali", "fat"),
    ("fibra alimentare totale", "fiber"),
)
_KCAL_LABEL = "energia, ric con fibra"


# ------------------------- Text & numbers ---------------------------------- #

def clean_text(value: Any) -> str:
    """Drop HTML tags, collapse whitespace, trim."""
    text = "" if value is None else str(value)
    return _SPACES_RE.sub(" ", _TAG_RE.sub(" ", text)).strip()


def parse_number(value: Any) -> Optional[float]:
    """
    Catalog cell -> number. Comma decimals are accepted, "tr" (trace) is 0,
    blanks and garbage are None.
    """
    if value is None:
        return None
    text = str(value).strip().replace(",", ".", 1)
    if not text:
        return None
    if text.lower() == "tr":
        return 0.0
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def canonical_merge_name(name: Any) -> str:
    """
    Name used to detect duplicates: normalized, "cotto/cotta al vapore"
    collapsed to one marker, prepositions/articles and state adjectives
    (crudo, fresco, biologico...) removed.
    """
    text = normalize_text(name)
    text = _STEAMED_RE.sub(f" {STEAMED_MARKER} ", text)
    text = _PREPOSITIONS_RE.sub(" ", text)
    text = _DESCRIPTORS_RE.sub(" ", text)
    return _SPACES_RE.sub(" ", text).strip()


def per100_signature(per100: Optional[Dict[str, Any]]) -> str:
    """
    Order-independent serialization of a nutrient profile. Missing and null
    fields serialize the same; 10 and 10.0 serialize the same.
    """
    raw = per100 if isinstance(per100, dict) else {}
    values: Dict[str, Any] = {}
    for key in set(PER100_FIELDS) | set(raw):
        value = raw.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = float(value)
        values[key] = value
    return json.dumps(values, sort_keys=True)


def _has_measured_value(per100: Optional[Dict[str, Any]]) -> bool:
    raw = per100 if isinstance(per100, dict) else {}
    return any(raw.get(key) is not None for key in PER100_FIELDS)


def _is_head_of(shorter: Sequence[str], longer: Sequence[str]) -> bool:
    return 0 < len(shorter) <= len(longer) and list(longer[: len(shorter)]) == list(shorter)


# ------------------------- Deduplication ----------------------------------- #

def _add_alias(aliases: List[str], alias: str, primary_name: str) -> None:
    if not alias or alias == primary_name or alias in aliases:
        return
    if alias == canonical_merge_name(primary_name):
        return
    aliases.append(alias)


def _merge_into(kept: Dict[str, Any], entry: Dict[str, Any]) -> Dict[str, Any]:
    """Fold `entry` into the group's running record, returning the new one."""
    entry_aliases = list(entry.get("aliases") or [])
    if len(entry["name"]) < len(kept["name"]):
        # shorter name is the more generic one: it becomes the primary
        primary = {**entry, "aliases": []}
        for alias in entry_aliases + [kept["name"]] + list(kept.get("aliases") or []):
            _add_alias(primary["aliases"], alias, primary["name"])
        return primary

    for alias in [entry["name"]] + entry_aliases:
        _add_alias(kept["aliases"], alias, kept["name"])
    return kept


def _group_root(canon: str, canons: Iterable[str]) -> str:
    """Shortest canonical name among `canons` that is the leading part of `canon`."""
    tokens = canon.split()
    heads = [other for other in canons if _is_head_of(other.split(), tokens)]
    if not heads:
        return canon
    return min(heads, key=lambda c: (len(c.split()), c))


def dedupe_entries(entries: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Collapse duplicate catalog entries.

    Entries group by (canonical_merge_name(name), per100_signature(per100)).
    When the profile has at least one measured value, groups with the same
    profile are then attached to the group whose canonical name is the
    shortest leading part of theirs ("pasta semola grano duro" and
    "pasta integrale" both go under "pasta"). Group membership depends only
    on the set of entries, never on their order.

    Inside a group, input order decides: a strictly shorter name takes
    over as primary and the previous names move to its aliases; otherwise
    the name is appended to the aliases. Output keeps each group's first
    appearance order. Input dicts are not modified.
    """
    keyed: List[Tuple[str, str, Dict[str, Any]]] = []
    canons_by_signature: Dict[str, set] = {}
    for entry in entries:
        canon = canonical_merge_name(entry["name"])
        sig = per100_signature(entry.get("per100"))
        keyed.append((canon, sig, entry))
        canons_by_signature.setdefault(sig, set()).add(canon)

    groups: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for canon, sig, entry in keyed:
        if _has_measured_value(entry.get("per100")):
            canon = _group_root(canon, canons_by_signature[sig])
        key = (canon, sig)

        if key not in groups:
            groups[key] = {**entry, "aliases": []}
            for alias in entry.get("aliases") or []:
                _add_alias(groups[key]["aliases"], alias, entry["name"])
            continue

        groups[key] = _merge_into(groups[key], entry)

    return list(groups.values())


# ------------------------- Catalog build ----------------------------------- #

def extract_macros(food_components: Optional[Iterable[Dict[str, Any]]]) -> Dict[str, Optional[float]]:
    """
    Pick kcal/protein/carbs/fat/fiber out of the catalog's component groups:
      [{"components": [{"dscomp": label, "cnum": unit, "valore": value}, ...]}, ...]
    First matching component wins; fields never seen stay None.
    """
    out: Dict[str, Optional[float]] = {name: None for name in PER100_FIELDS}

    for group in food_components or []:
        for component in group.get("components") or []:
            label = clean_text(component.get("dscomp")).lower()
            unit = clean_text(component.get("cnum")).lower()
            value = parse_number(component.get("valore"))

            if label == _KCAL_LABEL and unit == "kcal":
                if out["kcal"] is None:
                    out["kcal"] = value
                continue
            for prefix, field_name in _MACRO_LABELS:
                if label.startswith(prefix):
                    if out[field_name] is None:
                        out[field_name] = value
                    break

    return out


def build_entry(
    code: Any,
    food_info: Optional[Dict[str, Any]],
    food_components: Optional[Iterable[Dict[str, Any]]],
    fallback_name: str = "",
) -> Dict[str, Any]:
    """One raw catalog record from the catalog's FoodInfo/FoodComponents payloads."""
    info = food_info or {}
    return {
        "id": f"bda:{code}",
        "name": clean_text(info.get("description") or fallback_name),
        "aliases": [],
        "category": clean_text(info.get("catMercDescription")) or None,
        "per100": extract_macros(food_components),
        "source": SOURCE_LABEL,
    }


def build_catalog(
    foods: Sequence[Dict[str, Any]],
    fetch_food: Callable[[Dict[str, Any]], Dict[str, Any]],
    max_workers: int = 1,
) -> List[Dict[str, Any]]:
    """
    Fetch every listed food via `fetch_food` and consolidate the result.

    With max_workers > 1 fetches overlap in a bounded thread pool; the
    consolidated output still follows the order of `foods`.
    """
    total = len(foods)
    entries: List[Dict[str, Any]] = []

    if max_workers <= 1:
        fetched: Iterable[Dict[str, Any]] = (fetch_food(food) for food in foods)
        for i, item in enumerate(fetched, start=1):
            entries.append(item)
            _log_progress(i, total)
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            # map() yields in submission order
            for i, item in enumerate(pool.map(fetch_food, foods), start=1):
                entries.append(item)
                _log_progress(i, total)

    return dedupe_entries(entries)


def _log_progress(done: int, total: int) -> None:
    if done % PROGRESS_EVERY == 0:
        logger.info("[build_bda_db] progress %d/%d", done, total)


def summarize_catalog(records: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Diagnostic counters for a consolidated catalog. Logged, not enforced.
    """
    complete = sum(
        1
        for r in records
        if all((r.get("per100") or {}).get(key) is not None for key in PER100_FIELDS)
    )
    names = [normalize_text(r.get("name")) for r in records]
    summary = {
        "total": len(records),
        "complete": complete,
        "incomplete": len(records) - complete,
        "has_pasta": any("pasta" in n for n in names),
        "has_whole_egg": any("uovo" in n and "albume" not in n for n in names),
    }

    logger.info("[build_bda_db] total foods: %d", summary["total"])
    logger.info("[build_bda_db] complete macros: %d", summary["complete"])
    logger.info("[build_bda_db] incomplete macros: %d", summary["incomplete"])
    logger.info("[build_bda_db] pasta present: %s", summary["has_pasta"])
    logger.info("[build_bda_db] whole-egg equivalent present: %s", summary["has_whole_egg"])
    if not summary["has_pasta"]:
        logger.warning('[build_bda_db] no "pasta" entry found in the catalog.')
    return summary
