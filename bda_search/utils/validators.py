from __future__ import annotations

from typing import Any, Dict, List, Tuple

from . import data_loader as dl


def validate_record(record: Any) -> List[str]:
    """
    Validate the shape of a single raw food record.
    Returns a list of human-readable error strings (empty if valid).

    Required:
      - name (non-empty str)
    Optional, checked when present:
      - aliases (list of str)
      - category (str or null)
      - per100 (object; each of kcal/protein/carbs/fat/fiber null or a
        finite number >= 0)
    """
    if not isinstance(record, dict):
        return [f"record must be an object, got {type(record).__name__}"]

    errs: List[str] = []

    name = record.get("name")
    if not isinstance(name, str) or not name.strip():
        errs.append("missing or empty 'name'")

    aliases = record.get("aliases")
    if aliases is not None:
        if not isinstance(aliases, list):
            errs.append("'aliases' must be a list")
        else:
            for i, alias in enumerate(aliases):
                if not isinstance(alias, str):
                    errs.append(f"aliases[{i}] must be a string")

    category = record.get("category")
    if category is not None and not isinstance(category, str):
        errs.append("'category' must be a string or null")

    per100 = record.get("per100")
    if per100 is not None:
        if not isinstance(per100, dict):
            errs.append("'per100' must be an object")
        else:
            for key in dl.PER100_FIELDS:
                if not dl.is_valid_nutrient(per100.get(key)):
                    errs.append(f"per100.{key} must be null or a finite number >= 0: {per100.get(key)!r}")

    return errs


def validate_dataset(items: List[Any]) -> List[Tuple[int, List[str]]]:
    """Returns (index, [errors...]) for every record with problems."""
    problems: List[Tuple[int, List[str]]] = []
    for idx, item in enumerate(items):
        errs = validate_record(item)
        if errs:
            problems.append((idx, errs))
    return problems


def ensure_dataset(parsed: Any, source: str) -> List[Dict[str, Any]]:
    """
    Fatal load-time check: the document must be a non-empty list of valid
    records. Raises DatasetFormatError otherwise.
    """
    if not isinstance(parsed, list):
        raise dl.DatasetFormatError(f"Invalid dataset format: expected a JSON array in {source}.")
    if not parsed:
        raise dl.DatasetFormatError(f"Empty dataset in {source}.")

    problems = validate_dataset(parsed)
    if problems:
        shown = "; ".join(f"#{idx}: {', '.join(errs)}" for idx, errs in problems[:5])
        more = f" (+{len(problems) - 5} more)" if len(problems) > 5 else ""
        raise dl.DatasetFormatError(f"Invalid records in {source}: {shown}{more}")
    return parsed
