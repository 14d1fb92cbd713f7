"""
Unit tests for record / dataset validation.
"""
import pytest

from bda_search.utils.data_loader import DatasetFormatError
from bda_search.utils.validators import ensure_dataset, validate_dataset, validate_record


def test_valid_record_has_no_errors():
    record = {
        "id": "bda:1",
        "name": "Pasta",
        "aliases": ["spaghetti"],
        "category": None,
        "per100": {"kcal": 350, "protein": 12, "carbs": None},
    }
    assert validate_record(record) == []


def test_record_errors_are_listed():
    errs = validate_record({"name": " ", "aliases": "pasta", "category": 3, "per100": {"fat": float("inf")}})
    assert "missing or empty 'name'" in errs
    assert "'aliases' must be a list" in errs
    assert "'category' must be a string or null" in errs
    assert any(e.startswith("per100.fat") for e in errs)


def test_bool_is_not_a_nutrient_value():
    assert validate_record({"name": "Pasta", "per100": {"kcal": True}})


def test_oversized_int_is_not_a_nutrient_value():
    errs = validate_record({"name": "Pasta", "per100": {"kcal": 10 ** 400}})
    assert any(e.startswith("per100.kcal") for e in errs)


def test_validate_dataset_reports_indexes():
    problems = validate_dataset([{"name": "Pasta"}, {"name": ""}, "riso"])
    assert [idx for idx, _ in problems] == [1, 2]


def test_ensure_dataset():
    items = [{"name": "Pasta"}]
    assert ensure_dataset(items, "mem") is items
    with pytest.raises(DatasetFormatError, match="expected a JSON array"):
        ensure_dataset({"name": "Pasta"}, "mem")
    with pytest.raises(DatasetFormatError, match="Empty dataset"):
        ensure_dataset([], "mem")
    with pytest.raises(DatasetFormatError, match="#0"):
        ensure_dataset([{"name": None}], "mem")
