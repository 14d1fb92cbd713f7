"""
Unit tests for text normalization, tokenization and Italian collation.
"""
import pytest

from bda_search.utils.lexicon import IT_STOPWORDS, LEXICON_VERSION
from bda_search.utils.normalizer import (
    italian_sort_key,
    normalize_text,
    strip_diacritics,
    tokenize,
    unique_tokens,
)

# Lowercase and uppercase Italian accented letters with their folded form.
ITALIAN_ACCENTED = {
    "à": "a", "è": "e", "é": "e", "ì": "i", "í": "i", "î": "i",
    "ò": "o", "ó": "o", "ù": "u", "ú": "u",
    "À": "a", "È": "e", "É": "e", "Ì": "i", "Í": "i", "Î": "i",
    "Ò": "o", "Ó": "o", "Ù": "u", "Ú": "u",
}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("PERÒ", "pero"),
        ("  Caffè,  infuso ", "caffe infuso"),
        ("Pasta all'uovo", "pasta all uovo"),
        ("Latte (UHT) 3.5%", "latte uht 3 5"),
        ("tab\tand\nnewline", "tab and newline"),
        ("", ""),
        ("!!!", ""),
    ],
)
def test_normalize_text(raw, expected):
    assert normalize_text(raw) == expected


def test_normalize_none_is_empty():
    assert normalize_text(None) == ""


@pytest.mark.parametrize("text", ["PERÒ", "Pàsta  di SEMOLA, cruda", "  ", "Uovo-intero!", "ÀÈÉÌÒÙ"])
def test_normalize_is_idempotent(text):
    once = normalize_text(text)
    assert normalize_text(once) == once


def test_normalize_case_and_diacritic_insensitive():
    assert normalize_text("PERÒ") == normalize_text("pero")
    assert normalize_text("Città") == normalize_text("CITTA")


@pytest.mark.parametrize("accented, base", sorted(ITALIAN_ACCENTED.items()))
def test_italian_accented_letters_fold_to_base(accented, base):
    assert normalize_text(accented) == base


def test_strip_diacritics_keeps_case():
    assert strip_diacritics("È così") == "E cosi"


def test_tokenize_keeps_order_and_duplicates():
    assert tokenize("Pollo, pollo e patate") == ["pollo", "pollo", "e", "patate"]


def test_tokenize_removes_stopwords():
    assert tokenize("Pasta di semola con sugo", remove_stopwords=True) == ["pasta", "semola", "sugo"]


def test_tokenize_empty_inputs():
    assert tokenize("") == []
    assert tokenize("   ") == []
    assert tokenize(None) == []


def test_stopword_table_is_closed_and_versioned():
    assert LEXICON_VERSION
    for word in ("a", "ad", "al", "allo", "ai", "agli", "dal", "dai", "di", "del", "dei",
                 "degli", "in", "nel", "con", "su", "per", "tra", "fra", "e", "ed", "o", "od"):
        assert word in IT_STOPWORDS
    assert "pasta" not in IT_STOPWORDS
    assert all(w == normalize_text(w) for w in IT_STOPWORDS)


def test_unique_tokens_union_first_seen_order():
    assert unique_tokens(["Petto di pollo", "pollo petto", "Pollo arrosto"]) == (
        "petto", "di", "pollo", "arrosto",
    )


def test_italian_sort_key_orders_like_locale():
    names = ["Zucchine", "àncora", "Banana", "Acciughe"]
    assert sorted(names, key=italian_sort_key) == ["Acciughe", "àncora", "Banana", "Zucchine"]


def test_italian_sort_key_tie_breaks():
    # unaccented before accented, lowercase before uppercase
    assert italian_sort_key("pesca") < italian_sort_key("pèsca")
    assert italian_sort_key("pasta") < italian_sort_key("Pasta")
