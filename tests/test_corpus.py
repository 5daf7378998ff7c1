import json

import pytest

from lectern_core.corpus import (
    discover_corpus_files,
    load_catalog,
    load_corpus,
    load_corpus_unit,
    parse_catalog,
    parse_corpus_unit,
)
from lectern_core.errors import CorpusParseError


def test_discovery_skips_catalog_and_non_json(corpus_dir):
    names = [p.name for p in discover_corpus_files(corpus_dir)]
    assert names == ["en_kjv.json", "pt_nvi.json"]


def test_bom_prefixed_file_parses(corpus_dir):
    unit = load_corpus_unit(corpus_dir / "en_kjv.json")
    assert unit.document_set_id == "en_kjv"
    assert [b.abbrev for b in unit.books] == ["GEN", "EXO"]
    assert unit.verse_count == 4


def test_book_name_falls_back_to_book_field(corpus_dir):
    unit = load_corpus_unit(corpus_dir / "en_kjv.json")
    assert unit.books[0].name == "Genesis"
    assert unit.books[1].name == "Exodus"


def test_load_corpus_in_filename_order(corpus_dir):
    units = load_corpus(corpus_dir)
    assert [u.document_set_id for u in units] == ["en_kjv", "pt_nvi"]


def test_invalid_json_names_the_document_set():
    with pytest.raises(CorpusParseError) as exc:
        parse_corpus_unit("en_bad", "[{")
    assert exc.value.document_set_id == "en_bad"
    assert exc.value.stage == "build"
    assert "en_bad" in str(exc.value)


def test_wrong_shape_is_rejected():
    with pytest.raises(CorpusParseError, match="list of books"):
        parse_corpus_unit("en_x", json.dumps({"abbrev": "GEN"}))


def test_missing_abbrev_and_bad_chapters_are_reported():
    books = [{"name": "Genesis", "chapters": [["ok"], "not a list", [1, 2]]}]
    with pytest.raises(CorpusParseError) as exc:
        parse_corpus_unit("en_x", json.dumps(books))
    reason = exc.value.reason
    assert "'abbrev'" in reason
    assert "chapter 2" in reason
    assert "chapter 3" in reason


def test_catalog_flattens_languages(corpus_dir):
    entries = load_catalog(corpus_dir)
    assert [(e.abbreviation, e.language) for e in entries] == [
        ("en_kjv", "English"),
        ("pt_nvi", "Português"),
    ]


def test_missing_catalog_is_none(tmp_path):
    assert load_catalog(tmp_path) is None


def test_catalog_version_without_abbreviation_is_rejected():
    content = json.dumps([{"language": "English", "versions": [{"name": "KJV"}]}])
    with pytest.raises(CorpusParseError, match="abbreviation"):
        parse_catalog(content)


def test_undecodable_catalog_is_a_parse_error(tmp_path):
    (tmp_path / "index.json").write_bytes(b"\xff\xfe[]")
    with pytest.raises(CorpusParseError) as exc:
        load_catalog(tmp_path)
    assert exc.value.document_set_id == "index.json"
    assert "cannot read" in str(exc.value)
