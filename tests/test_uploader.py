from datetime import datetime, timezone

from lectern_core.corpus import load_catalog, load_corpus
from lectern_core.uploader import book_record, upload_catalog, upload_translations

from conftest import FakeStore

FIXED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_catalog_upload(corpus_dir, sleep):
    store = FakeStore()
    upload_catalog(load_catalog(corpus_dir), store, "versions", sleep=sleep)

    assert store.documents[("versions", "en_kjv")] == {"language": "English", "name": "King James Version"}
    assert store.documents[("versions", "pt_nvi")]["language"] == "Português"


def test_book_chapters_are_keyed_from_one(corpus_dir):
    unit = load_corpus(corpus_dir)[0]
    record = book_record(unit.books[0])

    assert record.key == "GEN"
    assert record.value["name"] == "Genesis"
    assert list(record.value["chapters"]) == ["1", "2"]
    assert record.value["chapters"]["2"] == ["Thus the heavens and the earth were finished."]


def test_translations_write_books_before_header(corpus_dir, sleep):
    store = FakeStore()
    summaries = upload_translations(
        load_corpus(corpus_dir), store, "translations", now=lambda: FIXED, batch_size=1, sleep=sleep
    )

    collections = [c for c, _ in store.calls]
    assert collections == [
        "translations/en_kjv/books",
        "translations/en_kjv/books",
        "translations",
        "translations/pt_nvi/books",
        "translations",
    ]
    assert store.documents[("translations", "en_kjv")] == {
        "name": "en_kjv",
        "lastUpdated": FIXED.isoformat(),
    }
    assert store.documents[("translations/en_kjv/books", "EXO")]["name"] == "Exodus"
    assert len(summaries) == 4
