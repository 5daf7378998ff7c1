"""Shared test fixtures."""

import json
from pathlib import Path
import sys

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from lectern_core.errors import StoreError  # noqa: E402
from lectern_core.store import WriteRecord  # noqa: E402


GENESIS = [
    {
        "abbrev": "GEN",
        "name": "Genesis",
        "chapters": [
            [
                "In the beginning God created the heaven and the earth.",
                "And the earth was without form, and void.",
            ],
            ["Thus the heavens and the earth were finished."],
        ],
    },
    {
        "abbrev": "EXO",
        "book": "Exodus",
        "chapters": [["Now these are the names of the children of Israel."]],
    },
]

GENESIS_PT = [
    {
        "abbrev": "gn",
        "name": "Gênesis",
        "chapters": [["No princípio criou Deus os céus e a terra."]],
    }
]

CATALOG = [
    {"language": "English", "versions": [{"abbreviation": "en_kjv", "name": "King James Version"}]},
    {"language": "Português", "versions": [{"abbreviation": "pt_nvi", "name": "Nova Versão Internacional"}]},
]

STOPWORDS = {"en": ["the", "and", "in", "was", "these", "are", "were"], "pt": ["os", "e", "a", "no"]}


@pytest.fixture
def corpus_dir(tmp_path: Path) -> Path:
    root = tmp_path / "json"
    root.mkdir()
    # BOM-prefixed, as some exported translations are
    (root / "en_kjv.json").write_text("\ufeff" + json.dumps(GENESIS), encoding="utf-8")
    (root / "pt_nvi.json").write_text(json.dumps(GENESIS_PT, ensure_ascii=False), encoding="utf-8")
    (root / "index.json").write_text(json.dumps(CATALOG, ensure_ascii=False), encoding="utf-8")
    (root / "README.txt").write_text("not a corpus file", encoding="utf-8")
    return root


@pytest.fixture
def stopwords_path(tmp_path: Path) -> Path:
    path = tmp_path / "stopwords.json"
    path.write_text(json.dumps(STOPWORDS), encoding="utf-8")
    return path


def make_records(n: int) -> list[WriteRecord]:
    return [WriteRecord(key=f"word{i:04d}", value={"locations": [f"en_kjv/GEN/1/{i}"]}) for i in range(n)]


class FakeStore:
    """In-memory store that records every write and can be told to fail."""

    def __init__(self, failures=None):
        # exceptions (or None for success) consumed one per call
        self.failures = list(failures or [])
        self.calls: list[tuple[str, list[WriteRecord]]] = []
        self.documents: dict[tuple[str, str], dict] = {}

    def write_batch(self, collection, records):
        self.calls.append((collection, list(records)))
        if self.failures:
            error = self.failures.pop(0)
            if error is not None:
                raise error
        for r in records:
            self.documents[(collection, r.key)] = r.value


class AlwaysFailingStore(FakeStore):
    def __init__(self, transient: bool):
        super().__init__()
        self.transient = transient

    def write_batch(self, collection, records):
        self.calls.append((collection, list(records)))
        raise StoreError("deadline exceeded" if self.transient else "permission denied", transient=self.transient)


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep() -> SleepRecorder:
    return SleepRecorder()
