"""Tests for Searcher."""

from __future__ import annotations

import pytest

from dirindex.index.search import Searcher, escape_like
from dirindex.index.storage import SQLiteFileStore
from dirindex.models import FileRecord
from dirindex.utils.files import extension_of


@pytest.fixture
def store(tmp_path):
    store = SQLiteFileStore(tmp_path / "index.db")
    names = ["a.txt", "ab.txt", "a.md", "README", "100%_done.csv", "Alpha.TXT"]
    with store.transaction():
        for name in names:
            store.insert_record(
                FileRecord(
                    name=name,
                    path=f"/files/{name}",
                    extension=extension_of(name),
                    size=1,
                    modified=0,
                )
            )
    yield store
    store.close()


def _names(records) -> list[str]:
    return sorted(record.name for record in records)


class TestEscapeLike:
    """Test LIKE escaping."""

    def test_wildcards_escaped(self):
        assert escape_like("100%_done") == "100\\%\\_done"

    def test_escape_character_escaped(self):
        assert escape_like("a\\b") == "a\\\\b"

    def test_plain_text_untouched(self):
        assert escape_like("report") == "report"


class TestSearcher:
    """Test name and extension search."""

    def test_fragment_without_extension(self, store):
        results = Searcher(store).search("a.", None)

        assert _names(results) == ["Alpha.TXT", "a.md", "a.txt"]

    def test_fragment_and_extension_filter(self, store):
        searcher = Searcher(store)

        assert _names(searcher.search("a")) == [
            "Alpha.TXT",
            "README",
            "a.md",
            "a.txt",
            "ab.txt",
        ]
        assert _names(searcher.search("a", "txt")) == ["a.txt", "ab.txt"]

    def test_empty_extension_means_no_filter(self, store):
        searcher = Searcher(store)

        assert searcher.search("a", "") == searcher.search("a", None)

    def test_extension_is_exact(self, store):
        assert _names(Searcher(store).search("", "TXT")) == ["Alpha.TXT"]
        assert Searcher(store).search("", "tx") == []

    def test_name_match_is_case_insensitive(self, store):
        assert _names(Searcher(store).search("readme")) == ["README"]

    def test_wildcards_are_literal(self, store):
        assert _names(Searcher(store).search("%_")) == ["100%_done.csv"]
        assert Searcher(store).search("_x") == []

    def test_empty_fragment_matches_everything(self, store):
        assert len(Searcher(store).search("")) == 6

    def test_results_ordered_by_path(self, store):
        paths = [record.path for record in Searcher(store).search("")]

        assert paths == sorted(paths)

    def test_no_matches(self, store):
        assert Searcher(store).search("zzz") == []
