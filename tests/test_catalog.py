"""Tests for the FileCatalog facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from dirindex.config import AppConfig
from dirindex.index.catalog import FileCatalog


@pytest.fixture
def catalog(tmp_path):
    config = AppConfig(db_path=tmp_path / "data" / "index.db", separator="/", exclude=("skipme",))
    catalog = FileCatalog.open(config)
    yield catalog
    catalog.close()


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "tree"
    (root / "sub").mkdir(parents=True)
    (root / "sub" / "x.log").write_bytes(b"x" * 10)
    (root / "sub" / "y.log").write_bytes(b"y" * 20)
    (root / "top.txt").write_text("top")
    (root / "skipme").mkdir()
    (root / "skipme" / "hidden.txt").write_text("hidden")
    return root


class TestFileCatalog:
    """End-to-end checks across crawler and query engines."""

    def test_open_creates_parent_directory(self, tmp_path):
        config = AppConfig(db_path=Path("nested/dir/index.db"))

        catalog = FileCatalog.open(config, tmp_path)

        assert (tmp_path / "nested" / "dir" / "index.db").exists()
        catalog.close()

    def test_uses_config(self, catalog):
        assert catalog.crawler.exclude == ("skipme",)
        assert catalog.hierarchy.separator == "/"

    def test_empty_until_crawled(self, catalog, tree):
        assert catalog.has_records() is False

        catalog.crawl(str(tree))

        assert catalog.has_records() is True

    def test_crawl_then_query(self, catalog, tree):
        stats = catalog.crawl(str(tree))

        assert stats.excluded == 1
        assert [r.name for r in catalog.list_children(str(tree))] == ["sub", "top.txt"]
        assert [r.name for r in catalog.search("log", "log")] == ["x.log", "y.log"]
        assert catalog.search("hidden") == []

    def test_directory_size(self, catalog, tree):
        catalog.crawl(str(tree))
        sub = tree / "sub"

        expected = sub.stat().st_size + 30
        assert catalog.directory_size(str(sub)) == expected
        assert catalog.directory_size(str(tree / "nothing")) == 0

    def test_count(self, catalog, tree):
        catalog.crawl(str(tree))

        assert catalog.count() == 5

    def test_prune_is_opt_in(self, catalog, tree):
        catalog.crawl(str(tree))
        (tree / "top.txt").unlink()
        catalog.crawl(str(tree))
        assert catalog.count() == 5

        assert catalog.prune() == 1
        assert catalog.count() == 4

    def test_live_operations_bypass_index(self, catalog, tree):
        assert catalog.has_records() is False

        assert catalog.get_metadata(str(tree / "top.txt")).size == 3
        assert [r.name for r in catalog.list_directory(str(tree))] == ["skipme", "sub", "top.txt"]
        assert catalog.has_records() is False
