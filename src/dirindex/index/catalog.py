"""Single entry point for every index operation."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from dirindex.config import AppConfig
from dirindex.errors import StorageError
from dirindex.index.crawler import Crawler
from dirindex.index.hierarchy import HierarchyQuery
from dirindex.index.search import Searcher
from dirindex.index.size import SizeAggregator
from dirindex.index.storage import SQLiteFileStore
from dirindex.models import CrawlStats, FileRecord
from dirindex.utils import files


class FileCatalog:
    """Ties the store, the crawler and the query engines together.

    The crawler and the query engines only meet through ``store``.
    """

    def __init__(self, store: SQLiteFileStore, config: AppConfig) -> None:
        self.store = store
        self.config = config
        self.crawler = Crawler(store, exclude=config.exclude)
        self.hierarchy = HierarchyQuery(store, separator=config.separator)
        self.searcher = Searcher(store)
        self.sizes = SizeAggregator(store)

    @classmethod
    def open(cls, config: AppConfig, base_dir: Path | None = None) -> "FileCatalog":
        db_path = config.resolve_db_path(base_dir)
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"cannot create {db_path.parent}: {exc}") from exc
        store = SQLiteFileStore(db_path, recover_poisoned_lock=config.recover_poisoned_lock)
        return cls(store, config)

    def close(self) -> None:
        self.store.close()

    def list_children(self, path: str) -> List[FileRecord]:
        return self.hierarchy.children(path)

    def search(self, name: str, extension: Optional[str] = None) -> List[FileRecord]:
        return self.searcher.search(name, extension)

    def crawl(self, root: str) -> CrawlStats:
        return self.crawler.crawl(root)

    def directory_size(self, path: str) -> int:
        return self.sizes.subtree_size(path)

    def has_records(self) -> bool:
        return self.store.has_records()

    def count(self) -> int:
        return self.store.count()

    def prune(self) -> int:
        return self.store.remove_missing_files()

    @staticmethod
    def get_metadata(path: str) -> FileRecord:
        return files.read_metadata(path)

    @staticmethod
    def list_directory(path: str) -> List[FileRecord]:
        return files.list_directory(path)

    @staticmethod
    def open_path(path: str) -> None:
        files.open_path(path)
