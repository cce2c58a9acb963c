"""Recursive directory crawl feeding the index."""

from __future__ import annotations

import logging
import os
import sqlite3
from typing import Iterator, Sequence

from dirindex.config import DEFAULT_EXCLUDES
from dirindex.errors import MetadataError
from dirindex.index.storage import SQLiteFileStore
from dirindex.models import CrawlStats
from dirindex.utils.files import PathLike, read_metadata

LOGGER = logging.getLogger(__name__)


def is_excluded(path: str, exclude: Sequence[str]) -> bool:
    return any(fragment in path for fragment in exclude)


class Crawler:
    """Walks a directory tree and upserts every visited entry.

    Symlinks are neither followed nor recorded, and any entry whose full path
    contains one of the ``exclude`` fragments is skipped together with its
    subtree. The whole crawl is written in one transaction.
    """

    def __init__(
        self,
        store: SQLiteFileStore,
        *,
        exclude: Sequence[str] = DEFAULT_EXCLUDES,
    ) -> None:
        self.store = store
        self.exclude = tuple(exclude)

    def crawl(self, root: PathLike) -> CrawlStats:
        root_path = os.path.normpath(os.fspath(root))
        stats = CrawlStats()

        LOGGER.info("Crawling %s", root_path)
        with self.store.transaction():
            for path in self.walk(root_path, stats):
                try:
                    record = read_metadata(path)
                except MetadataError as exc:
                    LOGGER.debug("Skipping %s: %s", path, exc)
                    stats.skipped += 1
                    continue

                try:
                    self.store.insert_record(record)
                except (sqlite3.Error, UnicodeError) as exc:
                    LOGGER.error("DB insert error for %s: %s", record.path, exc)
                    stats.failed += 1
                    stats.failed_paths.append(record.path)
                    continue
                stats.indexed += 1

        LOGGER.info(
            "Crawled %s: indexed %d, skipped %d, failed %d, excluded %d",
            root_path,
            stats.indexed,
            stats.skipped,
            stats.failed,
            stats.excluded,
        )
        return stats

    def walk(self, root: str, stats: CrawlStats) -> Iterator[str]:
        """Yield ``root`` and every entry below it that passes the skip rules."""
        if os.path.islink(root) or is_excluded(root, self.exclude):
            stats.excluded += 1
            return
        yield root

        pending = [root]
        while pending:
            current = pending.pop()
            try:
                with os.scandir(current) as entries:
                    children = sorted(entries, key=lambda entry: entry.name)
            except NotADirectoryError:
                continue
            except OSError as exc:
                LOGGER.debug("Cannot read directory %s: %s", current, exc)
                continue

            subdirs = []
            for entry in children:
                try:
                    is_link = entry.is_symlink()
                except OSError as exc:
                    LOGGER.debug("Skipping %s: %s", entry.path, exc)
                    stats.skipped += 1
                    continue
                if is_link or is_excluded(entry.path, self.exclude):
                    stats.excluded += 1
                    continue
                yield entry.path
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(entry.path)
                except OSError:
                    continue
            pending.extend(reversed(subdirs))
