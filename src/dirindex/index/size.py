"""Subtree size totals computed from stored sizes."""

from __future__ import annotations

from dirindex.index.hierarchy import escape_glob
from dirindex.index.storage import TABLE, SQLiteFileStore


class SizeAggregator:
    def __init__(self, store: SQLiteFileStore) -> None:
        self.store = store

    def subtree_size(self, path: str) -> int:
        """Sum ``size`` over every record whose path starts with ``path``.

        This is a plain string prefix: ``path`` itself is included, and so is
        any sibling that merely shares the prefix. The total is only as fresh
        as the last crawl.
        """
        with self.store.session() as conn:
            row = conn.execute(
                f"SELECT COALESCE(SUM(size), 0) FROM {TABLE} WHERE path GLOB ?",
                (escape_glob(path) + "*",),
            ).fetchone()
        return int(row[0])
