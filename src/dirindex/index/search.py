"""Name and extension search over the index."""

from __future__ import annotations

from typing import List, Optional

from dirindex.index.storage import TABLE, SQLiteFileStore
from dirindex.models import FileRecord

LIKE_ESCAPE = "\\"


def escape_like(text: str) -> str:
    """Escape ``LIKE`` wildcards so ``text`` matches literally."""
    for char in (LIKE_ESCAPE, "%", "_"):
        text = text.replace(char, LIKE_ESCAPE + char)
    return text


class Searcher:
    """Substring search on names with an optional exact extension filter.

    Name matching follows SQLite's default ``LIKE`` behaviour: ASCII letters
    compare case-insensitively. The extension filter is an exact, case-sensitive
    comparison, and an empty extension means no filter at all.
    """

    def __init__(self, store: SQLiteFileStore) -> None:
        self.store = store

    def search(self, name: str, extension: Optional[str] = None) -> List[FileRecord]:
        query = (
            f"SELECT name, path, extension, size, modified FROM {TABLE} "
            f"WHERE name LIKE ? ESCAPE '{LIKE_ESCAPE}'"
        )
        params: list[str] = [f"%{escape_like(name)}%"]
        if extension:
            query += " AND extension = ?"
            params.append(extension)
        query += " ORDER BY path"

        with self.store.session() as conn:
            rows = conn.execute(query, params).fetchall()
        return [FileRecord.from_row(row) for row in rows]
