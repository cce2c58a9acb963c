"""Direct-children queries over the flat path table.

No parent links are stored. A record is a direct child of ``P`` when its path
starts with ``P`` followed by the separator and it holds exactly one more
separator than ``P``. The prefix test alone would also return grandchildren,
and the explicit separator keeps siblings such as ``P2`` out.
"""

from __future__ import annotations

import os
from typing import List

from dirindex.index.storage import TABLE, SQLiteFileStore
from dirindex.models import FileRecord

_GLOB_SPECIALS = {"*": "[*]", "?": "[?]", "[": "[[]"}


def escape_glob(text: str) -> str:
    """Escape ``text`` so SQLite ``GLOB`` matches it literally."""
    return "".join(_GLOB_SPECIALS.get(char, char) for char in text)


def normalize_dir(path: str, separator: str) -> str:
    """Strip a single trailing separator."""
    if path.endswith(separator):
        return path[: -len(separator)]
    return path


def separator_depth(path: str, separator: str) -> int:
    return path.count(separator)


def children_pattern(path: str, separator: str) -> tuple[str, int]:
    """Return the ``GLOB`` pattern and the separator count children must have.

    The ``?`` requires a non-empty name after the separator, so a root such as
    ``/`` never lists itself.
    """
    normalized = normalize_dir(path, separator)
    target_depth = separator_depth(normalized, separator) + 1
    return escape_glob(normalized + separator) + "?*", target_depth


class HierarchyQuery:
    """Answers direct-children lookups against the index."""

    def __init__(self, store: SQLiteFileStore, *, separator: str = os.sep) -> None:
        self.store = store
        self.separator = separator

    def children(self, path: str) -> List[FileRecord]:
        pattern, target_depth = children_pattern(path, self.separator)
        with self.store.session() as conn:
            rows = conn.execute(
                f"""
                SELECT name, path, extension, size, modified
                FROM {TABLE}
                WHERE path GLOB ?
                  AND LENGTH(path) - LENGTH(REPLACE(path, ?, '')) = ?
                ORDER BY path
                """,
                (pattern, self.separator, target_depth),
            ).fetchall()
        return [FileRecord.from_row(row) for row in rows]
