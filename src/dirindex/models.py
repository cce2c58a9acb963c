"""Core dirindex data models."""

from __future__ import annotations

import sqlite3
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


@dataclass(slots=True)
class FileRecord:
    """Metadata describing one indexed filesystem entry."""

    name: str
    path: str
    extension: Optional[str]
    size: int
    modified: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "FileRecord":
        return cls(
            name=row["name"],
            path=row["path"],
            extension=row["extension"],
            size=row["size"],
            modified=row["modified"],
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class CrawlStats:
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    excluded: int = 0
    failed_paths: list[str] = field(default_factory=list)
