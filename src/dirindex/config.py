"""Application configuration defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_EXCLUDES: tuple[str, ...] = ("CloudStore", "OneDrive", "System Volume Information")


def _get_default_db_path() -> Path:
    """Get the default database path based on the execution context."""
    # When running from source, prefer local data/ if it exists
    local_db = Path("data/dirindex.db")
    if local_db.exists():
        return local_db

    return Path.home() / ".local" / "share" / "dirindex" / "dirindex.db"


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    separator: str = os.sep
    exclude: tuple[str, ...] = DEFAULT_EXCLUDES
    recover_poisoned_lock: bool = False

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if len(self.separator) != 1:
            raise ValueError(f"Separator must be a single character, got {self.separator!r}")
        self.exclude = tuple(item for item in self.exclude if item)

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        """Expand ``~`` and anchor a relative db path at ``base_dir``."""
        db_path = Path(self.db_path or _get_default_db_path()).expanduser()
        if base_dir is not None and not db_path.is_absolute():
            db_path = base_dir / db_path
        return db_path
