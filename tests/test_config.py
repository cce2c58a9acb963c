"""Tests for application configuration."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dirindex.config import DEFAULT_EXCLUDES, AppConfig


class TestAppConfig:
    """Test AppConfig dataclass."""

    def test_default_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Falls back to the per-user location when no local data/ exists."""
        monkeypatch.chdir(tmp_path)

        config = AppConfig()

        assert config.db_path == Path.home() / ".local" / "share" / "dirindex" / "dirindex.db"
        assert config.separator == os.sep
        assert config.exclude == DEFAULT_EXCLUDES
        assert config.recover_poisoned_lock is False

    def test_prefers_local_data_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "dirindex.db").touch()

        config = AppConfig()

        assert config.db_path == Path("data/dirindex.db")

    def test_default_excludes(self) -> None:
        assert "OneDrive" in DEFAULT_EXCLUDES
        assert "CloudStore" in DEFAULT_EXCLUDES
        assert "System Volume Information" in DEFAULT_EXCLUDES

    def test_custom_config(self) -> None:
        config = AppConfig(
            db_path=Path("/custom/path.db"),
            separator="\\",
            exclude=("node_modules",),
            recover_poisoned_lock=True,
        )

        assert config.db_path == Path("/custom/path.db")
        assert config.separator == "\\"
        assert config.exclude == ("node_modules",)
        assert config.recover_poisoned_lock is True

    def test_empty_exclusions_dropped(self) -> None:
        config = AppConfig(db_path=Path("/x.db"), exclude=("", "tmp"))

        assert config.exclude == ("tmp",)

    @pytest.mark.parametrize("separator", ["", "//"])
    def test_separator_must_be_single_character(self, separator: str) -> None:
        with pytest.raises(ValueError, match="single character"):
            AppConfig(db_path=Path("/x.db"), separator=separator)

    def test_resolve_db_path_absolute(self) -> None:
        config = AppConfig(db_path=Path("/absolute/path/db.db"))

        assert config.resolve_db_path(Path("/base")) == Path("/absolute/path/db.db")

    def test_resolve_db_path_relative_no_base(self) -> None:
        config = AppConfig(db_path=Path("relative/db.db"))

        assert config.resolve_db_path(base_dir=None) == Path("relative/db.db")

    def test_resolve_db_path_relative_with_base(self) -> None:
        config = AppConfig(db_path=Path("relative/db.db"))

        resolved = config.resolve_db_path(base_dir=Path("/base/directory"))

        assert resolved == Path("/base/directory/relative/db.db")

    def test_resolve_db_path_expands_home(self) -> None:
        config = AppConfig(db_path=Path("~/indexes/db.db"))

        resolved = config.resolve_db_path(base_dir=Path("/base"))

        assert resolved == Path.home() / "indexes" / "db.db"
