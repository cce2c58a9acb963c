"""Utility helpers for reading filesystem metadata."""

from __future__ import annotations

import logging
import os
import stat
import subprocess
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

from dirindex.errors import MetadataError
from dirindex.models import FileRecord

LOGGER = logging.getLogger(__name__)

PathLike = str | os.PathLike[str]


def extension_of(name: str) -> Optional[str]:
    """Return the text after the last dot of ``name``, or ``None``.

    A leading dot alone (``.bashrc``) or a trailing dot (``notes.``) does not
    count as an extension.
    """
    stem, dot, ext = name.rpartition(".")
    if not dot or not stem or not ext:
        return None
    return ext


def _modified_seconds(info: os.stat_result) -> int:
    try:
        seconds = int(info.st_mtime)
    except (OverflowError, ValueError):
        return 0
    return max(seconds, 0)


def _raise_metadata_error(path: str, exc: OSError) -> NoReturn:
    reason = exc.strerror or str(exc)
    raise MetadataError(
        display_path(path), reason, not_found=isinstance(exc, FileNotFoundError)
    ) from exc


def display_path(path: str) -> str:
    """Decode ``path`` lossily so undecodable bytes become U+FFFD."""
    return os.fsencode(path).decode("utf-8", "replace")


def read_metadata(path: PathLike) -> FileRecord:
    """Stat a single path and build its record.

    The record's ``name`` and ``path`` are always valid UTF-8; file names the
    filesystem stores as undecodable bytes get replacement characters.
    """
    path_str = os.fspath(path)
    try:
        info = os.stat(path_str)
    except OSError as exc:
        _raise_metadata_error(path_str, exc)

    record_path = display_path(path_str)
    name = Path(record_path).name
    is_dir = stat.S_ISDIR(info.st_mode)
    return FileRecord(
        name=name,
        path=record_path,
        extension=None if is_dir else extension_of(name),
        size=info.st_size,
        modified=_modified_seconds(info),
    )


def list_directory(path: PathLike) -> List[FileRecord]:
    """List the immediate entries of a directory straight from disk.

    Entries that cannot be stat'ed are logged and left out.
    """
    path_str = os.fspath(path)
    try:
        with os.scandir(path_str) as entries:
            children = sorted(entry.path for entry in entries)
    except OSError as exc:
        _raise_metadata_error(path_str, exc)

    records: List[FileRecord] = []
    for child in children:
        try:
            records.append(read_metadata(child))
        except MetadataError as exc:
            LOGGER.warning("Error reading directory entry: %s", exc)
    return records


def open_path(path: PathLike) -> None:
    """Open ``path`` with the handler the OS associates with it."""
    target = Path(path).expanduser()
    if not target.exists():
        raise MetadataError(str(target), "No such file or directory", not_found=True)

    try:
        if os.name == "posix":
            opener = "open" if sys.platform == "darwin" else "xdg-open"
            subprocess.Popen([opener, str(target)])
        else:
            os.startfile(target)  # type: ignore[attr-defined]
    except OSError as exc:
        LOGGER.error("Unable to open %s: %s", target, exc)
        _raise_metadata_error(str(target), exc)
