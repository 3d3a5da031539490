"""
files.py

Responsibility: map batch file entries to local paths and repository paths,
and load their contents for the tree builder.

An entry is either `path` (same local and target path) or `local:target`.
The target is the segment between the first and second `:`.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from batchpr.errors import FileReadError, ValidationError

SEPARATOR = ":"
MODE_REGULAR = "100644"
MODE_EXECUTABLE = "100755"


@dataclass(frozen=True)
class FileMapping:
    local: str
    target: str


@dataclass(frozen=True)
class LoadedFile:
    target: str
    content: str
    mode: str = MODE_REGULAR


def parse_file_mapping(entry: str) -> FileMapping:
    """
    Parse a `local[:target]` entry.

    >>> parse_file_mapping("a.txt:sub/b.txt")
    FileMapping(local='a.txt', target='sub/b.txt')
    """
    entry = str(entry).strip()
    if not entry:
        raise ValidationError("file entries cannot be empty")

    parts = entry.split(SEPARATOR)
    if len(parts) == 1:
        return FileMapping(local=entry, target=entry)
    # Anything past a second separator is ignored.
    local, target = parts[0], parts[1]
    if not local or not target:
        raise ValidationError(f"file entry {entry!r} must look like 'local' or 'local:target'")
    return FileMapping(local=local, target=target)


def _file_mode(path: Path) -> str:
    if os.stat(path).st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
        return MODE_EXECUTABLE
    return MODE_REGULAR


def load_file(mapping: FileMapping) -> LoadedFile:
    """
    Read the local side of `mapping`. Relative paths resolve against the
    current working directory.
    """
    path = Path(mapping.local)

    try:
        data = path.read_bytes()
        mode = _file_mode(path)
    except OSError as e:
        raise FileReadError(mapping.local, e.strerror or str(e)) from e

    # Tree entries carry inline text; binary blobs need a separate API call.
    try:
        content = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileReadError(mapping.local, "content is not UTF-8 text") from e

    return LoadedFile(target=mapping.target, content=content, mode=mode)
