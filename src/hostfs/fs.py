#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Path probes shared by the filesystem functions.

``exists``, ``is_file`` and ``is_dir`` answer False for a path that does not
exist instead of raising. Other OS errors (permission problems, I/O failures)
propagate."""

from __future__ import annotations

from enum import Enum, auto
import os
from pathlib import Path
import stat


class PathType(Enum):
    FILE = auto()
    DIRECTORY = auto()
    OTHER = auto()


def probe(path: str | os.PathLike[str]) -> PathType | None:
    """Return the type of ``path``, following symlinks, or None if it is absent."""
    try:
        st = os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return None
    if stat.S_ISREG(st.st_mode):
        return PathType.FILE
    if stat.S_ISDIR(st.st_mode):
        return PathType.DIRECTORY
    return PathType.OTHER


def exists(path: str | Path) -> bool:
    return probe(path) is not None


def is_file(path: str | Path) -> bool:
    return probe(path) is PathType.FILE


def is_dir(path: str | Path) -> bool:
    return probe(path) is PathType.DIRECTORY


def to_text(path: str | os.PathLike[str]) -> str:
    """Render a path as text, replacing bytes that are not valid UTF-8 with U+FFFD."""
    return os.fsencode(path).decode("utf-8", errors="replace")


# 🔼⚙️🔚
