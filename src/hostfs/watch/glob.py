#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Shell-style glob compilation for watch path filtering.

Patterns are matched against the whole path string, the way ``fnmatch``
does it: ``*`` and ``**`` both cross path separators, so ``*.txt`` matches
``/tmp/project/notes.txt``. On top of the ``fnmatch`` syntax, ``{a,b}``
alternation and backslash escapes are supported. Unlike ``fnmatch``, a
malformed pattern is an error instead of being matched literally."""

from __future__ import annotations

import os
import re


class GlobSyntaxError(ValueError):
    """Raised when a glob pattern cannot be compiled."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid glob pattern '{pattern}': {reason}")


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a ``[...]`` class starting at ``start``.

    Returns the regex fragment and the index just past the closing bracket."""
    i = start + 1
    negate = False
    if i < len(pattern) and pattern[i] == "!":
        negate = True
        i += 1
    # A leading ']' is a literal member of the class
    j = i
    if j < len(pattern) and pattern[j] == "]":
        j += 1
    while j < len(pattern) and pattern[j] != "]":
        j += 1
    if j >= len(pattern):
        raise GlobSyntaxError(pattern, f"unclosed character class at position {start}")

    members = pattern[i:j].replace("\\", "\\\\")
    if members.startswith("^"):
        members = "\\" + members
    members = members.replace("[", "\\[")
    return ("[^" if negate else "[") + members + "]", j + 1


def translate(pattern: str) -> str:
    """Translate a glob pattern into an anchored regular expression string."""
    parts: list[str] = []
    in_alternation = False
    i = 0
    n = len(pattern)
    while i < n:
        char = pattern[i]
        if char == "\\":
            if i + 1 >= n:
                raise GlobSyntaxError(pattern, "dangling escape at end of pattern")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if char == "*":
            while i < n and pattern[i] == "*":
                i += 1
            parts.append(".*")
            continue
        if char == "?":
            parts.append(".")
        elif char == "[":
            fragment, i = _translate_class(pattern, i)
            parts.append(fragment)
            continue
        elif char == "{":
            if in_alternation:
                raise GlobSyntaxError(pattern, f"nested alternation at position {i}")
            in_alternation = True
            parts.append("(?:")
        elif char == "}":
            if not in_alternation:
                raise GlobSyntaxError(pattern, f"unopened alternation at position {i}")
            in_alternation = False
            parts.append(")")
        elif char == "," and in_alternation:
            parts.append("|")
        else:
            parts.append(re.escape(char))
        i += 1

    if in_alternation:
        raise GlobSyntaxError(pattern, "unclosed alternation")
    return "(?s:" + "".join(parts) + r")\Z"


class GlobMatcher:
    """A glob pattern compiled once and matched against many paths."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        try:
            self._regex = re.compile(translate(pattern))
        except re.error as e:
            # Bad ranges such as "[z-a]" only surface at regex compile time
            raise GlobSyntaxError(pattern, str(e)) from e

    def is_match(self, path: str | os.PathLike[str]) -> bool:
        """Return True if the whole path string matches the pattern."""
        text = path if isinstance(path, str) else os.fspath(path)
        return self._regex.match(text) is not None

    def __repr__(self) -> str:
        return f"GlobMatcher({self.pattern!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlobMatcher):
            return NotImplemented
        return self.pattern == other.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)


# 🔼⚙️🔚
