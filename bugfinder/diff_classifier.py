# bugfinder/diff_classifier.py
"""Keyword classification of git changesets.

Only added lines are inspected: a line counts when it starts with a single
"+" and is not a "+++ " file header. Matching is a case-sensitive substring
test, first keyword hit wins.
"""
from __future__ import annotations
import io
from typing import Iterable

ADDITION_MARKER = "+"
FILE_HEADER_PREFIX = "+++ "


class ClassifyError(Exception):
    """Raised when the changeset stream cannot be read."""


def is_added_line(line: str) -> bool:
    return line.startswith(ADDITION_MARKER) and not line.startswith(FILE_HEADER_PREFIX)


def analyze_diff(changeset: str | Iterable[str], keywords: list[str]) -> bool:
    """Return True if any added line contains any of the keywords.

    Accepts the changeset as a string or as an iterable of lines (an open
    text stream works). Always False when no keywords are given.
    """
    if not keywords:
        return False

    lines = io.StringIO(changeset) if isinstance(changeset, str) else changeset

    try:
        for line in lines:
            line = line.rstrip("\r\n")
            if not is_added_line(line):
                continue
            if any(keyword in line for keyword in keywords):
                return True
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise ClassifyError(f"could not read changeset: {e}") from e

    return False
