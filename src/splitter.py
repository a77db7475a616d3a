"""Guess where a joke's setup ends so it can be shown as a one-line preview."""
from __future__ import annotations

import re
import unicodedata

# Checked in order; the first one present wins regardless of position.
SETUP_SEPARATORS = ("?", ".", "!", ":", ";", "-", ",")

_BUT_RE = re.compile(r"but", re.IGNORECASE)


def _is_punct(ch: str) -> bool:
    return unicodedata.category(ch).startswith("P")


def _trim_tail(text: str) -> str:
    """Drop trailing whitespace, then trailing punctuation."""
    s = text.rstrip()
    end = len(s)
    while end > 0 and _is_punct(s[end - 1]):
        end -= 1
    return s[:end]


def split_setup(text: str) -> str:
    """
    Return the setup portion of ``text``:
    - through the last occurrence of the highest-priority separator found
    - else everything before the last "but" (case-insensitive)
    - else the whole text
    """
    text = text or ""
    trimmed = _trim_tail(text)

    # trimmed is a prefix of text, so its indexes are valid in text
    for sep in SETUP_SEPARATORS:
        idx = trimmed.rfind(sep)
        if idx != -1:
            return text[: idx + 1]

    last = None
    for m in _BUT_RE.finditer(text):
        last = m
    if last is not None:
        return text[: last.start()]

    return text
