"""
Artist name normalization.

The Spotify library sync and the concert ingestion both key artists through
normalize_artist_name, so "The Black Lips" from either side resolves to "black lips".
The display name is always kept separately; the normalized form is only a matching key.
"""
from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_LEADING_THE = re.compile(r"^the\s+", re.IGNORECASE)
_AMPERSAND = re.compile(r"\s+&\s+")
_CURLY_APOSTROPHES = re.compile(r"[‘’]")


def normalize_artist_name(name: str) -> str:
    value = (name or "").lower().strip()
    value = _WHITESPACE.sub(" ", value)
    value = _LEADING_THE.sub("", value)
    # "a & & b": each match eats the space the next one needs
    count = 1
    while count:
        value, count = _AMPERSAND.subn(" and ", value)
    value = _CURLY_APOSTROPHES.sub("'", value)
    return value.strip()


__all__ = ["normalize_artist_name"]
