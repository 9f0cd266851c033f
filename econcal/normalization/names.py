"""Event name normalization used for index keys and matching."""

import re

_GLYPHS = re.compile(r"[™®©]")
_JOINING_HYPHEN = re.compile(r"(?<=\w)-+(?=\w)")
_SEPARATOR_HYPHEN = re.compile(r"\s*-+\s*")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(raw: str | None) -> str:
    """Return the canonical form of an event name.

    "Non-Farm Payrolls" and "Nonfarm  Payrolls" both become "nonfarm payrolls";
    "GDP - Final" becomes "gdp final". Idempotent.
    """
    if not raw:
        return ""
    text = _GLYPHS.sub("", str(raw)).lower()
    text = _JOINING_HYPHEN.sub("", text)
    text = _SEPARATOR_HYPHEN.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def tokenize(raw: str | None) -> frozenset[str]:
    """Whitespace tokens of the normalized name."""
    normalized = normalize_name(raw)
    return frozenset(normalized.split()) if normalized else frozenset()
