"""Text normalization shared by scoring, arbitration and evidence keys."""

from __future__ import annotations

import re
from typing import Final

STOPWORDS: Final[frozenset[str]] = frozenset({"the", "and", "for", "with", "mod", "pack", "set"})
MIN_TOKEN_LENGTH: Final[int] = 3

_QUOTES = re.compile(r"['\"«»‘’“”]")
_PUNCTUATION = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")
_SLUG_SEPARATORS = re.compile(r"[-_.+]+")
_VERSION_MARKERS = re.compile(r"\b(?:v|ver|version)\s*\d+(?:\.\d+)*\b")
_GENERIC_ADJECTIVES = re.compile(r"\b(?:updated|final|new|latest)\b")


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def normalize_title(title: str) -> str:
    """Lowercase, drop quotes and punctuation (hyphens survive), collapse whitespace."""

    lowered = _QUOTES.sub("", title.lower())
    return collapse_whitespace(_PUNCTUATION.sub("", lowered))


def tokenize(text: str) -> frozenset[str]:
    """Distinct title tokens of at least three characters, stopwords removed."""

    return frozenset(
        token
        for token in normalize_title(text).split(" ")
        if len(token) >= MIN_TOKEN_LENGTH and token not in STOPWORDS
    )


def slug_tokens(slug: str) -> frozenset[str]:
    """Tokenize a URL slug, treating hyphens, underscores and dots as word breaks."""

    return tokenize(_SLUG_SEPARATORS.sub(" ", slug))


def jaccard(left: frozenset[str], right: frozenset[str]) -> tuple[float, int, int]:
    """Return ``(similarity, overlap, union)`` for two token sets."""

    union = len(left | right)
    if union == 0:
        return 0.0, 0, 0
    overlap = len(left & right)
    return overlap / union, overlap, union


def strip_noise(text: str | None) -> str:
    """Remove parts of a name that do not discriminate between catalog items.

    Lowercases, removes version markers (``v2``, ``version 2.1``) and generic
    adjectives (updated/final/new/latest), and collapses whitespace.
    """

    if not text:
        return ""
    lowered = collapse_whitespace(text.lower())
    without_versions = _VERSION_MARKERS.sub(" ", lowered)
    return collapse_whitespace(_GENERIC_ADJECTIVES.sub(" ", without_versions))
