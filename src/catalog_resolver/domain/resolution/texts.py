"""Oracle input texts for identities and candidates."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from catalog_resolver.domain.text import collapse_whitespace

if TYPE_CHECKING:
    from catalog_resolver.domain.model import CatalogEntry, Identity

SEPARATOR = " • "

_BRACKETED = re.compile(r"\[[^\]]*\]")
_VERSIONS = re.compile(r"\bv?\d+(?:\.\d+)+\b|\bv\d+\b", re.IGNORECASE)


def clean_label(text: str | None) -> str:
    """Drop bracketed tags like ``[Update]`` and version markers from a name."""

    if not text:
        return ""
    without_tags = _BRACKETED.sub(" ", text)
    return collapse_whitespace(_VERSIONS.sub(" ", without_tags))


def identity_text(identity: Identity) -> str:
    title = clean_label(identity.primary_name)
    slug = collapse_whitespace(identity.slug or "")
    parts = [title] if title else []
    if slug and slug.lower() != title.lower():
        parts.append(slug)
    if identity.domain:
        parts.append(f"from {identity.domain.strip()}")
    creator = clean_label(identity.creator)
    if creator:
        parts.append(f"by {creator}")
    return SEPARATOR.join(parts)


def candidate_text(entry: CatalogEntry) -> str:
    parts: list[str] = []
    title = clean_label(entry.display_name)
    if title:
        parts.append(title)
    creator = clean_label(entry.creator)
    if creator:
        parts.append(f"by {creator}")
    if entry.url:
        parts.append(entry.url.strip())
    return SEPARATOR.join(parts)
