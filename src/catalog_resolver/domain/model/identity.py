"""Query identity produced outside the resolver."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class Identity:
    """Normalized descriptive signature of the queried item.

    A soft failure of the identity producer yields ``Identity.empty()``; the
    resolver treats a missing ``primary_name`` as "nothing to match on".
    """

    primary_name: str | None = None
    domain: str = ""
    slug: str = ""
    creator: str | None = None
    blocked: bool = False

    @classmethod
    def empty(cls) -> Identity:
        return cls()

    @property
    def has_name(self) -> bool:
        return bool(self.primary_name and self.primary_name.strip())

    @property
    def name(self) -> str:
        return (self.primary_name or "").strip()
