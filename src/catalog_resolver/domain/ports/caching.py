"""Port for the URL and Evidence decision partitions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalog_resolver.domain.model import DecisionOutcome


@runtime_checkable
class DecisionCache(Protocol):
    def get_url_decision(self, url: str) -> DecisionOutcome | None: ...

    def put_url_decision(self, url: str, outcome: DecisionOutcome) -> str | None: ...

    def get_decision(self, key: str) -> DecisionOutcome | None: ...

    def put_decision(self, key: str, outcome: DecisionOutcome) -> None: ...
