"""Port for the external identity producer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from catalog_resolver.domain.model import Identity


@runtime_checkable
class IdentitySource(Protocol):
    """Produce an ``Identity`` for a URL.

    Soft failures return ``Identity.empty()``. A confirmed dead page raises
    ``PageGoneError`` so the pipeline can classify the query as REJECTED.
    """

    def __call__(self, url: str) -> Identity: ...
