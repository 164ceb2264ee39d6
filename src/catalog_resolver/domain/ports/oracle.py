"""Port for the similarity oracle used during arbitration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class SimilarityOracle(Protocol):
    """Score how well each candidate text describes the query text.

    Implementations return one confidence in ``[0, 1]`` per candidate, in input
    order, and raise ``SimilarityOracleError`` on network, auth, model or timeout
    failures. Embedding cosine similarity and zero-shot classification both fit.
    """

    def score(self, query_text: str, candidate_texts: Sequence[str]) -> Sequence[float]: ...
