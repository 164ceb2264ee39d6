"""Domain error types raised across port boundaries.

Only ``CatalogValidationError`` is fatal to a run. The collaborator errors are
caught by the pipeline and turned into degraded outcomes; ``PageGoneError`` is
classified as a REJECTED outcome.
"""

from __future__ import annotations


class CatalogValidationError(ValueError):
    """Raised when catalog input cannot be turned into a usable index."""


class CollaboratorUnavailableError(RuntimeError):
    """Base class for failures of an external collaborator behind a port."""


class EntityFetchError(CollaboratorUnavailableError):
    """Raised by an ``EntityFetcher`` when live facts cannot be retrieved."""


class SimilarityOracleError(CollaboratorUnavailableError):
    """Raised by a ``SimilarityOracle`` on network, auth, model or timeout failure."""


class PageGoneError(RuntimeError):
    """Raised by an ``IdentitySource`` when the page behind a URL is confirmed dead."""


class CacheCorruptError(ValueError):
    """Raised when a cache document fails to parse or carries an unexpected schema."""
