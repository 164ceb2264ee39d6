"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when a configuration value cannot be used as given."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required environment variable is absent or blank."""
