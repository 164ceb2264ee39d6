"""Decision policy configuration values."""

from __future__ import annotations

from dataclasses import replace
from typing import Final

from catalog_resolver.domain.resolution.policy import DEFAULT_POLICY, ResolutionPolicy

from .env import optional_env_float, optional_env_var
from .errors import ConfigurationError

THRESHOLD_OVERRIDES: Final[dict[str, str]] = {
    "CATALOG_RESOLVER_FOUND_THRESHOLD": "found_threshold",
    "CATALOG_RESOLVER_AMBIGUITY_GAP": "ambiguity_gap",
    "CATALOG_RESOLVER_CONFIRMATION_THRESHOLD": "confirmation_threshold",
    "CATALOG_RESOLVER_HIGH_THRESHOLD": "high_threshold",
    "CATALOG_RESOLVER_ARBITRATION_GAP": "arbitration_gap",
}


def get_policy_config(*, base: ResolutionPolicy = DEFAULT_POLICY) -> ResolutionPolicy:
    """Return ``base`` with any environment overrides applied."""

    overrides: dict[str, object] = {}
    version = optional_env_var("CATALOG_RESOLVER_POLICY_VERSION")
    if version is not None:
        overrides["version"] = version
    for env_name, field_name in THRESHOLD_OVERRIDES.items():
        value = optional_env_float(env_name)
        if value is not None:
            overrides[field_name] = value

    if not overrides:
        return base
    try:
        return replace(base, **overrides)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
