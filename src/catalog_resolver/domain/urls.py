"""URL parsing and key derivation.

Two families of keys live here:
- lookup keys used by the deterministic matcher to tolerate historical
  representations of catalog URLs (raw, scheme-stripped, compacted)
- the canonical URL key used by the URL cache partition

Malformed input never raises from these helpers; it yields ``None`` or an
empty key tuple so callers can treat it as a non-match.
"""

from __future__ import annotations

import re
from typing import Final
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit

TRACKING_PARAMS: Final[frozenset[str]] = frozenset(
    {
        "fbclid",
        "gclid",
        "dclid",
        "msclkid",
        "mc_cid",
        "mc_eid",
        "igshid",
        "ref",
        "ref_src",
        "si",
    }
)
TRACKING_PREFIXES: Final[tuple[str, ...]] = ("utm_",)
DEFAULT_PORTS: Final[frozenset[int]] = frozenset({80, 443})
HTTP_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

_SCHEME_PREFIX = re.compile(r"^https?://", re.IGNORECASE)
_HAS_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def parse_http_url(raw: str | None) -> SplitResult | None:
    """Split ``raw`` into URL parts if it names an http(s) host.

    Scheme-less input (``example.com/x``) is read as https.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text or any(char.isspace() for char in text):
        return None
    if not _HAS_SCHEME.match(text):
        text = f"https://{text}"
    try:
        parts = urlsplit(text)
        _ = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in HTTP_SCHEMES or not parts.hostname:
        return None
    return parts


def strip_www(host: str) -> str:
    host = host.lower()
    return host[4:] if host.startswith("www.") else host


def host_of(raw: str | None) -> str | None:
    parts = parse_http_url(raw)
    if parts is None or parts.hostname is None:
        return None
    return strip_www(parts.hostname)


def _is_tracking_param(name: str) -> bool:
    lowered = name.lower()
    return lowered in TRACKING_PARAMS or lowered.startswith(TRACKING_PREFIXES)


def _path_segments(parts: SplitResult) -> list[str]:
    path = parts.path
    # Hash routes ("#/slug") address content the same way a path does.
    if parts.fragment.startswith("/"):
        path = f"{path.rstrip('/')}/{parts.fragment.lstrip('/')}"
    return [segment for segment in path.split("/") if segment]


def canonical_url_key(raw: str | None) -> str | None:
    """Return the URL-cache key for ``raw``, or ``None`` when it is not a usable URL.

    The key folds scheme and case, drops ``www.``, default ports, repeated and
    trailing slashes, tracking parameters and non-route fragments, and sorts the
    remaining query parameters.
    """

    parts = parse_http_url(raw)
    if parts is None or parts.hostname is None:
        return None

    host = strip_www(parts.hostname)
    port = parts.port
    netloc = host if port is None or port in DEFAULT_PORTS else f"{host}:{port}"

    path = "/".join(_path_segments(parts)).lower()

    params = sorted(
        (name.lower(), value.lower())
        for name, value in parse_qsl(parts.query, keep_blank_values=True)
        if not _is_tracking_param(name)
    )
    query = urlencode(params)

    key = f"https://{netloc}"
    if path:
        key = f"{key}/{path}"
    if query:
        key = f"{key}?{query}"
    return key


def url_lookup_keys(raw: str | None) -> tuple[str, ...]:
    """Keys under which a URL may have been recorded in the catalog.

    Order: trimmed raw form, scheme-stripped form, compact legacy form (dots and
    slashes removed), canonical URL key.
    """

    if raw is None or not raw.strip():
        return ()
    trimmed = raw.strip()
    without_scheme = _SCHEME_PREFIX.sub("", trimmed)
    compact = without_scheme.replace(".", "").replace("/", "")
    keys = [trimmed, without_scheme, compact]
    canonical = canonical_url_key(trimmed)
    if canonical is not None:
        keys.append(canonical)
    return tuple(dict.fromkeys(key for key in keys if key))


def final_slug(raw: str | None) -> tuple[str, str] | None:
    """Return ``(slug, host)`` for the last non-empty path segment of ``raw``.

    The slug is lowercased with every non-alphanumeric character removed.
    """

    parts = parse_http_url(raw)
    if parts is None or parts.hostname is None:
        return None
    segments = _path_segments(parts)
    if not segments:
        return None
    slug = _NON_ALPHANUMERIC.sub("", segments[-1].lower())
    if not slug:
        return None
    return slug, strip_www(parts.hostname)


def raw_final_segment(raw: str | None) -> str:
    """Last path segment as written (hyphens kept), used for slug token scoring."""

    parts = parse_http_url(raw)
    if parts is None:
        return ""
    segments = _path_segments(parts)
    return segments[-1].lower() if segments else ""
