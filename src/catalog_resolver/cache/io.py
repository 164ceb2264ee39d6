"""Crash-safe reading and writing of cache documents."""

from __future__ import annotations

import os
import tempfile
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from catalog_resolver.domain.errors import CacheCorruptError

from .documents import VersionedDocument

if TYPE_CHECKING:
    from pydantic import BaseModel

log = getLogger(__name__)


def read_document[D: VersionedDocument](
    path: Path,
    model: type[D],
    *,
    schema_version: str,
) -> D | None:
    """Load ``path`` as ``model``; ``None`` if absent, ``CacheCorruptError`` if unusable."""

    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CacheCorruptError(f"Cannot read cache file {path}: {exc}") from exc
    try:
        document = model.model_validate_json(raw)
    except ValidationError as exc:
        raise CacheCorruptError(
            f"Cache file {path} failed validation ({exc.error_count()} errors)"
        ) from exc
    found = document.schema_version
    if found != schema_version:
        raise CacheCorruptError(
            f"Cache file {path} has schema {found!r}, expected {schema_version!r}"
        )
    return document


def atomic_write_document(path: Path, document: BaseModel) -> None:
    """Write via a temp file in the same directory, then ``os.replace`` it into place."""

    path.parent.mkdir(parents=True, exist_ok=True)
    handle, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as stream:
            stream.write(document.model_dump_json(indent=2))
            stream.flush()
            os.fsync(stream.fileno())
        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    log.debug("Wrote cache document %s", path)
