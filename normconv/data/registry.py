"""Explicit registry of norm table files.

Band tables are declared, not discovered: the process loads exactly the files
listed in ``NORMCONV_NORM_TABLE_FILES`` (or passed to :func:`build_store`), in
that order. Each file holds one band definition object or a list of them, as
JSON (``.json``) or YAML (``.yaml``/``.yml``). Files listed later win when two
definitions share an id; band precedence itself always follows ``minMonths``.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple

import yaml

from normconv.core.config import get_settings
from normconv.core.errors import NormTableError
from normconv.core.logging import get_logger
from normconv.engine.norms.store import NormativeTableStore

__all__ = ["read_table_file", "load_definitions", "build_store", "get_norm_store"]

logger = get_logger("normconv.data.registry", component="norm_registry")

_YAML_SUFFIXES = {".yaml", ".yml"}


def read_table_file(path: str | Path) -> List[Any]:
    """Parse one table file into a list of raw band definitions."""
    file_path = Path(path)
    try:
        with file_path.open("r", encoding="utf-8") as fh:
            if file_path.suffix.lower() in _YAML_SUFFIXES:
                payload = yaml.safe_load(fh)
            else:
                payload = json.load(fh)
    except OSError as exc:
        raise NormTableError(
            f"Cannot read norm table file {file_path}", detail={"path": str(file_path), "error": str(exc)}
        ) from exc
    except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise NormTableError(
            f"Malformed norm table file {file_path}", detail={"path": str(file_path), "error": str(exc)}
        ) from exc

    if isinstance(payload, Mapping):
        return [payload]
    if isinstance(payload, list):
        return payload
    raise NormTableError(
        f"Norm table file {file_path} must contain an object or a list of objects",
        detail={"path": str(file_path), "type": type(payload).__name__},
    )


def load_definitions(paths: Iterable[str | Path]) -> Tuple[List[Any], List[str]]:
    """Read every listed file; returns definitions and the source of each."""
    definitions: List[Any] = []
    sources: List[str] = []
    for path in paths:
        entries = read_table_file(path)
        definitions.extend(entries)
        sources.extend([str(path)] * len(entries))
        logger.debug(
            "norm_table_file_read",
            extra={"structured_data": {"path": str(path), "definitions": len(entries)}},
        )
    return definitions, sources


def build_store(paths: Sequence[str | Path]) -> NormativeTableStore:
    definitions, sources = load_definitions(paths)
    return NormativeTableStore.load(definitions, sources=sources)


@lru_cache
def get_norm_store() -> NormativeTableStore:
    """Process-wide store built from the configured table files."""
    files = get_settings().norm_table_files
    if not files:
        logger.warning("norm_table_files_not_configured")
    return build_store(files)
