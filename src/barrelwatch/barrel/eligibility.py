"""File eligibility and export-mode policy.

Three independent predicates decide whether a path reaches the cache:
- Extension/identity gate: allowed extension, and never the index file itself
- Pattern gate: exclude globs reject first, then an include glob must match
- Generated-artifact detection: the path is a watched root's own index file

Pattern syntax:
- Patterns match path segments; ``*``, ``?`` and ``[...]`` never cross ``/``
- A ``**`` segment matches zero or more directories
- An unclosed ``[`` makes the whole pattern invalid
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from pathlib import Path

import structlog

from barrelwatch.barrel.models import ExportShape
from barrelwatch.config.models import ExportMode
from barrelwatch.config.normalize import DirectoryWatchConfig
from barrelwatch.core.errors import ErrorCode

logger = structlog.get_logger()

_SIDE_EFFECT_MODES = frozenset({ExportMode.EXPORTS_AND_IMPORTS, ExportMode.IMPORT_ALL})


def _check_segment(segment: str) -> None:
    """Raise ValueError if a character class in ``segment`` is never closed."""
    i, n = 0, len(segment)
    while i < n:
        if segment[i] != "[":
            i += 1
            continue
        j = i + 1
        if j < n and segment[j] == "!":
            j += 1
        # A leading ] is a literal member of the class
        if j < n and segment[j] == "]":
            j += 1
        while j < n and segment[j] != "]":
            j += 1
        if j >= n:
            raise ValueError(f"unclosed '[' at offset {i} in {segment!r}")
        i = j + 1


def _match_segments(parts: list[str], segments: list[str]) -> bool:
    if not segments:
        return not parts
    head, rest = segments[0], segments[1:]
    if head == "**":
        return any(_match_segments(parts[i:], rest) for i in range(len(parts) + 1))
    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_segments(parts[1:], rest)


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a path matches a glob pattern, with ** support.

    Patterns are matched segment by segment, so ``*.ts`` only matches at the
    top level of the root while ``**/*.ts`` matches at any depth.
    Invalid patterns are logged and treated as non-matching.
    """
    segments = pattern.split("/")
    try:
        for segment in segments:
            _check_segment(segment)
    except ValueError as e:
        logger.warning(
            "invalid_pattern",
            pattern=pattern,
            error=str(e),
            error_code=ErrorCode.PATTERN_INVALID.name,
        )
        return False
    return _match_segments(rel_path.split("/"), segments)


def has_allowed_extension(path: Path, extensions: Iterable[str], index_filename: str) -> bool:
    """Extension/identity gate."""
    if path.name == index_filename:
        logger.debug("skip_index_file", path=str(path), verbose=True)
        return False
    if not any(path.name.endswith(ext) for ext in extensions):
        logger.debug("skip_extension", path=str(path), verbose=True)
        return False
    return True


def matches_patterns(path: Path, directory: DirectoryWatchConfig) -> bool:
    """Pattern gate. Exclusion takes precedence over inclusion."""
    if not directory.contains(path):
        return False
    rel_path = path.relative_to(directory.root).as_posix()

    for pattern in directory.exclude_patterns:
        if matches_glob(rel_path, pattern):
            logger.debug("skip_excluded", path=rel_path, pattern=pattern, verbose=True)
            return False

    if any(matches_glob(rel_path, pattern) for pattern in directory.include_patterns):
        return True

    logger.debug("skip_not_matched", path=rel_path, verbose=True)
    return False


def is_eligible(path: Path, directory: DirectoryWatchConfig, extensions: Iterable[str]) -> bool:
    """Both gates combined."""
    return has_allowed_extension(path, extensions, directory.index_filename) and matches_patterns(
        path, directory
    )


def is_generated_index(path: Path, directories: Iterable[DirectoryWatchConfig]) -> bool:
    """Whether ``path`` is the index file some watched root generates."""
    return any(path == directory.index_path for directory in directories)


def is_represented(shape: ExportShape, mode: ExportMode) -> bool:
    """Whether a file with ``shape`` appears in the index at all under ``mode``."""
    return shape.has_any or mode != ExportMode.EXPORTS_ONLY


def needs_side_effect_import(shape: ExportShape, mode: ExportMode) -> bool:
    """Whether a file is emitted as a bare ``import './module';``."""
    return not shape.has_any and mode in _SIDE_EFFECT_MODES
