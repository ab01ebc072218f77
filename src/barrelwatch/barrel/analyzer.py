"""Export-shape analysis with Tree-sitter.

Only the *shape* of a module's exports matters here: whether it has a default
export and whether it has any named export. Values and types are never
resolved.

Both grammars come from ``tree-sitter-typescript``. Only ``.ts`` sources use the
plain ``typescript`` grammar, where ``<T>value`` casts are legal. JavaScript
(``.js``, ``.jsx``, ``.mjs``, ``.cjs``) and ``.tsx`` parse with the ``tsx``
grammar, which accepts JSX.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any

import structlog
import tree_sitter

from barrelwatch.barrel.models import NO_EXPORTS, ExportShape
from barrelwatch.core.errors import ErrorCode

logger = structlog.get_logger()

_GRAMMAR_MODULE = "tree_sitter_typescript"


class Dialect(StrEnum):
    """Grammar variant; only toggles JSX support."""

    TYPESCRIPT = "typescript"
    TSX = "tsx"

    @property
    def language_func(self) -> str:
        return f"language_{self.value}"


_TYPESCRIPT_SUFFIXES = frozenset({".ts", ".mts", ".cts"})


def dialect_for_path(path: Path) -> Dialect:
    """Pick the grammar variant from a file extension."""
    return Dialect.TYPESCRIPT if path.suffix.lower() in _TYPESCRIPT_SUFFIXES else Dialect.TSX


def classify_export(node: Any) -> ExportShape:
    """Classify one ``export_statement`` node.

    - ``export default ...`` -> default
    - ``export = value`` (CommonJS-equals) -> named
    - ``export as namespace X`` (UMD global) -> nothing
    - declarations, ``export { ... }``, ``export * from`` -> named
    """
    tokens = {child.type for child in node.children if not child.is_named}
    if "default" in tokens:
        return ExportShape(has_default=True)
    if "=" in tokens:
        return ExportShape(has_named=True)
    if "namespace" in tokens and "as" in tokens:
        return NO_EXPORTS
    return ExportShape(has_named=True)


@dataclass
class ExportAnalyzer:
    """Determines the export shape of JavaScript/TypeScript sources.

    Usage::

        analyzer = ExportAnalyzer()
        shape = analyzer.analyze("export default 1;", Dialect.TYPESCRIPT)
        shape = analyzer.analyze_file(Path("src/button.tsx"))

    Never raises: unreadable files, missing grammars and syntax errors are
    logged and reported as a module without exports.
    """

    _parser: Any = field(default=None, repr=False)
    _languages: dict[Dialect, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()
        self._languages = {}

    def _get_language(self, dialect: Dialect) -> Any:
        if dialect in self._languages:
            return self._languages[dialect]
        try:
            mod = importlib.import_module(_GRAMMAR_MODULE)
            lang_fn = getattr(mod, dialect.language_func)
        except (ImportError, AttributeError) as err:
            raise ValueError(f"Language not available: {dialect}") from err
        lang = tree_sitter.Language(lang_fn())
        self._languages[dialect] = lang
        return lang

    def analyze(self, source: str, dialect: Dialect, *, path: str | None = None) -> ExportShape:
        """Return the export shape of ``source``."""
        try:
            self._parser.language = self._get_language(dialect)
        except ValueError as e:
            logger.warning(
                "export_analysis_failed",
                path=path,
                error=str(e),
                error_code=ErrorCode.ANALYSIS_PARSE_FAILED.name,
            )
            return NO_EXPORTS

        tree = self._parser.parse(source.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            logger.warning(
                "export_analysis_syntax_error",
                path=path,
                dialect=dialect.value,
                error_code=ErrorCode.ANALYSIS_PARSE_FAILED.name,
            )
            return NO_EXPORTS

        has_default = False
        has_named = False
        for node in root.children:
            if node.type != "export_statement":
                continue
            shape = classify_export(node)
            has_default = has_default or shape.has_default
            has_named = has_named or shape.has_named
            if has_default and has_named:
                break

        return ExportShape(has_default=has_default, has_named=has_named)

    def analyze_file(self, path: Path) -> ExportShape:
        """Read ``path`` and return its export shape."""
        try:
            source = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(
                "export_analysis_read_failed",
                path=str(path),
                error=str(e),
                error_code=ErrorCode.ANALYSIS_PARSE_FAILED.name,
            )
            return NO_EXPORTS

        shape = self.analyze(source, dialect_for_path(path), path=str(path))
        logger.debug(
            "export_analysis",
            path=str(path),
            has_default=shape.has_default,
            has_named=shape.has_named,
            verbose=True,
        )
        return shape
