"""Value types shared by the index-maintenance pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

_IDENT_SPLIT = re.compile(r"[^A-Za-z0-9_$]+")


class FileAction(StrEnum):
    """Watcher event kinds."""

    ADD = "add"
    CHANGE = "change"
    UNLINK = "unlink"


@dataclass(frozen=True, slots=True)
class ExportShape:
    """Which kinds of export a module has."""

    has_default: bool = False
    has_named: bool = False

    @property
    def has_any(self) -> bool:
        return self.has_default or self.has_named


NO_EXPORTS = ExportShape()


def to_export_name(module_name: str) -> str:
    """Derive a JavaScript identifier from a module name.

    ``button`` stays ``button``; ``forms/text-input`` becomes ``formsTextInput``.
    """
    parts = [p for p in _IDENT_SPLIT.split(module_name) if p]
    if not parts:
        return "_"
    name = parts[0] + "".join(p[:1].upper() + p[1:] for p in parts[1:])
    if name[0].isdigit():
        name = f"_{name}"
    return name


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Last known export shape of one eligible file in a watched root."""

    absolute_path: Path
    relative_path: str
    module_name: str
    has_default: bool
    has_named: bool
    side_effect_import: bool

    @classmethod
    def build(
        cls,
        root: Path,
        path: Path,
        shape: ExportShape,
        *,
        side_effect_import: bool,
    ) -> FileRecord:
        relative_path = path.relative_to(root).as_posix()
        module_name = relative_path.rsplit(".", 1)[0] if "." in path.name else relative_path
        return cls(
            absolute_path=path,
            relative_path=relative_path,
            module_name=module_name,
            has_default=shape.has_default,
            has_named=shape.has_named,
            side_effect_import=side_effect_import,
        )

    @property
    def shape(self) -> ExportShape:
        return ExportShape(self.has_default, self.has_named)

    @property
    def export_name(self) -> str:
        """Alias used when re-exporting this module's default export."""
        return to_export_name(self.module_name)

    def same_export_state(self, other: FileRecord) -> bool:
        """Whether both records would render identically."""
        return (
            self.has_default == other.has_default
            and self.has_named == other.has_named
            and self.side_effect_import == other.side_effect_import
        )
