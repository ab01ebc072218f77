"""Tests for file eligibility and export-mode policy."""

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from barrelwatch.barrel.eligibility import (
    has_allowed_extension,
    is_eligible,
    is_generated_index,
    is_represented,
    matches_glob,
    matches_patterns,
    needs_side_effect_import,
)
from barrelwatch.barrel.models import ExportShape
from barrelwatch.config.models import ExportMode
from barrelwatch.config.normalize import DirectoryWatchConfig

EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")


class TestMatchesGlob:
    @pytest.mark.parametrize(
        ("rel_path", "pattern", "expected"),
        [
            ("button.ts", "*.ts", True),
            ("button.ts", "**/*.ts", True),
            ("forms/input.ts", "**/*.ts", True),
            ("button.test.ts", "**/*.test.ts", True),
            ("forms/input.test.ts", "**/*.test.ts", True),
            ("button.ts", "**/*.test.ts", False),
            ("internal/secret.ts", "internal/**", True),
            ("public/secret.ts", "internal/**", False),
            ("Button.ts", "button.ts", False),
            ("deep/a.ts", "*.ts", False),
            ("deep/nested/a.ts", "*.ts", False),
            ("forms/input.test.ts", "*.test.ts", False),
            ("forms/input.ts", "forms/*.ts", True),
            ("forms/deep/input.ts", "forms/*.ts", False),
            ("a/b/c/d.ts", "a/**/d.ts", True),
            ("a/d.ts", "a/**/d.ts", True),
            ("b.ts", "[ab].ts", True),
        ],
    )
    def test_matching(self, rel_path: str, pattern: str, expected: bool) -> None:
        assert matches_glob(rel_path, pattern) is expected

    @pytest.mark.parametrize("pattern", ["[a.ts", "**/[!.ts", "src/[]"])
    def test_unclosed_class_is_invalid(self, pattern: str) -> None:
        with capture_logs() as logs:
            matched = matches_glob("a.ts", pattern)

        assert matched is False
        events = [log for log in logs if log["event"] == "invalid_pattern"]
        assert len(events) == 1
        assert events[0]["pattern"] == pattern
        assert events[0]["log_level"] == "warning"
        assert events[0]["error_code"] == "PATTERN_INVALID"

    def test_invalid_exclude_does_not_block_other_patterns(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(
            root=tmp_path,
            exclude_patterns=("[broken", "**/*.test.ts"),
        )

        with capture_logs():
            assert matches_patterns(tmp_path / "a.ts", directory)
            assert not matches_patterns(tmp_path / "a.test.ts", directory)


class TestHasAllowedExtension:
    def test_accepts_listed_extension(self) -> None:
        assert has_allowed_extension(Path("/p/button.tsx"), EXTENSIONS, "index.ts")

    def test_rejects_other_extension(self) -> None:
        assert not has_allowed_extension(Path("/p/styles.css"), EXTENSIONS, "index.ts")

    def test_rejects_index_file(self) -> None:
        assert not has_allowed_extension(Path("/p/index.ts"), EXTENSIONS, "index.ts")

    def test_rejects_nested_index_file(self) -> None:
        assert not has_allowed_extension(Path("/p/forms/index.ts"), EXTENSIONS, "index.ts")

    def test_other_index_extension_is_a_regular_file(self) -> None:
        assert has_allowed_extension(Path("/p/index.tsx"), EXTENSIONS, "index.ts")


class TestMatchesPatterns:
    """Include/exclude gate."""

    def test_default_include_matches_everything(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(root=tmp_path)
        assert matches_patterns(tmp_path / "a.ts", directory)
        assert matches_patterns(tmp_path / "deep" / "er" / "b.ts", directory)

    def test_exclude_takes_precedence_over_include(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(
            root=tmp_path,
            include_patterns=("**/*.ts",),
            exclude_patterns=("**/*.test.ts",),
        )
        path = tmp_path / "button.test.ts"

        assert matches_glob("button.test.ts", "**/*.ts")
        assert not matches_patterns(path, directory)

    def test_unmatched_include(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(root=tmp_path, include_patterns=("components/**",))
        assert matches_patterns(tmp_path / "components" / "card.tsx", directory)
        assert not matches_patterns(tmp_path / "utils" / "math.ts", directory)

    def test_path_outside_root(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(root=tmp_path / "src")
        assert not matches_patterns(tmp_path / "srcx" / "a.ts", directory)
        assert not matches_patterns(tmp_path / "a.ts", directory)


class TestIsEligible:
    def test_both_gates_must_pass(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(root=tmp_path, exclude_patterns=("legacy/**",))

        assert is_eligible(tmp_path / "a.ts", directory, EXTENSIONS)
        assert not is_eligible(tmp_path / "a.md", directory, EXTENSIONS)
        assert not is_eligible(tmp_path / "legacy" / "a.ts", directory, EXTENSIONS)
        assert not is_eligible(tmp_path / "index.ts", directory, EXTENSIONS)


class TestIsGeneratedIndex:
    def test_detects_any_roots_index(self, tmp_path: Path) -> None:
        directories = [
            DirectoryWatchConfig(root=tmp_path / "a"),
            DirectoryWatchConfig(root=tmp_path / "b", index_filename="index.js"),
        ]

        assert is_generated_index(tmp_path / "a" / "index.ts", directories)
        assert is_generated_index(tmp_path / "b" / "index.js", directories)
        assert not is_generated_index(tmp_path / "b" / "index.ts", directories)
        assert not is_generated_index(tmp_path / "a" / "nested" / "index.ts", directories)


SHAPES = [
    ExportShape(True, True),
    ExportShape(True, False),
    ExportShape(False, True),
    ExportShape(False, False),
]


class TestModePolicy:
    """Every (shape, mode) pair lands in exactly one group."""

    @pytest.mark.parametrize("mode", list(ExportMode))
    @pytest.mark.parametrize("shape", SHAPES)
    def test_partition_is_complete(self, shape: ExportShape, mode: ExportMode) -> None:
        represented = is_represented(shape, mode)
        side_effect = needs_side_effect_import(shape, mode)

        groups = [
            represented and shape.has_default and shape.has_named,
            represented and shape.has_default and not shape.has_named,
            represented and shape.has_named and not shape.has_default,
            represented and side_effect,
            not represented,
        ]
        assert groups.count(True) == 1

    def test_exports_only_drops_files_without_exports(self) -> None:
        assert not is_represented(ExportShape(), ExportMode.EXPORTS_ONLY)
        assert not needs_side_effect_import(ExportShape(), ExportMode.EXPORTS_ONLY)

    @pytest.mark.parametrize("mode", [ExportMode.EXPORTS_AND_IMPORTS, ExportMode.IMPORT_ALL])
    def test_import_modes_keep_files_without_exports(self, mode: ExportMode) -> None:
        assert is_represented(ExportShape(), mode)
        assert needs_side_effect_import(ExportShape(), mode)

    @pytest.mark.parametrize("mode", list(ExportMode))
    def test_exporting_files_never_become_side_effect_imports(self, mode: ExportMode) -> None:
        assert not needs_side_effect_import(ExportShape(has_named=True), mode)
