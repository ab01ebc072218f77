"""Tests for rendering and writing index files."""

import random
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.generator import IndexGenerator, render, write_atomic
from barrelwatch.barrel.models import ExportShape, FileRecord
from barrelwatch.config.constants import HEADER
from barrelwatch.config.normalize import DirectoryWatchConfig


def _record(
    root: Path,
    name: str,
    *,
    default: bool = False,
    named: bool = False,
    side_effect: bool = False,
) -> FileRecord:
    return FileRecord.build(
        root, root / name, ExportShape(default, named), side_effect_import=side_effect
    )


class TestRender:
    def test_groups_in_fixed_order(self, tmp_path: Path) -> None:
        records = [
            _record(tmp_path, "polyfill.ts", side_effect=True),
            _record(tmp_path, "hooks.ts", named=True),
            _record(tmp_path, "card.tsx", default=True),
            _record(tmp_path, "button.tsx", default=True, named=True),
        ]

        assert render(records) == (
            HEADER + "// Default and named exports\n"
            "export { default as button } from './button';\n"
            "export * from './button';\n"
            "\n"
            "// Default exports only\n"
            "export { default as card } from './card';\n"
            "\n"
            "// Named exports only\n"
            "export * from './hooks';\n"
            "\n"
            "// Side-effect imports\n"
            "import './polyfill';\n"
        )

    def test_empty_groups_are_omitted(self, tmp_path: Path) -> None:
        content = render([_record(tmp_path, "b.ts", named=True)])
        assert content == HEADER + "// Named exports only\nexport * from './b';\n"

    def test_nested_modules_use_relative_paths(self, tmp_path: Path) -> None:
        content = render([_record(tmp_path, "forms/text-input.tsx", default=True)])
        assert content is not None
        assert "export { default as formsTextInput } from './forms/text-input';" in content

    def test_nothing_to_export(self, tmp_path: Path) -> None:
        assert render([]) is None
        assert render([_record(tmp_path, "quiet.ts")]) is None

    def test_sorting_is_independent_of_discovery_order(self, tmp_path: Path) -> None:
        names = ["zeta.ts", "Alpha.ts", "beta.ts", "a/b.ts", "a-b.ts", "alpha.ts"]
        records = [_record(tmp_path, name, named=True) for name in names]
        expected = render(records)

        for seed in range(5):
            shuffled = records[:]
            random.Random(seed).shuffle(shuffled)
            assert render(shuffled) == expected

        assert expected is not None
        modules = [line.split("'")[1] for line in expected.splitlines() if line.startswith("export")]
        assert modules == sorted(modules)
        assert modules[0] == "./Alpha"


class TestWriteAtomic:
    def test_writes_and_leaves_no_temp_files(self, tmp_path: Path) -> None:
        target = tmp_path / "index.ts"
        write_atomic(target, "export * from './a';\n")

        assert target.read_text() == "export * from './a';\n"
        assert [p.name for p in tmp_path.iterdir()] == ["index.ts"]

    def test_missing_directory_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            write_atomic(tmp_path / "missing" / "index.ts", "x")


class TestIndexGenerator:
    def test_generate_writes_index(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "a.ts", default=True))
        directory = DirectoryWatchConfig(root=tmp_path)

        assert IndexGenerator(cache).generate(directory)

        text = directory.index_path.read_text(encoding="utf-8")
        assert text.startswith(HEADER)
        assert text.endswith("export { default as a } from './a';\n")

    def test_generation_is_idempotent(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "a.ts", default=True))
        cache.upsert(tmp_path, _record(tmp_path, "b.ts", named=True))
        directory = DirectoryWatchConfig(root=tmp_path)
        generator = IndexGenerator(cache)

        generator.generate(directory)
        first = directory.index_path.read_bytes()
        written_again = generator.generate(directory)

        assert not written_again
        assert directory.index_path.read_bytes() == first

    def test_custom_index_extension(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "a.js", named=True))
        directory = DirectoryWatchConfig(root=tmp_path, index_filename="index.js")

        IndexGenerator(cache).generate(directory)

        assert (tmp_path / "index.js").exists()
        assert not (tmp_path / "index.ts").exists()

    def test_empty_bucket_skips_write(self, tmp_path: Path) -> None:
        directory = DirectoryWatchConfig(root=tmp_path)

        with capture_logs() as logs:
            written = IndexGenerator(ExportCache()).generate(directory)

        assert not written
        assert not directory.index_path.exists()
        assert any(log["event"] == "index_skipped_empty" for log in logs)

    def test_write_failure_is_logged_not_raised(self, tmp_path: Path) -> None:
        root = tmp_path / "gone"
        cache = ExportCache()
        cache.upsert(root, _record(root, "a.ts", named=True))

        with capture_logs() as logs:
            written = IndexGenerator(cache).generate(DirectoryWatchConfig(root=root))

        assert not written
        failures = [log for log in logs if log["event"] == "index_write_failed"]
        assert failures
        assert failures[0]["error"] == "GENERATION_WRITE_FAILED"
        assert failures[0]["retryable"] is True
