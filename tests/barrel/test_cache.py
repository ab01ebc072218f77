"""Tests for the per-directory export cache."""

from pathlib import Path

from barrelwatch.barrel.cache import ExportCache
from barrelwatch.barrel.models import ExportShape, FileRecord


def _record(root: Path, name: str, shape: ExportShape | None = None) -> FileRecord:
    return FileRecord.build(
        root, root / name, shape or ExportShape(has_named=True), side_effect_import=False
    )


class TestExportCache:
    def test_upsert_and_get(self, tmp_path: Path) -> None:
        cache = ExportCache()
        record = _record(tmp_path, "a.ts")

        cache.upsert(tmp_path, record)

        assert cache.get(tmp_path, tmp_path / "a.ts") == record
        assert cache.count(tmp_path) == 1
        assert tmp_path in cache
        assert len(cache) == 1

    def test_upsert_replaces_existing(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "a.ts"))
        updated = _record(tmp_path, "a.ts", ExportShape(has_default=True))

        cache.upsert(tmp_path, updated)

        assert cache.records(tmp_path) == [updated]

    def test_buckets_are_independent(self, tmp_path: Path) -> None:
        cache = ExportCache()
        outer, inner = tmp_path, tmp_path / "inner"
        cache.upsert(outer, _record(outer, "inner/a.ts"))
        cache.upsert(inner, _record(inner, "a.ts"))

        cache.remove(inner, inner / "a.ts")

        assert cache.count(inner) == 0
        assert cache.count(outer) == 1
        assert sorted(cache.roots()) == sorted([outer, inner])

    def test_remove_missing_returns_none(self, tmp_path: Path) -> None:
        cache = ExportCache()
        assert cache.remove(tmp_path, tmp_path / "nope.ts") is None
        assert cache.get(tmp_path, tmp_path / "nope.ts") is None
        assert cache.records(tmp_path) == []

    def test_remove_under_directory(self, tmp_path: Path) -> None:
        cache = ExportCache()
        for name in ("forms/a.ts", "forms/deep/b.ts", "formsx.ts", "c.ts"):
            cache.upsert(tmp_path, _record(tmp_path, name))

        removed = cache.remove_under(tmp_path, tmp_path / "forms")

        assert {r.relative_path for r in removed} == {"forms/a.ts", "forms/deep/b.ts"}
        assert {r.relative_path for r in cache.records(tmp_path)} == {"formsx.ts", "c.ts"}

    def test_replace_swaps_bucket(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "old.ts"))

        cache.replace(tmp_path, [_record(tmp_path, "new.ts")])

        assert [r.relative_path for r in cache.records(tmp_path)] == ["new.ts"]

    def test_clear(self, tmp_path: Path) -> None:
        cache = ExportCache()
        cache.upsert(tmp_path, _record(tmp_path, "a.ts"))
        cache.clear()
        assert len(cache) == 0
        assert tmp_path not in cache
