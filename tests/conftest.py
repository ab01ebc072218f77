"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import logging
import sys
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local barrelwatch package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of barrelwatch modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("barrelwatch"):
        del sys.modules[module_name]

import structlog  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls so later tests see every event."""
    yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """Resolved project root (tmp dirs can sit behind symlinks)."""
    return tmp_path.resolve()


@pytest.fixture
def write_source() -> Callable[[Path, str], Path]:
    """Write a source file, creating parent directories."""

    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
