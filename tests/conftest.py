"""Shared fixtures and helpers for tests."""

import stat
import sys
from pathlib import Path

import pytest

from inlay_markup.analysis import InMemoryHintSource, SyntaxHintSource
from inlay_markup.models import ByteRange, Category, Hint

_REPO_ROOT = Path(__file__).parent.parent
_FIXTURES = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-marker: tag tests by directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        rel = Path(str(item.fspath)).relative_to(_REPO_ROOT / "tests")
        if rel.parts and rel.parts[0] == "unit":
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_hint(category: Category, start: int, end: int, label: str) -> Hint:
    return Hint(range=ByteRange(start=start, end=end), label=label, category=category)


def write_fake_server(directory: Path, mode: str = "ok") -> Path:
    """Create an executable that runs the fake language server in ``mode``."""
    wrapper = directory / f"fake-rust-analyzer-{mode}"
    script = _FIXTURES / "fake_language_server.py"
    wrapper.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" {mode}\n', encoding="utf-8")
    wrapper.chmod(wrapper.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return wrapper


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def syntax_source() -> SyntaxHintSource:
    return SyntaxHintSource()


@pytest.fixture
def in_memory_source() -> InMemoryHintSource:
    return InMemoryHintSource()


@pytest.fixture
def rust_tree(tmp_path: Path) -> Path:
    """A small source tree with nested directories and non-Rust files."""
    root = tmp_path / "input"
    (root / "src" / "nested").mkdir(parents=True)
    (root / "src" / "main.rs").write_text("fn main() {\n    run();\n}\n", encoding="utf-8")
    (root / "src" / "nested" / "lib.rs").write_text("mod inner {\n    fn f() {}\n}\n", encoding="utf-8")
    (root / "README.md").write_text("# readme\n", encoding="utf-8")
    (root / "build.rs.bak").write_text("fn main() {}\n", encoding="utf-8")
    return root
