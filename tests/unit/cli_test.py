"""Tests for the command-line entry points."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from inlay_markup.analysis import InMemoryHintSource
from inlay_markup.cli.app import app, pick_directories
from inlay_markup.cli.show import show_app
from inlay_markup.core.pipeline import HintAnnotator
from inlay_markup.models import Category

runner = CliRunner()


@pytest.fixture(autouse=True)
def _syntax_engine(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INLAY_MARKUP_ENGINE", "syntax")
    monkeypatch.setenv("INLAY_MARKUP_CLOSING_BRACE_HINTS", "1")
    monkeypatch.delenv("INLAY_MARKUP_EXTENSION", raising=False)


@pytest.mark.parametrize("target", [app, show_app], ids=["mirror", "print"])
def test_short_help_flag(target: object) -> None:
    result = runner.invoke(target, ["-h"])  # type: ignore[arg-type]
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_mirrors_tree_with_hints(rust_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "annotated"
    result = runner.invoke(app, [str(rust_tree), str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").read_text(encoding="utf-8") == "fn main() {\n    run();\n} /* fn main */\n"
    assert (output / "src" / "nested" / "lib.rs").read_text(encoding="utf-8") == (
        "mod inner {\n    fn f() {}\n} /* mod inner */\n"
    )
    assert not (output / "README.md").exists()
    assert "Annotated 2 file(s)" in result.output


def test_closing_brace_hints_off_by_default(
    rust_tree: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("INLAY_MARKUP_CLOSING_BRACE_HINTS")
    output = tmp_path / "annotated"
    result = runner.invoke(app, [str(rust_tree), str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").read_bytes() == (rust_tree / "src" / "main.rs").read_bytes()


def test_per_file_failures_keep_exit_code_zero(rust_tree: Path, tmp_path: Path) -> None:
    (rust_tree / "src" / "broken.rs").write_bytes(b"\xff\xfe")
    result = runner.invoke(app, [str(rust_tree), str(tmp_path / "annotated")])

    assert result.exit_code == 0, result.output
    assert "Skipped" in result.output
    assert "not-utf8" in result.output
    assert not (tmp_path / "annotated" / "src" / "broken.rs").exists()


def test_missing_input_directory_falls_back_to_cwd(
    rust_tree: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(rust_tree)
    output = tmp_path / "annotated"
    result = runner.invoke(app, [str(tmp_path / "does-not-exist"), str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").exists()


def test_default_output_directory(rust_tree: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(rust_tree)
    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert (rust_tree / "inlay-hints" / "src" / "main.rs").exists()
    assert not (rust_tree / "inlay-hints" / "inlay-hints").exists()


def test_uses_configured_hint_source(rust_tree: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = InMemoryHintSource({Category.TYPE: [(0, 2, "()")]})
    monkeypatch.setattr("inlay_markup.cli.app.create_annotator", lambda _settings: HintAnnotator(source))
    output = tmp_path / "annotated"

    result = runner.invoke(app, [str(rust_tree), str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").read_text(encoding="utf-8").startswith("fn: () main()")


def test_print_writes_annotated_sources(rust_tree: Path) -> None:
    result = runner.invoke(show_app, [str(rust_tree)])

    assert result.exit_code == 0, result.output
    assert str(rust_tree / "src" / "main.rs") in result.output
    assert "} /* fn main */" in result.output
    assert "} /* mod inner */" in result.output
    assert "readme" not in result.output


@pytest.mark.parametrize(
    "extra",
    [["surplus"], ["--verbose"], ["-x", "--level=3", "more"]],
    ids=["positional", "long-flag", "mixed"],
)
def test_surplus_arguments_are_ignored(
    rust_tree: Path, tmp_path: Path, extra: list[str], caplog: pytest.LogCaptureFixture
) -> None:
    output = tmp_path / "annotated"
    result = runner.invoke(app, [str(rust_tree), str(output), *extra])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").read_text(encoding="utf-8") == "fn main() {\n    run();\n} /* fn main */\n"
    assert "Ignoring unexpected arguments" in caplog.text


def test_unknown_flag_before_directories_is_ignored(rust_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "annotated"
    result = runner.invoke(app, ["--verbose", str(rust_tree), str(output)])

    assert result.exit_code == 0, result.output
    assert (output / "src" / "main.rs").exists()


def test_print_ignores_surplus_arguments(rust_tree: Path) -> None:
    result = runner.invoke(show_app, ["--color", str(rust_tree), "extra"])

    assert result.exit_code == 0, result.output
    assert "} /* fn main */" in result.output


class TestPickDirectories:
    def test_defaults_fill_missing_positions(self) -> None:
        assert pick_directories(None, (".", "inlay-hints")) == [".", "inlay-hints"]
        assert pick_directories(["src"], (".", "inlay-hints")) == ["src", "inlay-hints"]

    def test_options_and_surplus_are_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        picked = pick_directories(["-v", "in", "out", "more"], (".", "inlay-hints"))

        assert picked == ["in", "out"]
        assert "-v more" in caplog.text
