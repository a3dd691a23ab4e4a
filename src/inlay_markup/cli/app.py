import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from inlay_markup.core.mirror import FileOutcome, mirror
from inlay_markup.core.pipeline import HintAnnotator, build_hint_source, enabled_categories
from inlay_markup.settings import Settings

DEFAULT_INPUT_DIR = "."
DEFAULT_OUTPUT_DIR = "inlay-hints"

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
# Surplus or unknown arguments reach the command instead of ending in a usage error.
LENIENT_CONTEXT_SETTINGS = {**CONTEXT_SETTINGS, "ignore_unknown_options": True, "allow_extra_args": True}

logger = logging.getLogger(__name__)
console = Console()

app = typer.Typer(
    name="inlay-markup",
    help="Write inlay hints into Rust sources and mirror them into an output tree.",
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def pick_directories(arguments: Sequence[str] | None, defaults: Sequence[str]) -> list[str]:
    """Take the leading positional arguments as directories; anything else is logged and ignored."""
    arguments = list(arguments or [])
    positional = [arg for arg in arguments if not arg.startswith("-")]
    ignored = [arg for arg in arguments if arg.startswith("-")] + positional[len(defaults) :]
    if ignored:
        logger.warning("Ignoring unexpected arguments: %s", " ".join(ignored))
    return [*positional[: len(defaults)], *defaults[len(positional) :]]


def resolve_input_dir(input_dir: str) -> Path:
    path = Path(input_dir)
    if path.is_dir():
        return path
    logger.warning("Input directory %s does not exist; using the current directory", input_dir)
    return Path(".")


def create_annotator(settings: Settings) -> HintAnnotator:
    return HintAnnotator(build_hint_source(settings), enabled_categories(settings))


def _report(outcome: FileOutcome) -> None:
    task = outcome.task
    if outcome.ok:
        console.print(f"{escape(str(task.input_path))} -> {escape(str(task.output_path))}", soft_wrap=True)
    else:
        reason = outcome.skip_reason.value if outcome.skip_reason else "unknown"
        console.print(f"[yellow]Skipped[/yellow] {escape(str(task.input_path))} ({reason})", soft_wrap=True)


@app.command(context_settings=LENIENT_CONTEXT_SETTINGS)
def annotate_tree(
    arguments: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="[INPUT_DIR] [OUTPUT_DIR]",
            help=f"Directory to read sources from (default {DEFAULT_INPUT_DIR}) and to write annotated sources to "
            f"(default {DEFAULT_OUTPUT_DIR}).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Annotate every source file under INPUT_DIR and write it under OUTPUT_DIR."""
    settings = Settings.from_env()
    configure_logging(settings)
    input_dir, output_dir = pick_directories(arguments, (DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR))
    input_root = resolve_input_dir(input_dir)
    output_root = Path(output_dir)
    try:
        output_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Cannot create %s: %s", output_root, exc)

    annotator = create_annotator(settings)
    try:
        report = mirror(
            input_root,
            output_root,
            annotator.annotate_text,
            extension=settings.extension,
            on_outcome=_report,
        )
    finally:
        annotator.close()

    console.print(
        f"[green]Annotated[/green] {len(report.written)} file(s)"
        + (f", [yellow]skipped[/yellow] {len(report.skipped)}" if report.skipped else "")
    )


def main() -> None:
    app()
