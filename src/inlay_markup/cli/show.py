"""Print annotated sources to standard output instead of writing a mirror tree."""

import logging
from typing import Annotated

import typer

from inlay_markup.cli.app import (
    CONTEXT_SETTINGS,
    DEFAULT_INPUT_DIR,
    LENIENT_CONTEXT_SETTINGS,
    configure_logging,
    create_annotator,
    pick_directories,
    resolve_input_dir,
)
from inlay_markup.core.annotate import AnnotationError
from inlay_markup.core.mirror import iter_source_files
from inlay_markup.settings import Settings

logger = logging.getLogger(__name__)

show_app = typer.Typer(
    name="inlay-markup-print",
    help="Print Rust sources with their inlay hints written inline.",
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
)


@show_app.command(context_settings=LENIENT_CONTEXT_SETTINGS)
def show(
    arguments: Annotated[
        list[str] | None,
        typer.Argument(
            metavar="[INPUT_DIR]",
            help=f"Directory to read sources from (default {DEFAULT_INPUT_DIR}).",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Print every source file under INPUT_DIR with its hints inlined."""
    settings = Settings.from_env()
    configure_logging(settings)
    (input_dir,) = pick_directories(arguments, (DEFAULT_INPUT_DIR,))
    annotator = create_annotator(settings)
    try:
        for path in iter_source_files(resolve_input_dir(input_dir), settings.extension):
            typer.echo(str(path))
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipped %s: %s", path, exc)
                continue
            try:
                annotated = annotator.annotate_text(text)
            except AnnotationError as exc:
                logger.warning("Skipped %s: %s", path, exc)
                continue
            typer.echo(annotated.decode("utf-8"))
    finally:
        annotator.close()


def main() -> None:
    show_app()
