import logging
import shutil
from collections.abc import Iterable
from itertools import chain

from inlay_markup.analysis.rust_analyzer import RustAnalyzerHintSource
from inlay_markup.analysis.syntax import SyntaxHintSource
from inlay_markup.core.annotate import annotate
from inlay_markup.core.hints import collect_hints
from inlay_markup.core.ports.hint_source import HintSource
from inlay_markup.models import Category, Hint
from inlay_markup.settings import Engine, Settings

logger = logging.getLogger(__name__)


def enabled_categories(settings: Settings) -> tuple[Category, ...]:
    categories = tuple(Category)
    if not settings.closing_brace_hints:
        categories = tuple(c for c in categories if c is not Category.CLOSING_BRACE)
    return categories


def build_hint_source(settings: Settings) -> HintSource:
    if settings.engine is Engine.RUST_ANALYZER:
        if shutil.which(settings.rust_analyzer_path) is not None:
            return RustAnalyzerHintSource(settings.rust_analyzer_path, timeout=settings.timeout)
        logger.warning(
            "%s not found on PATH; falling back to syntax-only hints",
            settings.rust_analyzer_path,
        )
    return SyntaxHintSource()


class HintAnnotator:
    """Annotate texts with the hints of the enabled categories."""

    def __init__(self, source: HintSource, categories: Iterable[Category] = tuple(Category)) -> None:
        self.source = source
        self.categories = tuple(categories)

    def hints_for(self, text: str) -> list[Hint]:
        hint_sets = collect_hints(self.source, text, self.categories)
        return list(chain.from_iterable(hint_sets.values()))

    def annotate_text(self, text: str) -> bytes:
        return annotate(text, self.hints_for(text))

    def close(self) -> None:
        self.source.close()
