import logging
from collections.abc import Iterable, Mapping, Sequence

from inlay_markup.core.ports.hint_source import HintSource, HintSourceError
from inlay_markup.core.presets import PRESETS, InlayHintsConfig
from inlay_markup.models import Category, Hint

logger = logging.getLogger(__name__)


def sort_hints(hints: Iterable[Hint]) -> list[Hint]:
    """Order hints by range start; hints with equal starts keep their emission order."""
    return sorted(hints, key=lambda hint: hint.range.start)


def collect_hints(
    source: HintSource,
    text: str,
    categories: Iterable[Category],
    presets: Mapping[Category, InlayHintsConfig] = PRESETS,
) -> dict[Category, Sequence[Hint]]:
    """Compute one hint sequence per category against the same text.

    A category whose computation fails is reported and left empty so the
    remaining categories still apply.
    """
    results: dict[Category, Sequence[Hint]] = {}
    for category in categories:
        try:
            hints = source.compute_hints(text, presets[category], category)
        except HintSourceError as exc:
            logger.warning("%s hints unavailable: %s", category.value, exc)
            hints = []
        results[category] = sort_hints(hints)
    return results
