from collections.abc import Iterable, Mapping, Sequence

from inlay_markup.core.ports.hint_source import HintSourceError
from inlay_markup.core.presets import InlayHintsConfig
from inlay_markup.models import ByteRange, Category, Hint


class InMemoryHintSource:
    """Serve pre-computed hints, keyed by category.

    Categories listed in ``failing`` raise ``HintSourceError`` like an engine
    that cannot analyse the text.
    """

    def __init__(
        self,
        hints: Mapping[Category, Iterable[tuple[int, int, str]]] | None = None,
        failing: Iterable[Category] = (),
    ) -> None:
        self.hints: dict[Category, list[Hint]] = {}
        for category, entries in (hints or {}).items():
            self.hints[category] = [
                Hint(range=ByteRange(start=start, end=end), label=label, category=category)
                for start, end, label in entries
            ]
        self.failing = set(failing)
        self.calls: list[tuple[Category, InlayHintsConfig]] = []

    def compute_hints(self, source: str, config: InlayHintsConfig, category: Category) -> Sequence[Hint]:
        self.calls.append((category, config))
        if category in self.failing:
            raise HintSourceError(f"no analysis for {category.value} hints")
        return list(self.hints.get(category, []))

    def close(self) -> None:
        return None
