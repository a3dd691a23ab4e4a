from collections.abc import Sequence
from typing import Protocol

from inlay_markup.core.presets import InlayHintsConfig
from inlay_markup.models import Category, Hint


class HintSourceError(RuntimeError):
    """The analysis engine could not produce hints for a text."""


class HintSource(Protocol):
    def compute_hints(self, source: str, config: InlayHintsConfig, category: Category) -> Sequence[Hint]: ...

    def close(self) -> None: ...
