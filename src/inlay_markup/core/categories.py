from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from inlay_markup.models import ByteRange, Category


class Anchor(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class CategoryStyle:
    anchor: Anchor
    template: str

    def anchor_offset(self, byte_range: ByteRange) -> int:
        return byte_range.start if self.anchor is Anchor.START else byte_range.end

    def render(self, label: str) -> str:
        return self.template.format(label=label)


CATEGORY_STYLES = MappingProxyType(
    {
        Category.TYPE: CategoryStyle(Anchor.END, ": {label}"),
        Category.CHAINING: CategoryStyle(Anchor.END, " // <- {label}"),
        Category.PARAMETER: CategoryStyle(Anchor.START, "{label}: "),
        Category.BINDING_MODE: CategoryStyle(Anchor.END, " /* {label} */"),
        Category.LIFETIME: CategoryStyle(Anchor.END, "{label}"),
        Category.CLOSING_BRACE: CategoryStyle(Anchor.END, " /* {label} */"),
    }
)

# Markers sharing an offset are emitted in this order: hints that close the
# preceding text first, then hints that open the following text. Parameter
# hints therefore come last, not between chaining and binding-mode hints;
# see "Same-offset order" in DESIGN.md.
EMISSION_ORDER: tuple[Category, ...] = (
    Category.TYPE,
    Category.CHAINING,
    Category.BINDING_MODE,
    Category.LIFETIME,
    Category.CLOSING_BRACE,
    Category.PARAMETER,
)
