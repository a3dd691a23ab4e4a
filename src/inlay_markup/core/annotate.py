"""Merge independently computed hint sets into the text they describe.

Every hint is rendered with its category's template and inserted at its anchor
offset, measured against the original bytes. The source buffer is only read;
the output is built append-only, so earlier insertions never shift later
anchors. Anchors are hint range endpoints and therefore fall on UTF-8
character boundaries, which keeps the output valid UTF-8.
"""

from collections import defaultdict
from collections.abc import Iterable

from inlay_markup.core.categories import CATEGORY_STYLES, EMISSION_ORDER
from inlay_markup.models import Category, Hint


class AnnotationError(ValueError):
    """Raised when a hint cannot be placed in the source text."""


def index_anchors(source_length: int, hints: Iterable[Hint]) -> dict[Category, dict[int, list[str]]]:
    """Group rendered markers by category and anchor offset.

    Markers sharing a category and an anchor keep their input order.
    """
    anchors: dict[Category, dict[int, list[str]]] = defaultdict(lambda: defaultdict(list))
    for hint in hints:
        style = CATEGORY_STYLES[hint.category]
        offset = style.anchor_offset(hint.range)
        if offset > source_length:
            raise AnnotationError(
                f"{hint.category.value} hint {hint.label!r} anchors at byte {offset}, "
                f"past the end of a {source_length}-byte text"
            )
        anchors[hint.category][offset].append(style.render(hint.label))
    return anchors


def _markers_at(anchors: dict[Category, dict[int, list[str]]], offset: int) -> str:
    parts: list[str] = []
    for category in EMISSION_ORDER:
        by_offset = anchors.get(category)
        if by_offset and offset in by_offset:
            parts.extend(by_offset[offset])
    return "".join(parts)


def annotate(source: str | bytes, hints: Iterable[Hint]) -> bytes:
    """Return ``source`` with every hint's marker inserted at its anchor offset.

    ``hints`` may mix all categories in any order; markers that share an offset
    are always emitted in ``EMISSION_ORDER``. Anchors equal to the text length
    are appended after the last byte.
    """
    data = source.encode("utf-8") if isinstance(source, str) else bytes(source)
    anchors = index_anchors(len(data), hints)
    offsets = sorted({offset for by_offset in anchors.values() for offset in by_offset})

    output = bytearray()
    cursor = 0
    for offset in offsets:
        output += data[cursor:offset]
        output += _markers_at(anchors, offset).encode("utf-8")
        cursor = offset
    output += data[cursor:]
    return bytes(output)
