"""Closing-brace hints computed from the syntax tree alone.

Closing-brace hints name the item a ``}`` closes, so they need no type
information. This source parses the text with tree-sitter and reports them;
every other preset yields nothing. It is the offline fallback when no
rust-analyzer binary is available.
"""

from collections.abc import Iterator, Sequence
from typing import cast

from tree_sitter import Node, Parser
from tree_sitter_language_pack import SupportedLanguage, get_parser

from inlay_markup.core.presets import InlayHintsConfig
from inlay_markup.models import ByteRange, Category, Hint

_WHITESPACE = b" \t\r\n\f\v"


def _text(data: bytes, node: Node) -> str:
    return " ".join(data[node.start_byte : node.end_byte].decode("utf-8").split())


def _last_child(node: Node | None) -> Node | None:
    if node is None or node.child_count == 0:
        return None
    return node.children[-1]


def _trait_name(data: bytes, node: Node) -> str:
    # `impl From<u8> for Foo` is labelled `impl From for Foo`.
    if node.type == "generic_type":
        inner = node.child_by_field_name("type")
        if inner is not None:
            return _trait_name(data, inner)
    if node.type == "scoped_type_identifier":
        name = node.child_by_field_name("name")
        if name is not None:
            return _text(data, name)
    return _text(data, node)


def _named(keyword: str, data: bytes, node: Node) -> str | None:
    name = node.child_by_field_name("name")
    if name is None:
        return None
    return f"{keyword} {_text(data, name)}"


def _labelled_block(data: bytes, node: Node) -> tuple[str, Node] | None:
    """Return the hint label and the braced node it closes, if ``node`` gets one."""
    kind = node.type
    if kind == "function_item":
        body = node.child_by_field_name("body")
        label = _named("fn", data, node)
        return (label, body) if label and body is not None else None
    if kind in ("const_item", "static_item"):
        value = node.child_by_field_name("value")
        if value is None or value.type != "block":
            return None
        keyword = "const" if kind == "const_item" else "static"
        label = _named(keyword, data, node)
        return (label, value) if label else None
    if kind in ("trait_item", "mod_item"):
        body = node.child_by_field_name("body")
        label = _named("trait" if kind == "trait_item" else "mod", data, node)
        return (label, body) if label and body is not None else None
    if kind == "impl_item":
        body = node.child_by_field_name("body")
        self_ty = node.child_by_field_name("type")
        if body is None or self_ty is None:
            return None
        trait = node.child_by_field_name("trait")
        if trait is None:
            return f"impl {_text(data, self_ty)}", body
        return f"impl {_trait_name(data, trait)} for {_text(data, self_ty)}", body
    if kind == "macro_invocation":
        path = node.child_by_field_name("macro")
        closing = _last_child(_last_child(node))
        if path is None or closing is None or closing.type != "}":
            return None
        return f"{_text(data, path)}!", node
    return None


def _closing_range(data: bytes, braced: Node) -> ByteRange | None:
    """Locate the token a hint attaches to, or None when it does not end its line."""
    closing = _last_child(braced)
    if braced.type == "macro_invocation":
        closing = _last_child(closing)
    if closing is None or closing.type != "}":
        return None
    start, end = closing.start_byte, closing.end_byte

    # A trailing `;` takes the hint, unless it is the very last byte.
    if data[end : end + 1] == b";" and end + 1 < len(data):
        start, end = end, end + 1
    if end == len(data):
        return ByteRange(start=start, end=end)

    rest = data[end:]
    whitespace = rest[: len(rest) - len(rest.lstrip(_WHITESPACE))]
    if b"\n" not in whitespace:
        return None
    return ByteRange(start=start, end=end)


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


class SyntaxHintSource:
    def __init__(self, language: str = "rust") -> None:
        self._parser: Parser = get_parser(cast(SupportedLanguage, language))

    def closing_brace_hints(self, source: str, min_lines: int) -> list[Hint]:
        data = source.encode("utf-8")
        tree = self._parser.parse(data)
        hints: list[Hint] = []
        for node in _walk(tree.root_node):
            found = _labelled_block(data, node)
            if found is None:
                continue
            label, braced = found
            lines = 1 + data.count(b"\n", braced.start_byte, braced.end_byte)
            if lines < min_lines:
                continue
            closing = _closing_range(data, braced)
            if closing is not None:
                hints.append(Hint(range=closing, label=label, category=Category.CLOSING_BRACE))
        return hints

    def compute_hints(self, source: str, config: InlayHintsConfig, category: Category) -> Sequence[Hint]:
        if config.closing_brace_hints_min_lines is None:
            return []
        hints = self.closing_brace_hints(source, config.closing_brace_hints_min_lines)
        return [hint.model_copy(update={"category": category}) for hint in hints]

    def close(self) -> None:
        return None
