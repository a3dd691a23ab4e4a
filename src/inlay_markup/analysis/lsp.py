"""Language Server Protocol plumbing: message framing and position mapping."""

import json
from typing import Any, BinaryIO

UTF8 = "utf-8"
UTF16 = "utf-16"
UTF32 = "utf-32"


class LspProtocolError(RuntimeError):
    pass


def write_message(stream: BinaryIO, payload: dict[str, Any]) -> None:
    body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    stream.write(f"Content-Length: {len(body)}\r\n\r\n".encode("ascii"))
    stream.write(body)
    stream.flush()


def read_message(stream: BinaryIO) -> dict[str, Any] | None:
    """Read one framed message, or return None once the stream is exhausted."""
    content_length: int | None = None
    while True:
        line = stream.readline()
        if not line:
            return None
        line = line.strip()
        if not line:
            break
        name, _, value = line.decode("ascii").partition(":")
        if name.strip().lower() == "content-length":
            content_length = int(value.strip())

    if content_length is None:
        raise LspProtocolError("Message header without Content-Length")
    body = stream.read(content_length)
    if len(body) < content_length:
        raise LspProtocolError(f"Truncated message: expected {content_length} bytes, got {len(body)}")
    message = json.loads(body)
    if not isinstance(message, dict):
        raise LspProtocolError(f"Unexpected message payload: {message!r}")
    return message


def _code_units(ch: str, encoding: str) -> int:
    if encoding == UTF8:
        return len(ch.encode("utf-8"))
    if encoding == UTF16:
        return 2 if ord(ch) > 0xFFFF else 1
    return 1


class LineIndex:
    """Map ``(line, character)`` positions of a text to UTF-8 byte offsets.

    ``character`` is counted in the code units of the negotiated position
    encoding. Positions past the end of a line clamp to the line end.
    """

    def __init__(self, text: str, encoding: str = UTF16) -> None:
        if encoding not in (UTF8, UTF16, UTF32):
            raise ValueError(f"Unsupported position encoding: {encoding}")
        self.encoding = encoding
        self._lines = text.split("\n")
        self._starts: list[int] = []
        offset = 0
        for line in self._lines:
            self._starts.append(offset)
            offset += len(line.encode("utf-8")) + 1
        self._length = offset - 1

    def offset(self, line: int, character: int) -> int:
        if line >= len(self._lines):
            return self._length
        start = self._starts[line]
        text = self._lines[line]
        if self.encoding == UTF8:
            return start + min(character, len(text.encode("utf-8")))

        units = 0
        byte = 0
        for ch in text:
            if units >= character:
                break
            units += _code_units(ch, self.encoding)
            byte += len(ch.encode("utf-8"))
        return start + byte

    def end_position(self) -> tuple[int, int]:
        last = self._lines[-1]
        return len(self._lines) - 1, sum(_code_units(ch, self.encoding) for ch in last)
