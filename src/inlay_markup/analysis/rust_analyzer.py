"""Inlay hints from a rust-analyzer language server.

Each preset gets its own server process whose settings enable exactly that
preset's hints. Every text is analysed as the only file of a standalone crate:
the session owns a scratch workspace with one ``lib.rs`` linked as a detached
project, and each new text replaces that document's in-memory contents.
"""

from __future__ import annotations

import logging
import os
import queue
import shutil
import subprocess
import tempfile
import threading
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any, BinaryIO

from inlay_markup.analysis.lsp import UTF8, UTF16, LineIndex, LspProtocolError, read_message, write_message
from inlay_markup.core.ports.hint_source import HintSourceError
from inlay_markup.core.presets import InlayHintsConfig
from inlay_markup.models import ByteRange, Category, Hint

logger = logging.getLogger(__name__)

_SHUTDOWN_TIMEOUT = 5.0

_BASE_SETTINGS: dict[str, Any] = {
    "cachePriming": {"enable": False},
    "checkOnSave": False,
    "lens": {"enable": False},
    "procMacro": {"attributes": {"enable": True}},
}

_CLIENT_CAPABILITIES: dict[str, Any] = {
    "general": {"positionEncodings": [UTF8, UTF16]},
    "textDocument": {
        "synchronization": {"dynamicRegistration": False},
        "inlayHint": {"dynamicRegistration": False},
    },
    "workspace": {"configuration": True},
    "experimental": {"serverStatusNotification": True},
}


def label_text(label: str | list[dict[str, Any]]) -> str:
    if isinstance(label, str):
        return label
    return "".join(part.get("value", "") for part in label)


class RustAnalyzerSession:
    """One rust-analyzer process configured for a single preset."""

    def __init__(self, executable: str, config: InlayHintsConfig, timeout: float) -> None:
        self._executable = executable
        self._timeout = timeout
        self._workspace = Path(tempfile.mkdtemp(prefix="inlay-markup-"))
        self._document = self._workspace / "lib.rs"
        self._document.write_text("", encoding="utf-8")
        self._uri = self._document.as_uri()
        self._settings: dict[str, Any] = {
            **_BASE_SETTINGS,
            **config.to_rust_analyzer_settings(),
            "linkedProjects": [str(self._document)],
        }
        self._process: subprocess.Popen[bytes] | None = None
        self._messages: queue.Queue[dict[str, Any] | None] = queue.Queue()
        self._next_id = 1
        self._version = 0
        self._quiescent = False
        self._exited = False
        self.position_encoding = UTF16

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        try:
            self._process = subprocess.Popen(
                [self._executable],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                cwd=str(self._workspace),
            )
        except OSError as exc:
            raise HintSourceError(f"Cannot start {self._executable}: {exc}") from exc

        assert self._process.stdout is not None
        reader = threading.Thread(
            target=self._read_loop, args=(self._process.stdout,), name="rust-analyzer-reader", daemon=True
        )
        reader.start()

        result = self.request(
            "initialize",
            {
                "processId": os.getpid(),
                "clientInfo": {"name": "inlay-markup"},
                "rootUri": self._workspace.as_uri(),
                "workspaceFolders": [{"uri": self._workspace.as_uri(), "name": self._workspace.name}],
                "capabilities": _CLIENT_CAPABILITIES,
                "initializationOptions": self._settings,
            },
        )
        capabilities = (result or {}).get("capabilities", {})
        self.position_encoding = capabilities.get("positionEncoding", UTF16)
        self.notify("initialized", {})
        self._wait_until_quiescent()
        logger.info("rust-analyzer ready (position encoding %s)", self.position_encoding)

    def close(self) -> None:
        process = self._process
        self._process = None
        try:
            if process is not None and process.poll() is None:
                try:
                    self._request_with_process(process, "shutdown", None, _SHUTDOWN_TIMEOUT)
                    self._send_with_process(process, {"jsonrpc": "2.0", "method": "exit"})
                except HintSourceError as exc:
                    logger.debug("rust-analyzer did not shut down cleanly: %s", exc)
                try:
                    process.wait(timeout=_SHUTDOWN_TIMEOUT)
                except subprocess.TimeoutExpired:
                    process.kill()
                    process.wait()
        finally:
            shutil.rmtree(self._workspace, ignore_errors=True)

    # ------------------------------------------------------------------
    # Hints
    # ------------------------------------------------------------------

    def inlay_hints(self, text: str) -> list[tuple[int, str]]:
        """Return ``(byte offset, label)`` for every hint the server reports on ``text``."""
        self._version += 1
        if self._version == 1:
            self.notify(
                "textDocument/didOpen",
                {"textDocument": {"uri": self._uri, "languageId": "rust", "version": self._version, "text": text}},
            )
        else:
            self.notify(
                "textDocument/didChange",
                {
                    "textDocument": {"uri": self._uri, "version": self._version},
                    "contentChanges": [{"text": text}],
                },
            )

        index = LineIndex(text, self.position_encoding)
        end_line, end_character = index.end_position()
        result = self.request(
            "textDocument/inlayHint",
            {
                "textDocument": {"uri": self._uri},
                "range": {
                    "start": {"line": 0, "character": 0},
                    "end": {"line": end_line, "character": end_character},
                },
            },
        )
        hints: list[tuple[int, str]] = []
        for item in result or []:
            try:
                position = item["position"]
                hints.append((index.offset(position["line"], position["character"]), label_text(item["label"])))
            except (AttributeError, KeyError, TypeError) as exc:
                raise HintSourceError(f"Malformed inlay hint {item!r}: {exc!r}") from exc
        return hints

    # ------------------------------------------------------------------
    # JSON-RPC
    # ------------------------------------------------------------------

    def request(self, method: str, params: Any) -> Any:
        if self._process is None:
            raise HintSourceError("rust-analyzer is not running")
        return self._request_with_process(self._process, method, params, self._timeout)

    def notify(self, method: str, params: Any) -> None:
        if self._process is None:
            raise HintSourceError("rust-analyzer is not running")
        self._send_with_process(self._process, {"jsonrpc": "2.0", "method": method, "params": params})

    def _request_with_process(
        self, process: subprocess.Popen[bytes], method: str, params: Any, timeout: float
    ) -> Any:
        request_id = self._next_id
        self._next_id += 1
        self._send_with_process(process, {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params})

        deadline = time.monotonic() + timeout
        while True:
            message = self._next_message(process, deadline)
            if "method" in message:
                continue
            if message.get("id") != request_id:
                continue
            if "error" in message:
                error = message["error"]
                raise HintSourceError(f"{method} failed ({error.get('code')}): {error.get('message')}")
            return message.get("result")

    def _send_with_process(self, process: subprocess.Popen[bytes], payload: dict[str, Any]) -> None:
        if process.stdin is None:
            raise HintSourceError("rust-analyzer stdin is closed")
        try:
            write_message(process.stdin, payload)
        except OSError as exc:
            raise HintSourceError(f"Lost connection to rust-analyzer: {exc}") from exc

    def _next_message(self, process: subprocess.Popen[bytes], deadline: float) -> dict[str, Any]:
        """Wait for the next message, answering server requests and notifications on the way."""
        if self._exited:
            raise HintSourceError("rust-analyzer exited")
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise HintSourceError(f"Timed out after {self._timeout:g}s waiting for rust-analyzer")
        try:
            message = self._messages.get(timeout=remaining)
        except queue.Empty:
            raise HintSourceError(f"Timed out after {self._timeout:g}s waiting for rust-analyzer") from None
        if message is None:
            self._exited = True
            raise HintSourceError("rust-analyzer exited")

        method = message.get("method")
        if method is not None and "id" in message:
            self._answer(process, message)
        elif method == "experimental/serverStatus":
            self._update_status(message.get("params") or {})
        return message

    def _answer(self, process: subprocess.Popen[bytes], message: dict[str, Any]) -> None:
        result: Any = None
        if message["method"] == "workspace/configuration":
            items = (message.get("params") or {}).get("items", [])
            result = [self._settings for _ in items]
        self._send_with_process(process, {"jsonrpc": "2.0", "id": message["id"], "result": result})

    def _update_status(self, status: dict[str, Any]) -> None:
        self._quiescent = bool(status.get("quiescent"))
        if status.get("health") in ("warning", "error") and status.get("message"):
            logger.warning("rust-analyzer: %s", status["message"])

    def _wait_until_quiescent(self) -> None:
        assert self._process is not None
        deadline = time.monotonic() + self._timeout
        while not self._quiescent:
            self._next_message(self._process, deadline)

    def _read_loop(self, stream: BinaryIO) -> None:
        try:
            while True:
                message = read_message(stream)
                if message is None:
                    break
                self._messages.put(message)
        except (OSError, ValueError, LspProtocolError) as exc:
            logger.debug("rust-analyzer reader stopped: %s", exc)
        finally:
            self._messages.put(None)


class RustAnalyzerHintSource:
    """Hint source backed by one rust-analyzer session per preset.

    A session that fails is discarded; the next text for that preset starts a
    fresh server.
    """

    def __init__(self, executable: str = "rust-analyzer", timeout: float = 120.0) -> None:
        self._executable = executable
        self._timeout = timeout
        self._sessions: dict[InlayHintsConfig, RustAnalyzerSession] = {}

    def compute_hints(self, source: str, config: InlayHintsConfig, category: Category) -> Sequence[Hint]:
        session = self._sessions.get(config)
        try:
            if session is None:
                session = RustAnalyzerSession(self._executable, config, self._timeout)
                self._sessions[config] = session
                session.start()
            found = session.inlay_hints(source)
        except HintSourceError:
            self._discard(config)
            raise
        return [Hint(range=ByteRange.at(offset), label=label, category=category) for offset, label in found]

    def close(self) -> None:
        for config in list(self._sessions):
            self._discard(config)

    def _discard(self, config: InlayHintsConfig) -> None:
        session = self._sessions.pop(config, None)
        if session is not None:
            session.close()

    def __enter__(self) -> RustAnalyzerHintSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
