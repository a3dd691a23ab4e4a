import os
from enum import Enum

from pydantic import BaseModel, ConfigDict

_TRUTHY = {"1", "true", "yes", "on"}


class Engine(str, Enum):
    RUST_ANALYZER = "rust-analyzer"
    SYNTAX = "syntax"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    extension: str = "rs"
    engine: Engine = Engine.RUST_ANALYZER
    rust_analyzer_path: str = "rust-analyzer"
    timeout: float = 120.0
    closing_brace_hints: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            extension=os.getenv("INLAY_MARKUP_EXTENSION", "rs").lstrip("."),
            engine=Engine(os.getenv("INLAY_MARKUP_ENGINE", Engine.RUST_ANALYZER.value)),
            rust_analyzer_path=os.getenv("RUST_ANALYZER_PATH", "rust-analyzer"),
            timeout=float(os.getenv("INLAY_MARKUP_TIMEOUT", "120")),
            closing_brace_hints=os.getenv("INLAY_MARKUP_CLOSING_BRACE_HINTS", "false").strip().lower() in _TRUTHY,
            log_level=os.getenv("INLAY_MARKUP_LOG_LEVEL", "WARNING").upper(),
        )
