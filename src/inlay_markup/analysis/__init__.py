from inlay_markup.analysis.memory import InMemoryHintSource
from inlay_markup.analysis.rust_analyzer import RustAnalyzerHintSource, RustAnalyzerSession
from inlay_markup.analysis.syntax import SyntaxHintSource

__all__ = [
    "InMemoryHintSource",
    "RustAnalyzerHintSource",
    "RustAnalyzerSession",
    "SyntaxHintSource",
]
