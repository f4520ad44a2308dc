"""Analysis layer: hands sensor records to a text-analysis service."""

from .base import Analyzer
from .dispatch import AnalysisDispatcher
from .gemini import GeminiAnalyzer, build_prompt, extract_text

__all__ = [
    "Analyzer",
    "AnalysisDispatcher",
    "GeminiAnalyzer",
    "build_prompt",
    "extract_text",
]
