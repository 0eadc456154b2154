"""Analyzer backend base class and factory."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .prompt import ANALYSIS_PROMPT, parse_analysis

if TYPE_CHECKING:
    from ..config import SehatiConfig
    from ..models import AnalysisResult, EncodedImage


class AnalyzerBackend(ABC):
    """Abstract base for food label analysis by a remote multimodal model."""

    @abstractmethod
    async def analyze(self, image: EncodedImage) -> AnalysisResult:
        """Send one image with the fixed instruction and parse the reply.

        The returned result carries a locally stamped timestamp.
        """
        ...


def create_backend(config: SehatiConfig) -> AnalyzerBackend:
    """Create an analyzer backend based on configuration."""
    backend_name = config.vision.backend

    match backend_name:
        case "gemini":
            from .gemini import GeminiAnalyzer

            return GeminiAnalyzer(
                api_key=config.vision.gemini.api_key,
                model=config.vision.gemini.model,
            )
        case "claude":
            from .claude import ClaudeAnalyzer

            return ClaudeAnalyzer(
                api_key=config.vision.claude.api_key,
                model=config.vision.claude.model,
            )
        case _:
            raise ValueError(
                f"unknown analyzer backend: {backend_name!r} "
                f"(choose gemini or claude)"
            )


__all__ = [
    "ANALYSIS_PROMPT",
    "AnalyzerBackend",
    "create_backend",
    "parse_analysis",
]
