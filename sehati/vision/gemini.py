"""Gemini API analyzer backend."""

from __future__ import annotations

from ..models import AnalysisResult, EncodedImage
from . import AnalyzerBackend
from .prompt import ANALYSIS_PROMPT, parse_analysis


class GeminiAnalyzer(AnalyzerBackend):
    """Analyze food labels using Google Gemini's vision capability."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.5-flash") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, image: EncodedImage) -> AnalysisResult:
        if not self._api_key:
            raise ValueError(
                "Gemini API key is not set. "
                "Check the config file or the GEMINI_API_KEY environment variable."
            )

        try:
            import google.generativeai as genai
        except ImportError:
            raise ImportError(
                "google-generativeai SDK is required: pip install google-generativeai"
            ) from None

        genai.configure(api_key=self._api_key)
        model = genai.GenerativeModel(self._model)

        parts = [
            {"mime_type": image.mime_type, "data": image.data},
            ANALYSIS_PROMPT,
        ]
        response = await model.generate_content_async(
            parts,
            generation_config={"response_mime_type": "application/json"},
        )
        return parse_analysis(response.text)
