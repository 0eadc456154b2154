"""Claude API analyzer backend."""

from __future__ import annotations

from ..models import AnalysisResult, EncodedImage
from . import AnalyzerBackend
from .prompt import ANALYSIS_PROMPT, parse_analysis


class ClaudeAnalyzer(AnalyzerBackend):
    """Analyze food labels using Claude's vision capability."""

    def __init__(self, api_key: str = "", model: str = "claude-sonnet-4-5-20250929") -> None:
        self._api_key = api_key
        self._model = model

    async def analyze(self, image: EncodedImage) -> AnalysisResult:
        if not self._api_key:
            raise ValueError(
                "Anthropic API key is not set. "
                "Check the config file or the ANTHROPIC_API_KEY environment variable."
            )

        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic SDK is required: pip install anthropic"
            ) from None

        content = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.mime_type,
                    "data": image.b64(),
                },
            },
            {"type": "text", "text": ANALYSIS_PROMPT},
        ]

        client = anthropic.AsyncAnthropic(api_key=self._api_key)
        response = await client.messages.create(
            model=self._model,
            max_tokens=2048,
            messages=[{"role": "user", "content": content}],
        )

        text = response.content[0].text
        return parse_analysis(text)
