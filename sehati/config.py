"""TOML configuration loader."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

MAX_FILE_BYTES = 5 * 1024 * 1024
HISTORY_KEY = "sehati_history"
HISTORY_LIMIT = 10


@dataclass
class CaptureConfig:
    max_file_bytes: int = MAX_FILE_BYTES
    camera_index: int = 0
    fallback_camera_index: int | None = None
    jpeg_quality: int = 90


@dataclass
class GeminiVisionConfig:
    api_key: str = ""
    model: str = "gemini-2.5-flash"


@dataclass
class ClaudeVisionConfig:
    api_key: str = ""
    model: str = "claude-sonnet-4-5-20250929"


@dataclass
class VisionConfig:
    backend: str = "gemini"
    gemini: GeminiVisionConfig = field(default_factory=GeminiVisionConfig)
    claude: ClaudeVisionConfig = field(default_factory=ClaudeVisionConfig)


@dataclass
class HistoryConfig:
    db_path: str = "~/.config/sehati/storage.db"
    key: str = HISTORY_KEY
    limit: int = HISTORY_LIMIT


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class SehatiConfig:
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    vision: VisionConfig = field(default_factory=VisionConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> SehatiConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    API keys can be overridden via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cap = raw.get("capture", {})
    vis = raw.get("vision", {})
    his = raw.get("history", {})
    log = raw.get("logging", {})

    gemini_cfg = vis.get("gemini", {})
    claude_cfg = vis.get("claude", {})

    # Resolve API keys: config file → environment variable
    gemini_api_key = gemini_cfg.get("api_key", "") or os.environ.get(
        "GEMINI_API_KEY", ""
    )
    claude_api_key = claude_cfg.get("api_key", "") or os.environ.get(
        "ANTHROPIC_API_KEY", ""
    )

    return SehatiConfig(
        capture=CaptureConfig(
            max_file_bytes=cap.get("max_file_bytes", MAX_FILE_BYTES),
            camera_index=cap.get("camera_index", 0),
            fallback_camera_index=cap.get("fallback_camera_index"),
            jpeg_quality=cap.get("jpeg_quality", 90),
        ),
        vision=VisionConfig(
            backend=vis.get("backend", "gemini"),
            gemini=GeminiVisionConfig(
                api_key=gemini_api_key,
                model=gemini_cfg.get("model", "gemini-2.5-flash"),
            ),
            claude=ClaudeVisionConfig(
                api_key=claude_api_key,
                model=claude_cfg.get("model", "claude-sonnet-4-5-20250929"),
            ),
        ),
        history=HistoryConfig(
            db_path=his.get("db_path", "~/.config/sehati/storage.db"),
            key=his.get("key", HISTORY_KEY),
            limit=his.get("limit", HISTORY_LIMIT),
        ),
        logging=LoggingConfig(
            level=str(log.get("level", "INFO")).upper(),
        ),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
