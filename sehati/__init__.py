"""Food label scanner: capture a product label, analyze it, keep a history."""

from .capture import CameraStream, list_cameras, load_image_bytes, load_image_file
from .config import (
    CaptureConfig,
    HistoryConfig,
    SehatiConfig,
    VisionConfig,
    load_config,
)
from .errors import (
    AnalysisError,
    CameraUnavailableError,
    FileTooLargeError,
    SehatiError,
    SessionBusyError,
    UnsupportedImageError,
)
from .history import HistoryStore
from .models import AnalysisResult, EncodedImage, HealthGrade, NutritionInfo
from .session import ScanSession, SessionState
from .vision import AnalyzerBackend, create_backend

__all__ = [
    "AnalysisResult",
    "NutritionInfo",
    "HealthGrade",
    "EncodedImage",
    "CameraStream",
    "list_cameras",
    "load_image_file",
    "load_image_bytes",
    "AnalyzerBackend",
    "create_backend",
    "HistoryStore",
    "ScanSession",
    "SessionState",
    "SehatiConfig",
    "CaptureConfig",
    "VisionConfig",
    "HistoryConfig",
    "load_config",
    "SehatiError",
    "FileTooLargeError",
    "UnsupportedImageError",
    "CameraUnavailableError",
    "AnalysisError",
    "SessionBusyError",
]
