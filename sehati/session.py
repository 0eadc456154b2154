"""Scan session controller owning all UI-facing state."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from .capture import CameraStream, load_image_bytes, load_image_file
from .config import MAX_FILE_BYTES
from .errors import (
    CameraUnavailableError,
    FileTooLargeError,
    SessionBusyError,
    UnsupportedImageError,
)
from .history import HistoryStore
from .models import AnalysisResult, EncodedImage

if TYPE_CHECKING:
    from .config import SehatiConfig
    from .vision import AnalyzerBackend

logger = logging.getLogger(__name__)

MSG_FILE_TOO_LARGE = "حجم الصورة يجب أن يكون أقل من 5 ميجابايت"
MSG_UNSUPPORTED_IMAGE = "يرجى اختيار ملف صورة صالح."
MSG_CAMERA_UNAVAILABLE = "لا يمكن الوصول للكاميرا. يرجى منح الإذن."
MSG_ANALYSIS_FAILED = "حدث خطأ أثناء تحليل الصورة. يرجى التأكد من وضوح الملصق الغذائي."


@dataclass
class SessionState:
    image: EncodedImage | None = None
    analyzing: bool = False
    error: str | None = None
    camera_active: bool = False
    result: AnalysisResult | None = None  # may be a history entry being viewed


class ScanSession:
    """Capture an image, analyze it, and keep the result history.

    Rendering code reads ``state`` and ``history``; all changes go through
    the methods here.
    """

    def __init__(
        self,
        backend: AnalyzerBackend,
        history: HistoryStore,
        *,
        max_file_bytes: int = MAX_FILE_BYTES,
        camera_factory: Callable[[], CameraStream] = CameraStream,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._history = history
        self._max_file_bytes = max_file_bytes
        self._camera_factory = camera_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._camera: CameraStream | None = None
        self.state = SessionState()

    @classmethod
    def from_config(cls, config: SehatiConfig) -> ScanSession:
        """Build a session with its backend and a loaded history store."""
        from .db import LocalStorage
        from .vision import create_backend

        storage = LocalStorage(config.history.db_path)
        history = HistoryStore(
            storage, key=config.history.key, limit=config.history.limit
        )
        history.load()

        cap = config.capture
        return cls(
            create_backend(config),
            history,
            max_file_bytes=cap.max_file_bytes,
            camera_factory=lambda: CameraStream(
                cap.camera_index,
                fallback_index=cap.fallback_camera_index,
                jpeg_quality=cap.jpeg_quality,
            ),
        )

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def camera(self) -> CameraStream | None:
        return self._camera

    # -- capture ---------------------------------------------------------

    async def upload_file(self, path: str | Path) -> bool:
        """Use an image file from disk. Returns False if it was rejected."""
        try:
            image = await load_image_file(path, max_bytes=self._max_file_bytes)
        except (FileTooLargeError, UnsupportedImageError) as e:
            return self._reject_upload(e)
        self._set_image(image)
        return True

    async def upload_bytes(self, data: bytes, mime_type: str | None) -> bool:
        """Use an image uploaded through the browser."""
        try:
            image = await load_image_bytes(
                data, mime_type, max_bytes=self._max_file_bytes
            )
        except (FileTooLargeError, UnsupportedImageError) as e:
            return self._reject_upload(e)
        self._set_image(image)
        return True

    def _reject_upload(self, err: Exception) -> bool:
        logger.info("upload rejected: %s", err)
        if isinstance(err, FileTooLargeError):
            self.state.error = MSG_FILE_TOO_LARGE
        else:
            self.state.error = MSG_UNSUPPORTED_IMAGE
        return False

    async def start_camera(self) -> bool:
        """Open the camera for live preview.

        The stream is owned by the session from the moment it is created,
        so ``stop_camera()``/``close()`` or cancelling this call releases a
        device that is still being acquired.
        """
        if self._camera is not None:
            if self._camera.active:
                return True
            self.stop_camera()

        camera = self._camera_factory()
        self._camera = camera
        self.state.camera_active = True
        try:
            await camera.open()
        except (CameraUnavailableError, ImportError) as e:
            if self._camera is not camera:
                # stopped while opening
                return False
            logger.warning("camera unavailable: %s", e)
            self._drop_camera(camera)
            self.state.error = MSG_CAMERA_UNAVAILABLE
            return False
        except asyncio.CancelledError:
            logger.info("camera start cancelled")
            self._drop_camera(camera)
            raise

        if self._camera is not camera:
            # stopped while opening
            camera.stop()
            return False
        return True

    def _drop_camera(self, camera) -> None:
        camera.stop()
        if self._camera is camera:
            self._camera = None
            self.state.camera_active = False

    def capture_photo(self) -> bool:
        """Take a still from the live camera; the camera is released either way."""
        camera = self._camera
        if camera is None:
            return False
        self._camera = None
        self.state.camera_active = False
        try:
            image = camera.capture()
        except CameraUnavailableError as e:
            logger.warning("capture failed: %s", e)
            self.state.error = MSG_CAMERA_UNAVAILABLE
            return False
        self._set_image(image)
        return True

    def accept_camera_still(self, data: bytes, mime_type: str = "image/jpeg") -> None:
        """Use a still already taken by the browser's own camera widget."""
        self._set_image(EncodedImage(data=data, mime_type=mime_type))

    def stop_camera(self) -> None:
        if self._camera is not None:
            self._camera.stop()
            self._camera = None
        self.state.camera_active = False

    def clear_image(self) -> None:
        if self.state.analyzing:
            raise SessionBusyError("analysis in progress")
        self.state.image = None
        self.state.result = None

    def _set_image(self, image: EncodedImage) -> None:
        self.state.image = image
        self.state.result = None
        self.state.error = None

    # -- analysis --------------------------------------------------------

    @property
    def can_analyze(self) -> bool:
        return self.state.image is not None and not self.state.analyzing

    async def analyze(self) -> AnalysisResult | None:
        """Run one analysis of the current image.

        Returns the new result, or None when the call failed; the failure
        message is left in ``state.error`` and the image is kept for a retry.
        """
        if self.state.analyzing:
            raise SessionBusyError("an analysis is already in progress")
        image = self.state.image
        if image is None:
            raise SessionBusyError("no image to analyze")

        self.state.analyzing = True
        self.state.error = None
        try:
            result = await self._backend.analyze(image)
        except Exception:
            logger.exception("analysis failed")
            self.state.error = MSG_ANALYSIS_FAILED
            return None
        finally:
            self.state.analyzing = False

        result = result.stamped(self._clock())
        self.state.result = result
        self._history.append(result)
        logger.info(
            "analyzed %r (grade %s)", result.product_name, result.health_grade
        )
        return result

    # -- history ---------------------------------------------------------

    def select_history(self, index: int) -> AnalysisResult:
        """Display a past result without re-analyzing."""
        result = self._history[index]
        self.state.result = result
        return result

    def delete_history_item(self, index: int) -> AnalysisResult:
        return self._history.remove(index)

    def clear_history(self, confirm: Callable[[], bool]) -> bool:
        return self._history.clear(confirm)

    def close(self) -> None:
        self.stop_camera()
