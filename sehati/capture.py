"""Image acquisition from local files and from a camera via OpenCV."""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import threading
from pathlib import Path

from .config import MAX_FILE_BYTES
from .errors import CameraUnavailableError, FileTooLargeError, UnsupportedImageError
from .models import EncodedImage

logger = logging.getLogger(__name__)


def check_upload(size: int, mime_type: str | None, *, max_bytes: int = MAX_FILE_BYTES) -> None:
    """Validate an upload before any of its content is decoded."""
    if size > max_bytes:
        raise FileTooLargeError(size, max_bytes)
    if not mime_type or not mime_type.startswith("image/"):
        raise UnsupportedImageError(f"not an image type: {mime_type!r}")


async def load_image_file(
    path: str | Path, *, max_bytes: int = MAX_FILE_BYTES
) -> EncodedImage:
    """Read an image file from disk into an EncodedImage.

    Size and type are checked from file metadata first, so an oversized
    file is rejected without reading it.
    """
    p = Path(path)
    try:
        size = p.stat().st_size
    except OSError as e:
        raise UnsupportedImageError(f"cannot read {p}: {e}") from e

    mime_type = mimetypes.guess_type(p.name)[0]
    check_upload(size, mime_type, max_bytes=max_bytes)

    data = await asyncio.to_thread(p.read_bytes)
    logger.debug("loaded %s (%d bytes, %s)", p, len(data), mime_type)
    return EncodedImage(data=data, mime_type=mime_type)


async def load_image_bytes(
    data: bytes, mime_type: str | None, *, max_bytes: int = MAX_FILE_BYTES
) -> EncodedImage:
    """Wrap uploaded bytes (e.g. from the browser) into an EncodedImage."""
    check_upload(len(data), mime_type, max_bytes=max_bytes)
    payload = await asyncio.to_thread(bytes, data)
    return EncodedImage(data=payload, mime_type=mime_type)


def _import_cv2():
    try:
        import cv2
    except ImportError:
        raise ImportError(
            "opencv-python is required: pip install opencv-python"
        ) from None
    return cv2


class CameraStream:
    """A live camera feed held open for preview until capture or cancel.

    The device is acquired by ``open()`` and released by ``stop()``;
    ``capture()`` always stops the stream after taking its frame. A
    ``stop()`` issued while ``open()`` is still acquiring the device
    (including cancellation of the awaiting task) releases it as soon as
    the worker thread gets hold of it.
    """

    def __init__(
        self,
        camera_index: int = 0,
        *,
        fallback_index: int | None = None,
        jpeg_quality: int = 90,
    ) -> None:
        self._camera_index = camera_index
        self._fallback_index = fallback_index
        self._jpeg_quality = jpeg_quality
        self._cap = None
        self._opened_index: int | None = None
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def active(self) -> bool:
        return self._cap is not None

    @property
    def active_tracks(self) -> int:
        return 1 if self._cap is not None else 0

    async def open(self) -> None:
        """Acquire the camera, preferring the rear device index."""
        if self._cap is not None:
            return
        self._stopped = False
        try:
            await asyncio.to_thread(self._open)
        except asyncio.CancelledError:
            # the worker thread keeps running; stop() makes it let go
            self.stop()
            raise

    def _open(self) -> None:
        cv2 = _import_cv2()

        candidates = [self._camera_index]
        if self._fallback_index is not None and self._fallback_index != self._camera_index:
            candidates.append(self._fallback_index)

        for idx in candidates:
            if self._stopped:
                break
            cap = cv2.VideoCapture(idx)
            if cap.isOpened():
                with self._lock:
                    if not self._stopped:
                        self._cap = cap
                        self._opened_index = idx
                        logger.info("camera %d opened", idx)
                        return
                cap.release()
                logger.info("camera %d released, stopped while opening", idx)
                break
            cap.release()
            logger.warning("camera %d could not be opened", idx)

        raise CameraUnavailableError(
            f"no camera could be opened (tried {candidates})"
        )

    def read_frame(self):
        """Return the current frame for preview."""
        if self._cap is None:
            raise CameraUnavailableError("camera is not open")
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise CameraUnavailableError(
                f"could not read a frame from camera {self._opened_index}"
            )
        return frame

    def capture(self) -> EncodedImage:
        """Take a still from the current frame and stop the stream."""
        try:
            frame = self.read_frame()
            cv2 = _import_cv2()
            ok, buf = cv2.imencode(
                ".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self._jpeg_quality]
            )
            if not ok:
                raise CameraUnavailableError("could not encode the captured frame")
            return EncodedImage(data=buf.tobytes(), mime_type="image/jpeg")
        finally:
            self.stop()

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            cap, self._cap = self._cap, None
            idx, self._opened_index = self._opened_index, None
        if cap is not None:
            cap.release()
            logger.info("camera %s released", idx)

    def __enter__(self) -> CameraStream:
        return self

    def __exit__(self, *exc) -> None:
        self.stop()


def list_cameras(max_check: int = 10) -> list[int]:
    """List available camera indices by probing."""
    cv2 = _import_cv2()

    available: list[int] = []
    for i in range(max_check):
        cap = cv2.VideoCapture(i)
        if cap.isOpened():
            available.append(i)
        cap.release()
    return available
