"""OpenCV-backed camera device."""

import asyncio
import logging
import threading
from dataclasses import dataclass, field

import cv2
import numpy as np

from face_attendance.domain.errors import DeviceError
from face_attendance.services.media import CameraDevice

_logger = logging.getLogger(__name__)


@dataclass
class OpenCVCameraStream:
    """Video stream held open on a cv2.VideoCapture.

    VideoCapture is not thread-safe. Reads run in worker threads one at a
    time, and a stop that arrives mid-read leaves the release to that read.
    """

    capture: cv2.VideoCapture
    _read_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _state_lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _reading: bool = field(default=False, init=False, repr=False)
    _stopped: bool = field(default=False, init=False, repr=False)
    _released: bool = field(default=False, init=False, repr=False)

    @property
    def live_tracks(self) -> int:
        if self._stopped:
            return 0
        return 1 if self.capture.isOpened() else 0

    async def read_frame(self) -> np.ndarray | None:
        """Read the next frame off the device."""
        if self._stopped:
            return None
        return await asyncio.to_thread(self._read)

    def stop(self) -> None:
        """Stop the stream; the device is released once no read is running."""
        with self._state_lock:
            self._stopped = True
            if self._reading:
                return
            self._release()

    def _read(self) -> np.ndarray | None:
        with self._read_lock:
            with self._state_lock:
                if self._stopped or not self.capture.isOpened():
                    return None
                self._reading = True
            try:
                ok, frame = self.capture.read()
            finally:
                with self._state_lock:
                    self._reading = False
                    if self._stopped:
                        self._release()
        if not ok or self._stopped:
            return None
        return frame

    def _release(self) -> None:
        # Caller holds _state_lock.
        if self._released:
            return
        self._released = True
        self.capture.release()


@dataclass
class OpenCVCamera(CameraDevice):
    """Camera device opened through OpenCV's VideoCapture."""

    device_id: int = 0
    width: int = 640
    height: int = 480

    async def open_stream(self) -> OpenCVCameraStream:
        """Open the configured device."""
        capture = await asyncio.to_thread(self._open)
        _logger.info(
            "Opened camera %s at %sx%s", self.device_id, self.width, self.height
        )
        return OpenCVCameraStream(capture=capture)

    def _open(self) -> cv2.VideoCapture:
        capture = cv2.VideoCapture(self.device_id)
        if not capture.isOpened():
            capture.release()
            raise DeviceError(f"Failed to open camera {self.device_id}")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        return capture
