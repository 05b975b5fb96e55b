"""Camera session lifecycle."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

import numpy as np

_logger = logging.getLogger(__name__)


class FrameSource(Protocol):
    """Live source of video frames."""

    async def read_frame(self) -> np.ndarray | None:
        """Return the current BGR frame, or None when no frame is ready."""


class CameraStream(FrameSource, Protocol):
    """An acquired device stream."""

    @property
    def live_tracks(self) -> int:
        """Number of device tracks still running."""

    def stop(self) -> None:
        """Stop every track of the stream."""


class CameraDevice(Protocol):
    """Interface for acquiring a user-facing, video-only camera stream."""

    async def open_stream(self) -> CameraStream:
        """Acquire the stream or raise DeviceError."""


@dataclass
class MediaSession:
    """Owns the single camera stream of the kiosk."""

    device: CameraDevice
    _stream: CameraStream | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def is_active(self) -> bool:
        return self._stream is not None

    @property
    def frame_source(self) -> FrameSource | None:
        return self._stream

    @property
    def live_tracks(self) -> int:
        if self._stream is None:
            return 0
        return self._stream.live_tracks

    async def start(self) -> FrameSource:
        """Acquire a fresh stream, releasing any previous one first.

        Raises DeviceError when the camera cannot be opened; in that case no
        stream is held afterwards.
        """
        async with self._lock:
            self.stop()
            stream = await self.device.open_stream()
            self._stream = stream
            _logger.info("Camera session started")
            return stream

    def stop(self) -> None:
        """Release the current stream. Safe to call repeatedly."""
        stream, self._stream = self._stream, None
        if stream is None:
            return
        stream.stop()
        _logger.info("Camera session stopped")
