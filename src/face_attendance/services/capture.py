"""Still image capture and JPEG encoding."""

import asyncio
from dataclasses import dataclass

import cv2
import numpy as np

from face_attendance.domain.errors import EncodingError
from face_attendance.domain.images import CapturedImage
from face_attendance.services.media import FrameSource

JPEG_QUALITY = 0.95


@dataclass
class FrameCapture:
    """Turns camera frames and photo files into JPEG images."""

    quality: float = JPEG_QUALITY

    async def capture(self, frame_source: FrameSource) -> CapturedImage:
        """Grab the current frame and encode it at its native size."""
        frame = await frame_source.read_frame()
        if frame is None:
            raise EncodingError("No frame available from the camera")
        return await asyncio.to_thread(self.encode_frame, frame)

    async def encode_photo(self, data: bytes) -> CapturedImage:
        """Decode an uploaded photo and re-encode it as JPEG."""
        frame = await asyncio.to_thread(_decode_image, data)
        return await asyncio.to_thread(self.encode_frame, frame)

    def encode_frame(self, frame: np.ndarray) -> CapturedImage:
        """Render a frame onto a matching raster and encode it."""
        if frame.ndim not in {2, 3}:
            raise EncodingError(f"Unsupported frame shape: {frame.shape}")
        height, width = frame.shape[:2]
        if width <= 0 or height <= 0:
            raise EncodingError("Frame has no valid dimensions")
        surface = _to_bgr(frame)
        params = [int(cv2.IMWRITE_JPEG_QUALITY), round(self.quality * 100)]
        try:
            ok, buffer = cv2.imencode(".jpg", surface, params)
        except cv2.error as exc:
            raise EncodingError(str(exc)) from exc
        if not ok:
            raise EncodingError("JPEG encoder rejected the frame")
        return CapturedImage(data=buffer.tobytes(), width=width, height=height)


def _to_bgr(frame: np.ndarray) -> np.ndarray:
    if frame.ndim == 2:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    channels = frame.shape[2]
    if channels == 4:
        return cv2.cvtColor(frame, cv2.COLOR_BGRA2BGR)
    if channels == 1:
        return cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
    if channels != 3:
        raise EncodingError(f"Unsupported channel count: {channels}")
    return np.ascontiguousarray(frame)


def _decode_image(data: bytes) -> np.ndarray:
    if not data:
        raise EncodingError("Photo is empty")
    buffer = np.frombuffer(data, dtype=np.uint8)
    try:
        frame = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    except cv2.error as exc:
        raise EncodingError(str(exc)) from exc
    if frame is None:
        raise EncodingError("Photo could not be decoded")
    return frame
