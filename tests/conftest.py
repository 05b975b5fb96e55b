"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field

import numpy as np
import pytest

from face_attendance.adapters.attendee_client import AttendeeClient
from face_attendance.adapters.storage_client import StorageClient
from face_attendance.config import Settings
from face_attendance.containers import AppContainer
from face_attendance.domain.auth import AuthResult, Matched
from face_attendance.domain.errors import DeviceError
from face_attendance.domain.images import CapturedImage, UploadKey
from face_attendance.services.capture import FrameCapture
from face_attendance.services.media import CameraDevice, MediaSession
from face_attendance.services.workflow import WorkflowController


def make_frame(width: int = 640, height: int = 480) -> np.ndarray:
    """Build a BGR frame with a gradient so the encoder has real content."""
    row = np.linspace(0, 255, num=width, dtype=np.uint8)
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = row
    frame[:, :, 2] = 255 - row
    return frame


@dataclass
class FakeCameraStream:
    """Camera stream serving a fixed frame."""

    frame: np.ndarray | None = field(default_factory=make_frame)
    stopped: bool = False
    stop_calls: int = 0

    @property
    def live_tracks(self) -> int:
        return 0 if self.stopped else 1

    async def read_frame(self) -> np.ndarray | None:
        if self.stopped:
            return None
        return self.frame

    def stop(self) -> None:
        self.stop_calls += 1
        self.stopped = True


@dataclass
class FakeCameraDevice(CameraDevice):
    """Camera device that hands out fake streams."""

    frame: np.ndarray | None = field(default_factory=make_frame)
    fail: bool = False
    gate: asyncio.Event | None = None
    streams: list[FakeCameraStream] = field(default_factory=list)

    async def open_stream(self) -> FakeCameraStream:
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise DeviceError("Permission denied")
        stream = FakeCameraStream(frame=self.frame)
        self.streams.append(stream)
        return stream

    @property
    def live_tracks(self) -> int:
        return sum(stream.live_tracks for stream in self.streams)


@dataclass
class FakeStorageClient(StorageClient):
    """Storage client that records uploads."""

    uploads: list[tuple[CapturedImage, UploadKey]] = field(default_factory=list)
    error: Exception | None = None
    gate: asyncio.Event | None = None

    async def upload(self, image: CapturedImage, key: UploadKey) -> None:
        self.uploads.append((image, key))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    @property
    def keys(self) -> list[UploadKey]:
        return [key for _, key in self.uploads]


@dataclass
class FakeAttendeeClient(AttendeeClient):
    """Attendee client returning a fixed outcome."""

    result: AuthResult = field(
        default_factory=lambda: Matched(first_name="Ana", last_name="Lee")
    )
    keys: list[UploadKey] = field(default_factory=list)

    async def authenticate(self, key: UploadKey) -> AuthResult:
        self.keys.append(key)
        return self.result


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_gateway_url="https://gateway.test/prod",
        s3_bucket_path="attendance-images",
        environment="test",
    )


@pytest.fixture
def camera() -> FakeCameraDevice:
    return FakeCameraDevice()


@pytest.fixture
def storage_client() -> FakeStorageClient:
    return FakeStorageClient()


@pytest.fixture
def attendee_client() -> FakeAttendeeClient:
    return FakeAttendeeClient()


@pytest.fixture
def media_session(camera: FakeCameraDevice) -> MediaSession:
    return MediaSession(camera)


@pytest.fixture
def controller(
    media_session: MediaSession,
    storage_client: FakeStorageClient,
    attendee_client: FakeAttendeeClient,
) -> WorkflowController:
    return WorkflowController(
        media=media_session,
        frame_capture=FrameCapture(),
        storage_client=storage_client,
        attendee_client=attendee_client,
    )


@pytest.fixture
def container(
    settings: Settings,
    media_session: MediaSession,
    controller: WorkflowController,
) -> AppContainer:
    async def close_resources() -> None:
        controller.close()

    return AppContainer(
        settings=settings,
        media_session=media_session,
        frame_capture=controller.frame_capture,
        workflow=controller,
        close_resources=close_resources,
    )
