"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from face_attendance.adapters.attendee_client import HttpxAttendeeClient
from face_attendance.adapters.opencv_camera import OpenCVCamera
from face_attendance.adapters.storage_client import HttpxStorageClient
from face_attendance.config import Settings
from face_attendance.services.capture import FrameCapture
from face_attendance.services.media import MediaSession
from face_attendance.services.workflow import WorkflowController


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    media_session: MediaSession
    frame_capture: FrameCapture
    workflow: WorkflowController
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    camera = OpenCVCamera(
        device_id=resolved_settings.camera_device_id,
        width=resolved_settings.camera_width,
        height=resolved_settings.camera_height,
    )
    media_session = MediaSession(camera)
    frame_capture = FrameCapture()
    storage_client = HttpxStorageClient.create(
        base_url=resolved_settings.api_gateway_url,
        bucket_path=resolved_settings.s3_bucket_path,
        timeout=resolved_settings.request_timeout,
    )
    attendee_client = HttpxAttendeeClient.create(
        base_url=resolved_settings.api_gateway_url,
        timeout=resolved_settings.request_timeout,
    )
    workflow = WorkflowController(
        media=media_session,
        frame_capture=frame_capture,
        storage_client=storage_client,
        attendee_client=attendee_client,
    )

    async def close_resources() -> None:
        workflow.close()
        await storage_client.close()
        await attendee_client.close()

    return AppContainer(
        settings=resolved_settings,
        media_session=media_session,
        frame_capture=frame_capture,
        workflow=workflow,
        close_resources=close_resources,
    )
