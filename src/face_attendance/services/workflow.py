"""Capture-authenticate workflow state machine."""

import logging
from dataclasses import dataclass, field

from face_attendance.adapters.attendee_client import AttendeeClient
from face_attendance.adapters.storage_client import StorageClient
from face_attendance.domain.auth import AuthFailure, AuthResult, Matched, NotFound
from face_attendance.domain.errors import (
    EncodingError,
    KioskError,
    TransportError,
    UploadError,
)
from face_attendance.domain.images import CapturedImage, UploadKey
from face_attendance.domain.workflow import (
    AUTH_FAILED_MESSAGE,
    AUTHENTICATING_MESSAGE,
    CAMERA_ERROR_MESSAGE,
    CAPTURE_ERROR_MESSAGE,
    NEW_PHOTO_MESSAGE,
    NOT_FOUND_MESSAGE,
    PHOTO_ERROR_MESSAGE,
    SUBMIT_FAILED_MESSAGE,
    UPLOADING_MESSAGE,
    WorkflowPhase,
    WorkflowState,
    matched_message,
)
from face_attendance.services.capture import FrameCapture
from face_attendance.services.media import MediaSession

_logger = logging.getLogger(__name__)


@dataclass
class WorkflowController:
    """Coordinates the camera, capture, upload and authentication steps.

    All user actions go through this object and every one of them leaves
    ``state`` in a defined phase with a non-empty message. Actions that are
    not allowed in the current phase are no-ops.
    """

    media: MediaSession
    frame_capture: FrameCapture
    storage_client: StorageClient
    attendee_client: AttendeeClient
    state: WorkflowState = field(default_factory=WorkflowState)
    _camera_generation: int = field(default=0, init=False, repr=False)
    _camera_starting: bool = field(default=False, init=False, repr=False)

    async def toggle_camera(self) -> WorkflowState:
        """Turn the camera on, or off when it is on or still starting."""
        if self.state.phase is WorkflowPhase.CAMERA_ACTIVE or self._camera_starting:
            self._release_camera()
            self.state = WorkflowState()
            return self.state
        return await self._start_camera()

    async def capture(self) -> WorkflowState:
        """Take a still photo from the live camera and end the preview."""
        source = self.media.frame_source
        if not self.state.can_capture or source is None:
            return self.state
        generation = self._camera_generation
        try:
            image = await self.frame_capture.capture(source)
        except EncodingError as exc:
            _logger.warning("Capture failed: %s", exc)
            if self._camera_is_current(generation):
                self.state = self.state.evolve(message=CAPTURE_ERROR_MESSAGE)
            return self.state
        if not self._camera_is_current(generation):
            _logger.info("Discarding capture from a camera session that ended")
            return self.state
        self._release_camera()
        self.state = _image_ready(image)
        return self.state

    async def use_photo(self, data: bytes) -> WorkflowState:
        """Use a supplied photo file instead of a camera capture."""
        if self.state.phase is WorkflowPhase.SUBMITTING:
            return self.state
        try:
            image = await self.frame_capture.encode_photo(data)
        except EncodingError as exc:
            _logger.warning("Photo rejected: %s", exc)
            if self.state.phase is not WorkflowPhase.SUBMITTING:
                self.state = self.state.evolve(message=PHOTO_ERROR_MESSAGE)
            return self.state
        if self.state.phase is WorkflowPhase.SUBMITTING:
            return self.state
        self._release_camera()
        self.state = _image_ready(image)
        return self.state

    async def submit(self) -> WorkflowState:
        """Upload the held image, then authenticate it.

        A fresh key is generated for every attempt. The outcome is applied only
        while that key is still the pending one, so results of attempts that
        were abandoned in the meantime are dropped.
        """
        state = self.state
        if not state.can_submit or state.image is None:
            return state
        key = UploadKey.generate()
        self.state = state.evolve(
            phase=WorkflowPhase.SUBMITTING,
            message=UPLOADING_MESSAGE,
            result=None,
            pending_key=key,
        )
        phase, message, result = await self._run_submission(state.image, key)
        if self.state.pending_key != key:
            _logger.info("Discarding result of abandoned attempt: key=%s", key)
            return self.state
        self.state = self.state.evolve(
            phase=phase, message=message, result=result, pending_key=None
        )
        return self.state

    async def retry(self) -> WorkflowState:
        """Discard the finished attempt and go back to the camera."""
        if not self.state.can_retry:
            return self.state
        self.state = WorkflowState()
        return await self._start_camera()

    def close(self) -> None:
        """Release the camera and drop any in-flight attempt."""
        self._release_camera()
        if self.state.phase is WorkflowPhase.CAMERA_ACTIVE:
            self.state = WorkflowState()
        elif self.state.phase is WorkflowPhase.SUBMITTING:
            self.state = self.state.evolve(
                phase=WorkflowPhase.FAILED,
                message=SUBMIT_FAILED_MESSAGE,
                pending_key=None,
            )

    async def _start_camera(self) -> WorkflowState:
        self._camera_generation += 1
        generation = self._camera_generation
        self._camera_starting = True
        try:
            await self.media.start()
        except KioskError as exc:
            _logger.warning("Camera unavailable: %s", exc)
            return self._camera_failed(generation)
        except Exception:
            _logger.exception("Camera start failed")
            return self._camera_failed(generation)
        if generation != self._camera_generation:
            self.media.stop()
            return self.state
        self._camera_starting = False
        self.state = WorkflowState(phase=WorkflowPhase.CAMERA_ACTIVE)
        return self.state

    def _camera_failed(self, generation: int) -> WorkflowState:
        if generation == self._camera_generation:
            self._camera_starting = False
            self.state = self.state.evolve(message=CAMERA_ERROR_MESSAGE)
        return self.state

    def _release_camera(self) -> None:
        self._camera_generation += 1
        self._camera_starting = False
        self.media.stop()

    def _camera_is_current(self, generation: int) -> bool:
        return (
            generation == self._camera_generation
            and self.state.phase is WorkflowPhase.CAMERA_ACTIVE
        )

    async def _run_submission(
        self, image: CapturedImage, key: UploadKey
    ) -> tuple[WorkflowPhase, str, AuthResult]:
        try:
            await self.storage_client.upload(image, key)
        except (UploadError, TransportError) as exc:
            _logger.warning("Upload failed: key=%s error=%s", key, exc)
            return WorkflowPhase.FAILED, SUBMIT_FAILED_MESSAGE, AuthFailure(str(exc))
        except Exception as exc:
            _logger.exception("Upload failed: key=%s", key)
            return WorkflowPhase.FAILED, SUBMIT_FAILED_MESSAGE, AuthFailure(str(exc))

        if self.state.pending_key != key:
            return WorkflowPhase.FAILED, SUBMIT_FAILED_MESSAGE, AuthFailure("abandoned")
        self.state = self.state.evolve(message=AUTHENTICATING_MESSAGE)

        try:
            result = await self.attendee_client.authenticate(key)
        except Exception as exc:
            _logger.exception("Authentication failed: key=%s", key)
            result = AuthFailure(str(exc))
        return _outcome(result)


def _image_ready(image: CapturedImage) -> WorkflowState:
    return WorkflowState(
        phase=WorkflowPhase.IMAGE_READY, message=NEW_PHOTO_MESSAGE, image=image
    )


def _outcome(result: AuthResult) -> tuple[WorkflowPhase, str, AuthResult]:
    """Map an authentication outcome to its phase and status message."""
    if isinstance(result, Matched):
        return WorkflowPhase.AUTHENTICATED, matched_message(result), result
    if isinstance(result, NotFound):
        return WorkflowPhase.REJECTED, NOT_FOUND_MESSAGE, result
    return WorkflowPhase.FAILED, AUTH_FAILED_MESSAGE, result
