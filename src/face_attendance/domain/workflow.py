"""Workflow phases and the state snapshot shown to the user."""

from dataclasses import dataclass, replace
from enum import StrEnum

from face_attendance.domain.auth import AuthResult, Matched
from face_attendance.domain.images import CapturedImage, UploadKey

INITIAL_MESSAGE = "Please upload an image to authenticate."
NEW_PHOTO_MESSAGE = "Please authenticate with your new photo."
UPLOADING_MESSAGE = "Uploading image..."
AUTHENTICATING_MESSAGE = "Image uploaded. Authenticating..."
NOT_FOUND_MESSAGE = "Person not found in the system. Please register first."
AUTH_FAILED_MESSAGE = "Sorry, we could not authenticate you. Please try again."
SUBMIT_FAILED_MESSAGE = "An error occurred. Please try again."
CAMERA_ERROR_MESSAGE = (
    "Could not access the camera. Check that it is connected and allowed."
)
CAPTURE_ERROR_MESSAGE = "The camera is not ready yet. Please try again in a moment."
PHOTO_ERROR_MESSAGE = "That file could not be read as an image. Please try another."


class WorkflowPhase(StrEnum):
    """Discrete stage of the capture-authenticate process."""

    IDLE = "idle"
    CAMERA_ACTIVE = "camera_active"
    IMAGE_READY = "image_ready"
    SUBMITTING = "submitting"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    FAILED = "failed"


TERMINAL_PHASES = frozenset(
    {WorkflowPhase.AUTHENTICATED, WorkflowPhase.REJECTED, WorkflowPhase.FAILED}
)


@dataclass(frozen=True)
class WorkflowState:
    """Single snapshot of the workflow."""

    phase: WorkflowPhase = WorkflowPhase.IDLE
    message: str = INITIAL_MESSAGE
    image: CapturedImage | None = None
    result: AuthResult | None = None
    pending_key: UploadKey | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.phase is WorkflowPhase.AUTHENTICATED and isinstance(
            self.result, Matched
        )

    @property
    def can_capture(self) -> bool:
        return self.phase is WorkflowPhase.CAMERA_ACTIVE

    @property
    def can_submit(self) -> bool:
        """Submission needs an image that is not already in flight.

        A failed attempt keeps its image so it can be sent again.
        """
        if self.image is None:
            return False
        return self.phase in {WorkflowPhase.IMAGE_READY, WorkflowPhase.FAILED}

    @property
    def can_retry(self) -> bool:
        return self.phase in TERMINAL_PHASES

    def evolve(self, **changes: object) -> "WorkflowState":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def matched_message(result: Matched) -> str:
    """Build the greeting for a recognized person."""
    return f"Hi! {result.full_name}, you are authenticated successfully!"
