"""Pydantic models for workflow status responses."""

from pydantic import BaseModel

from face_attendance.domain.auth import Matched
from face_attendance.domain.workflow import WorkflowPhase, WorkflowState


class AttendeeName(BaseModel):
    """Name of the recognized person."""

    first_name: str
    last_name: str


class WorkflowStatus(BaseModel):
    """What the kiosk screen should show and which actions are enabled."""

    phase: WorkflowPhase
    message: str
    is_authenticated: bool
    attendee: AttendeeName | None = None
    has_image: bool
    aspect_ratio: float | None = None
    camera_active: bool
    can_capture: bool
    can_submit: bool
    can_retry: bool

    @classmethod
    def from_state(cls, state: WorkflowState, camera_active: bool) -> "WorkflowStatus":
        """Build a response from a workflow snapshot."""
        attendee = None
        if isinstance(state.result, Matched):
            attendee = AttendeeName(
                first_name=state.result.first_name,
                last_name=state.result.last_name,
            )
        return cls(
            phase=state.phase,
            message=state.message,
            is_authenticated=state.is_authenticated,
            attendee=attendee,
            has_image=state.image is not None,
            aspect_ratio=state.image.aspect_ratio if state.image else None,
            camera_active=camera_active,
            can_capture=state.can_capture,
            can_submit=state.can_submit,
            can_retry=state.can_retry,
        )
