"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Response, status

from face_attendance.api.status_models import WorkflowStatus
from face_attendance.app_logging import configure_logging
from face_attendance.containers import AppContainer
from face_attendance.domain.errors import EncodingError
from face_attendance.domain.images import JPEG_MIME_TYPE


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            logger.info("Shutting down, releasing camera")
            await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/status")
    async def workflow_status(request: Request) -> WorkflowStatus:
        """Return the current workflow state."""
        return _status(request.app.state.container)

    @app.post("/camera/toggle")
    async def toggle_camera(request: Request) -> WorkflowStatus:
        """Turn the camera on or off."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.toggle_camera()
        return _status(state_container)

    @app.post("/capture")
    async def capture(request: Request) -> WorkflowStatus:
        """Take a photo from the live camera."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.capture()
        return _status(state_container)

    @app.post("/submit")
    async def submit(request: Request) -> WorkflowStatus:
        """Upload the photo and authenticate it."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.submit()
        return _status(state_container)

    @app.post("/retry")
    async def retry(request: Request) -> WorkflowStatus:
        """Discard the last attempt and reopen the camera."""
        state_container: AppContainer = request.app.state.container
        await state_container.workflow.retry()
        return _status(state_container)

    @app.post("/photo")
    async def upload_photo(request: Request) -> WorkflowStatus:
        """Use the request body as the photo instead of a camera capture."""
        state_container: AppContainer = request.app.state.container
        data = await request.body()
        await state_container.workflow.use_photo(data)
        return _status(state_container)

    @app.get("/photo")
    async def photo(request: Request) -> Response:
        """Return the photo held by the workflow."""
        state_container: AppContainer = request.app.state.container
        image = state_container.workflow.state.image
        if image is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return Response(content=image.data, media_type=image.mime_type)

    @app.get("/camera/frame")
    async def camera_frame(request: Request) -> Response:
        """Return the current live camera frame for preview."""
        state_container: AppContainer = request.app.state.container
        source = state_container.media_session.frame_source
        if source is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT, detail="Camera is off."
            )
        try:
            frame = await state_container.frame_capture.capture(source)
        except EncodingError as exc:
            logger.warning("Preview frame unavailable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Camera is not ready yet.",
            ) from exc
        return Response(content=frame.data, media_type=JPEG_MIME_TYPE)

    return app


def _status(state_container: AppContainer) -> WorkflowStatus:
    return WorkflowStatus.from_state(
        state_container.workflow.state,
        camera_active=state_container.media_session.is_active,
    )
