"""ASGI entrypoint for the attendance kiosk API."""

from face_attendance.api.app import create_app
from face_attendance.containers import build_container

app = create_app(build_container())
