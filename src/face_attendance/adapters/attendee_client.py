"""Attendee lookup client for the face authentication backend."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError

from face_attendance.domain.auth import (
    AttendeeResponse,
    AuthFailure,
    AuthResult,
    Matched,
    NotFound,
)
from face_attendance.domain.errors import AuthError, TransportError
from face_attendance.domain.images import UploadKey

_logger = logging.getLogger(__name__)

NOT_FOUND_STATUS = 403
NOT_FOUND_MESSAGE = "NotFound"


class AttendeeClient(Protocol):
    """Interface for looking up the person in an uploaded image."""

    async def authenticate(self, key: UploadKey) -> AuthResult:
        """Return the outcome of the lookup. Never raises."""


@dataclass
class HttpxAttendeeClient(AttendeeClient):
    """Queries the attendee endpoint with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 15.0) -> "HttpxAttendeeClient":
        """Create an attendee client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def authenticate(self, key: UploadKey) -> AuthResult:
        """Look up the uploaded image and interpret the backend's answer."""
        try:
            result = await self._lookup(key)
        except (AuthError, TransportError) as exc:
            _logger.warning("Authentication failed: key=%s error=%s", key, exc)
            return AuthFailure(str(exc))
        _logger.info(
            "Authentication finished: key=%s result=%s", key, type(result).__name__
        )
        return result

    async def _lookup(self, key: UploadKey) -> AuthResult:
        url = f"{self.base_url.rstrip('/')}/attendee"
        try:
            response = await self.http_client.get(
                url,
                params={"objectKey": key.object_name},
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Authentication request failed: {exc}") from exc
        if response.status_code == NOT_FOUND_STATUS:
            return NotFound()
        if not response.is_success:
            raise AuthError(response.status_code)
        return _interpret(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _interpret(response: httpx.Response) -> AuthResult:
    """Map a success-status body onto an outcome."""
    try:
        payload = AttendeeResponse.model_validate(response.json())
    except (ValueError, ValidationError):
        return AuthFailure("unexpected response body")
    if payload.is_success and payload.first_name and payload.last_name:
        return Matched(first_name=payload.first_name, last_name=payload.last_name)
    if payload.message == NOT_FOUND_MESSAGE:
        return NotFound()
    return AuthFailure("unexpected response body")
