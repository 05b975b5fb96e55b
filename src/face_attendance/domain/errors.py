"""Errors raised along the capture and authentication pipeline."""


class KioskError(Exception):
    """Base error for the attendance kiosk."""


class DeviceError(KioskError):
    """Camera is unavailable or access was denied."""


class EncodingError(KioskError):
    """A frame could not be turned into a JPEG image."""


class TransportError(KioskError):
    """The network layer failed before a response arrived."""


class UploadError(KioskError):
    """Storage rejected the image upload."""

    def __init__(self, status: int) -> None:
        super().__init__(f"Upload failed with status: {status}")
        self.status = status


class AuthError(KioskError):
    """Authentication endpoint answered with an unexpected status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"Authentication failed with status: {status}")
        self.status = status
