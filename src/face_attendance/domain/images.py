"""Models for captured images and their storage keys."""

from dataclasses import dataclass, field
from uuid import UUID, uuid4

JPEG_MIME_TYPE = "image/jpeg"
JPEG_EXTENSION = ".jpeg"


@dataclass(frozen=True)
class CapturedImage:
    """Encoded still image ready for submission."""

    data: bytes = field(repr=False)
    width: int
    height: int
    mime_type: str = JPEG_MIME_TYPE

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height of the source frame."""
        return self.width / self.height


@dataclass(frozen=True)
class UploadKey:
    """Identifier shared by the stored object and the authentication lookup."""

    value: UUID

    @classmethod
    def generate(cls) -> "UploadKey":
        """Create a fresh random key."""
        return cls(uuid4())

    @property
    def object_name(self) -> str:
        return f"{self.value}{JPEG_EXTENSION}"

    def __str__(self) -> str:
        return str(self.value)
