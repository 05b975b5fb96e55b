"""Object storage client for captured images."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from face_attendance.domain.errors import TransportError, UploadError
from face_attendance.domain.images import CapturedImage, UploadKey

_logger = logging.getLogger(__name__)


class StorageClient(Protocol):
    """Interface for storing captured images."""

    async def upload(self, image: CapturedImage, key: UploadKey) -> None:
        """Store the image under the key or raise UploadError/TransportError."""


@dataclass
class HttpxStorageClient(StorageClient):
    """Uploads images with an HTTP PUT through the API gateway."""

    base_url: str
    bucket_path: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(
        cls, base_url: str, bucket_path: str, timeout: float = 15.0
    ) -> "HttpxStorageClient":
        """Create a storage client with a managed httpx session."""
        return cls(
            base_url=base_url,
            bucket_path=bucket_path,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def object_url(self, key: UploadKey) -> str:
        base = self.base_url.rstrip("/")
        bucket = self.bucket_path.strip("/")
        return f"{base}/{bucket}/{key.object_name}"

    async def upload(self, image: CapturedImage, key: UploadKey) -> None:
        """PUT the JPEG bytes at {base_url}/{bucket_path}/{key}.jpeg."""
        try:
            response = await self.http_client.put(
                self.object_url(key),
                content=image.data,
                headers={"Content-Type": image.mime_type},
                timeout=self.timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"Upload request failed: {exc}") from exc
        if not response.is_success:
            raise UploadError(response.status_code)
        _logger.info("Image uploaded: key=%s bytes=%s", key, len(image.data))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
