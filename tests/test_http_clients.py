"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from face_attendance.adapters.attendee_client import HttpxAttendeeClient
from face_attendance.adapters.storage_client import HttpxStorageClient
from face_attendance.domain.auth import AuthFailure, Matched, NotFound
from face_attendance.domain.errors import TransportError, UploadError
from face_attendance.domain.images import CapturedImage, UploadKey

IMAGE = CapturedImage(data=b"\xff\xd8\xffjpeg-bytes", width=640, height=480)


def _storage_client(handler) -> HttpxStorageClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxStorageClient(
        base_url="https://gateway.test/prod",
        bucket_path="attendance-images",
        http_client=httpx.AsyncClient(transport=transport),
    )


def _attendee_client(handler) -> HttpxAttendeeClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxAttendeeClient(
        base_url="https://gateway.test/prod",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_storage_client_puts_jpeg_at_bucket_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    key = UploadKey.generate()
    client = _storage_client(handler)

    asyncio.run(client.upload(IMAGE, key))

    request = seen[0]
    assert request.method == "PUT"
    assert str(request.url) == (
        f"https://gateway.test/prod/attendance-images/{key.value}.jpeg"
    )
    assert request.headers["Content-Type"] == "image/jpeg"
    assert request.content == IMAGE.data


def test_storage_client_raises_on_error_status() -> None:
    client = _storage_client(lambda request: httpx.Response(500))

    with pytest.raises(UploadError) as excinfo:
        asyncio.run(client.upload(IMAGE, UploadKey.generate()))

    assert excinfo.value.status == 500


def test_storage_client_wraps_network_failures() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _storage_client(handler)

    with pytest.raises(TransportError):
        asyncio.run(client.upload(IMAGE, UploadKey.generate()))


def test_attendee_client_sends_object_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={"Message": "Success", "firstName": "Ana", "lastName": "Lee"},
        )

    key = UploadKey.generate()
    client = _attendee_client(handler)

    result = asyncio.run(client.authenticate(key))

    assert result == Matched(first_name="Ana", last_name="Lee")
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/prod/attendee"
    assert request.url.params["objectKey"] == f"{key.value}.jpeg"
    assert request.headers["Accept"] == "application/json"
    assert request.headers["Content-Type"] == "application/json"


def test_attendee_client_accepts_success_flag() -> None:
    client = _attendee_client(
        lambda request: httpx.Response(
            200, json={"success": True, "firstName": "Ana", "lastName": "Lee"}
        )
    )

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert result == Matched(first_name="Ana", last_name="Lee")


def test_attendee_client_maps_forbidden_to_not_found() -> None:
    client = _attendee_client(lambda request: httpx.Response(403, text="denied"))

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert result == NotFound()


def test_attendee_client_maps_not_found_message() -> None:
    client = _attendee_client(
        lambda request: httpx.Response(200, json={"Message": "NotFound"})
    )

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert result == NotFound()


def test_attendee_client_reports_error_status() -> None:
    client = _attendee_client(lambda request: httpx.Response(502))

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert isinstance(result, AuthFailure)
    assert "502" in result.detail


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, json={"Message": "Success", "firstName": "Ana"}),
        httpx.Response(200, json={"Message": "Failed"}),
    ],
)
def test_attendee_client_rejects_unexpected_bodies(response: httpx.Response) -> None:
    client = _attendee_client(lambda request: response)

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert isinstance(result, AuthFailure)


def test_attendee_client_never_raises_on_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = _attendee_client(handler)

    result = asyncio.run(client.authenticate(UploadKey.generate()))

    assert isinstance(result, AuthFailure)
