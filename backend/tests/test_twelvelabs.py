"""Twelve Labs adapter against httpx.MockTransport."""

import json

import httpx
import pytest

from models import TaskStatus
from services.errors import InvalidInputError, TransportError, VendorError
from services.twelvelabs import TwelveLabsClient, map_task_status, task_from_payload

BASE_URL = "https://tl.test/v1.3"


def _client(handler) -> TwelveLabsClient:
    return TwelveLabsClient("tl-key", base_url=BASE_URL, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("validating", TaskStatus.PENDING),
        ("pending", TaskStatus.PENDING),
        ("queued", TaskStatus.PENDING),
        ("indexing", TaskStatus.PROCESSING),
        ("ready", TaskStatus.READY),
        ("failed", TaskStatus.FAILED),
        ("something-new", TaskStatus.PROCESSING),
        (None, TaskStatus.PROCESSING),
    ],
)
def test_map_task_status(raw, expected) -> None:
    assert map_task_status(raw) is expected


def test_ready_without_video_id_is_still_processing() -> None:
    task = task_from_payload({"_id": "task-1", "status": "ready"})
    assert task.status is TaskStatus.PROCESSING
    assert task.result_video_id is None


def test_video_id_dropped_until_ready() -> None:
    task = task_from_payload({"_id": "task-1", "status": "indexing", "video_id": "vid-1"})
    assert task.status is TaskStatus.PROCESSING
    assert task.result_video_id is None

    ready = task_from_payload({"_id": "task-1", "status": "ready", "video_id": "vid-1"})
    assert ready.result_video_id == "vid-1"


def test_task_created_at_parsed() -> None:
    task = task_from_payload({"_id": "t", "status": "pending", "created_at": "2024-05-01T10:00:00Z"})
    assert task.created_at.year == 2024
    assert task.created_at.tzinfo is not None


@pytest.mark.anyio
async def test_create_task_posts_multipart_with_api_key() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"_id": "task-42"})

    task_id = await _client(handler).create_task("idx-1", "talk.mp4", b"\x00\x01", "video/mp4")

    assert task_id == "task-42"
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/v1.3/tasks"
    assert request.headers["x-api-key"] == "tl-key"
    body = request.read()
    assert b'name="index_id"' in body
    assert b"idx-1" in body
    assert b'filename="talk.mp4"' in body


@pytest.mark.anyio
async def test_create_task_without_id_is_vendor_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"status": "pending"}))
    with pytest.raises(VendorError):
        await client.create_task("idx-1", "talk.mp4", b"\x00", "video/mp4")


@pytest.mark.anyio
async def test_search_sends_filter_and_options() -> None:
    seen: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.read())
        return httpx.Response(
            200,
            json={
                "data": [
                    {"score": 91.2, "start": 12.0, "end": 18.5, "confidence": "high", "video_id": "vid-1"},
                    {"score": 70.0, "start": 40.0, "end": 44.0, "confidence": "medium", "video_id": "vid-1"},
                ]
            },
        )

    hits = await _client(handler).search("idx-1", "vid-1", "pricing slide", ["visual"])

    assert [h.start for h in hits] == [12.0, 40.0]
    assert hits[0].confidence == "high"
    body = seen[0]
    assert b'name="query_text"' in body
    assert b"pricing slide" in body
    assert json.dumps({"id": ["vid-1"]}).encode() in body
    assert body.count(b'name="search_options"') == 1


@pytest.mark.anyio
async def test_search_rejects_unknown_option_before_calling_vendor() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("vendor must not be called")

    with pytest.raises(InvalidInputError):
        await _client(handler).search("idx-1", "vid-1", "q", ["smell"])


@pytest.mark.anyio
async def test_search_without_data_list_is_vendor_error() -> None:
    client = _client(lambda request: httpx.Response(200, json={"results": []}))
    with pytest.raises(VendorError):
        await client.search("idx-1", "vid-1", "q")


@pytest.mark.anyio
async def test_vendor_status_is_normalized() -> None:
    client = _client(lambda request: httpx.Response(404, json={"message": "video not found"}))
    with pytest.raises(VendorError) as excinfo:
        await client.get_video("idx-1", "missing")
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == "Twelve Labs API error (404): video not found"


@pytest.mark.anyio
async def test_connection_failure_is_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        await _client(handler).retrieve_task("task-1")


@pytest.mark.anyio
async def test_get_video_maps_stream_and_metadata() -> None:
    payload = {
        "_id": "vid-1",
        "system_metadata": {"filename": "talk.mp4", "duration": 120.5, "width": 1920, "height": 1080},
        "hls": {"video_url": "https://cdn.test/vid-1.m3u8", "thumbnail_urls": ["https://cdn.test/t.jpg"]},
        "created_at": "2024-05-01T10:00:00Z",
    }
    details = await _client(lambda request: httpx.Response(200, json=payload)).get_video("idx-1", "vid-1")
    assert details.video_id == "vid-1"
    assert details.stream_url == "https://cdn.test/vid-1.m3u8"
    assert details.width == 1920
    assert details.thumbnail_urls == ["https://cdn.test/t.jpg"]


@pytest.mark.anyio
async def test_summarize_requires_id_and_summary() -> None:
    good = _client(lambda request: httpx.Response(200, json={"id": "sum-1", "summary": "A talk."}))
    summary = await good.summarize("vid-1", prompt="Summarize", temperature=0.3)
    assert summary.job_id == "sum-1"
    assert summary.summary == "A talk."

    bad = _client(lambda request: httpx.Response(200, json={"id": "sum-1"}))
    with pytest.raises(VendorError):
        await bad.summarize("vid-1")
