"""POST /api/clips and GET /api/clips/download."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from app.main import app
from services.clip_extractor import ClipExtractor, get_clip_extractor
from services.twelvelabs import TwelveLabsClient, get_twelvelabs_client


async def _ok_runner(args: list[str]) -> tuple[int, str]:
    Path(args[-1]).write_bytes(b"fake mp4")
    return 0, ""


def _video_payload(stream_url: str | None) -> dict:
    payload = {"_id": "vid-1", "system_metadata": {"filename": "talk.mp4", "duration": 60.0}}
    if stream_url:
        payload["hls"] = {"video_url": stream_url}
    return payload


@pytest.fixture()
def extractor(tmp_path: Path) -> Iterator[ClipExtractor]:
    extractor = ClipExtractor(output_dir=tmp_path, runner=_ok_runner, ffmpeg_binary="ffmpeg")
    app.dependency_overrides[get_clip_extractor] = lambda: extractor
    with patch.dict("os.environ", {"TWELVE_LABS_INDEX_ID": "idx-1"}):
        yield extractor
    app.dependency_overrides.clear()


def _use_video(payload: dict) -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    client = TwelveLabsClient("tl-key", base_url="https://tl.test/v1.3", transport=transport)
    app.dependency_overrides[get_twelvelabs_client] = lambda: client


def _http() -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio
async def test_generate_clips_reports_each_segment(extractor: ClipExtractor) -> None:
    _use_video(_video_payload("https://cdn.test/vid-1.m3u8"))
    async with _http() as client:
        response = await client.post(
            "/api/clips",
            json={
                "videoId": "vid-1",
                "segments": [{"id": "s1", "start": 2, "end": 5}, {"id": "s2", "start": 7, "end": 7}],
            },
        )
    assert response.status_code == 200
    body = response.json()
    assert body["totalClips"] == 2
    assert body["successfulClips"] == 1
    assert body["failedClips"] == 1
    first, second = body["data"]
    assert first["id"] == "s1"
    assert first["downloadUrl"].startswith("/api/clips/download?file=clip_1_")
    assert first["strategy"] == "reencode_silent_audio"
    assert second["error"] == "End time must be after start time."


@pytest.mark.anyio
@pytest.mark.parametrize("end", ["NaN", "Infinity"])
async def test_generate_clips_rejects_non_finite_bounds(extractor: ClipExtractor, end: str) -> None:
    _use_video(_video_payload("https://cdn.test/vid-1.m3u8"))
    body = '{"videoId": "vid-1", "segments": [{"id": "x", "start": 0, "end": %s}]}' % end
    async with _http() as client:
        response = await client.post(
            "/api/clips", content=body, headers={"content-type": "application/json"}
        )
    assert response.status_code == 422
    assert list(extractor.output_dir.iterdir()) == []


@pytest.mark.anyio
async def test_generate_clips_requires_stream(extractor: ClipExtractor) -> None:
    _use_video(_video_payload(None))
    async with _http() as client:
        response = await client.post(
            "/api/clips", json={"videoId": "vid-1", "segments": [{"start": 0, "end": 3}]}
        )
    assert response.status_code == 400
    assert response.json()["error"] == "Video HLS stream not available for clip generation."


@pytest.mark.anyio
async def test_download_serves_generated_clip(extractor: ClipExtractor) -> None:
    (extractor.output_dir / "clip_1_0.0s-3.0s_abcd1234.mp4").write_bytes(b"fake mp4")
    async with _http() as client:
        response = await client.get("/api/clips/download", params={"file": "clip_1_0.0s-3.0s_abcd1234.mp4"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "video/mp4"
    assert response.content == b"fake mp4"


@pytest.mark.anyio
async def test_download_missing_file_is_404(extractor: ClipExtractor) -> None:
    async with _http() as client:
        response = await client.get("/api/clips/download", params={"file": "nope.mp4"})
    assert response.status_code == 404
    assert response.json()["error"] == "File not found."


@pytest.mark.anyio
@pytest.mark.parametrize("name", ["../../etc/passwd", "..%2F..%2Fetc%2Fpasswd", "sub/clip.mp4"])
async def test_download_rejects_traversal(extractor: ClipExtractor, name: str) -> None:
    async with _http() as client:
        response = await client.get(f"/api/clips/download?file={name}")
    assert response.status_code == 400
