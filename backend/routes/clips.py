"""Clip extraction + download API."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from pydantic import Field

from models import CamelModel, ClipRequest
from services.clip_extractor import ClipExtractor, get_clip_extractor, resolve_clip_path
from services.errors import InvalidInputError, NotFoundError
from services.settings import get_index_id
from services.twelvelabs import TwelveLabsClient, get_twelvelabs_client

router = APIRouter(tags=["clips"])
logger = logging.getLogger(__name__)


class ClipSegment(CamelModel):
    id: str | None = None
    start: float = Field(ge=0, allow_inf_nan=False)
    end: float = Field(allow_inf_nan=False)


class GenerateClipsRequest(CamelModel):
    video_id: str = Field(min_length=1)
    segments: list[ClipSegment] = Field(min_length=1)


class ClipResultResponse(CamelModel):
    id: str | None = None
    file_name: str
    download_url: str
    message: str
    error: str | None = None
    strategy: str | None = None


class GenerateClipsResponse(CamelModel):
    """Per-item outcome: the call succeeds even when some clips carry an error."""

    message: str
    video_id: str
    data: list[ClipResultResponse]
    total_clips: int
    successful_clips: int
    failed_clips: int


@router.post("/clips", response_model=GenerateClipsResponse)
async def generate_clips(
    body: GenerateClipsRequest,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
    extractor: ClipExtractor = Depends(get_clip_extractor),
) -> GenerateClipsResponse:
    """Cut each requested range out of the indexed video's stream."""
    logger.info("[clips] Generating %d clips for video %s", len(body.segments), body.video_id)
    details = await client.get_video(get_index_id(), body.video_id)
    if not details.stream_url:
        raise InvalidInputError(
            "Video HLS stream not available for clip generation.",
            details="The video must have an HLS stream URL to generate clips.",
        )

    def report(current: int, total: int) -> None:
        logger.info("[clips] Progress %d/%d for video %s", current, total, body.video_id)

    requests = [ClipRequest(start=s.start, end=s.end, id=s.id) for s in body.segments]
    results = await extractor.extract_batch(details.stream_url, requests, progress=report)
    successful = sum(1 for r in results if r.ok)
    failed = len(results) - successful
    return GenerateClipsResponse(
        message=f"Clip generation complete. {successful} successful, {failed} failed.",
        video_id=body.video_id,
        data=[ClipResultResponse(**asdict(r)) for r in results],
        total_clips=len(results),
        successful_clips=successful,
        failed_clips=failed,
    )


@router.get("/clips/download")
def download_clip(
    file: str = Query("", description="Clip file name as returned in downloadUrl"),
    extractor: ClipExtractor = Depends(get_clip_extractor),
) -> FileResponse:
    path = resolve_clip_path(file, extractor.output_dir)
    if not path.is_file():
        raise NotFoundError("File not found.", details=file)
    logger.info("[clips] Serving %s", path.name)
    return FileResponse(path, media_type="video/mp4", filename=path.name)
