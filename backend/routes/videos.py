"""Read-only video API: listing, details, search, summaries and clip suggestions."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import Field

from models import CamelModel
from services.errors import InvalidInputError
from services.insights import ANALYSIS_PROMPT, ANALYSIS_TEMPERATURE, extract_insights
from services.settings import get_index_id
from services.twelvelabs import MAX_LIST_PAGE_LIMIT, TwelveLabsClient, get_twelvelabs_client

router = APIRouter(tags=["videos"])
logger = logging.getLogger(__name__)


class VideoDetailsResponse(CamelModel):
    video_id: str
    filename: str | None = None
    duration: float | None = None
    width: int | None = None
    height: int | None = None
    stream_url: str | None = None
    thumbnail_urls: list[str] = Field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
    indexed_at: str | None = None


class SearchRequest(CamelModel):
    query: str = Field(min_length=1)
    search_options: list[Literal["visual", "audio"]] | None = None


class SearchHitResponse(CamelModel):
    score: float
    start: float
    end: float
    confidence: str
    thumbnail_url: str | None = None
    video_id: str | None = None


class SearchResponse(CamelModel):
    message: str
    query: str
    video_id: str
    data: list[SearchHitResponse]


class SummaryRequest(CamelModel):
    prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=1.0)


class SummaryResponse(CamelModel):
    id: str
    summary: str


class InsightsResponse(CamelModel):
    content_type: str
    key_topics: list[str]
    suggested_clips: list[str]
    has_quotes: bool
    has_visual_elements: bool
    estimated_clip_count: int


class Analysis(CamelModel):
    summary: str
    video_id: str
    analyzed_at: datetime
    insights: InsightsResponse


class AnalysisResponse(CamelModel):
    success: bool = True
    analysis: Analysis


@router.get("/videos")
async def list_videos(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_LIST_PAGE_LIMIT),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_option: Literal["asc", "desc"] = Query("desc", alias="sortOption"),
    index_id: str | None = Query(None, alias="indexId"),
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> dict[str, Any]:
    """Videos that finished indexing, passed through as the vendor pages them."""
    return await client.list_videos(
        get_index_id(index_id),
        page=page,
        page_limit=limit,
        sort_by=sort_by,
        sort_option=sort_option,
    )


@router.get("/videos/{video_id}", response_model=VideoDetailsResponse)
async def get_video_details(
    video_id: str,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> VideoDetailsResponse:
    details = await client.get_video(get_index_id(), video_id)
    return VideoDetailsResponse(**asdict(details))


@router.post("/videos/{video_id}/search", response_model=SearchResponse)
async def search_video(
    video_id: str,
    body: SearchRequest,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> SearchResponse:
    """Find scored time ranges in one video matching a free-text query."""
    query = body.query.strip()
    if not query:
        raise InvalidInputError("Search query is required.")
    logger.info("[videos] Searching video %s for %r", video_id, query)
    hits = await client.search(get_index_id(), video_id, query, list(body.search_options or []) or None)
    logger.info("[videos] Found %d search results for %r", len(hits), query)
    return SearchResponse(
        message="Video search completed successfully.",
        query=query,
        video_id=video_id,
        data=[SearchHitResponse(**asdict(hit)) for hit in hits],
    )


@router.post("/videos/{video_id}/summary", response_model=SummaryResponse)
async def summarize_video(
    video_id: str,
    body: SummaryRequest | None = None,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> SummaryResponse:
    body = body or SummaryRequest()
    summary = await client.summarize(video_id, prompt=body.prompt, temperature=body.temperature)
    return SummaryResponse(id=summary.job_id, summary=summary.summary)


@router.post("/videos/{video_id}/analysis", response_model=AnalysisResponse)
async def analyze_video(
    video_id: str,
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> AnalysisResponse:
    """Summarize with a fixed analysis prompt and derive clip suggestions from the text."""
    logger.info("[videos] Analyzing video %s", video_id)
    summary = await client.summarize(video_id, prompt=ANALYSIS_PROMPT, temperature=ANALYSIS_TEMPERATURE)
    insights = extract_insights(summary.summary)
    return AnalysisResponse(
        analysis=Analysis(
            summary=summary.summary,
            video_id=video_id,
            analyzed_at=datetime.now(timezone.utc),
            insights=InsightsResponse(**asdict(insights)),
        )
    )
