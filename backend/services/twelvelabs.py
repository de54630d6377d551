"""Twelve Labs REST adapter: task upload/polling, video details, search, summarize.

Thin request/response mapping. Every non-2xx answer raises VendorError, every
connection failure raises TransportError; nothing here retries.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

import httpx

from models import SEARCH_OPTIONS, SearchHit, TaskStatus, UploadTask, VideoDetails, VideoSummary
from services.errors import InvalidInputError, TransportError, VendorError, raise_for_vendor_status
from services.settings import get_twelve_labs_api_key, get_twelve_labs_base_url

logger = logging.getLogger(__name__)

VENDOR = "Twelve Labs"
SEARCH_PAGE_LIMIT = 50
MAX_LIST_PAGE_LIMIT = 50
DEFAULT_TIMEOUT = httpx.Timeout(30.0, read=120.0, write=600.0)

# Vendor task vocabulary -> our four states.
_STATUS_MAP: dict[str, TaskStatus] = {
    "validating": TaskStatus.PENDING,
    "pending": TaskStatus.PENDING,
    "queued": TaskStatus.PENDING,
    "indexing": TaskStatus.PROCESSING,
    "processing": TaskStatus.PROCESSING,
    "ready": TaskStatus.READY,
    "failed": TaskStatus.FAILED,
    "error": TaskStatus.FAILED,
}


def map_task_status(raw: str | None) -> TaskStatus:
    status = _STATUS_MAP.get((raw or "").strip().lower())
    if status is None:
        logger.warning("[twelvelabs] Unknown task status %r; reporting processing.", raw)
        return TaskStatus.PROCESSING
    return status


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def task_from_payload(payload: dict[str, Any], *, fallback_created_at: datetime | None = None) -> UploadTask:
    """Build an UploadTask from a vendor task body, keeping the ready <=> video id invariant."""
    task_id = payload.get("_id") or payload.get("id")
    if not task_id:
        raise VendorError("Task ID not found in Twelve Labs response.", vendor_payload=payload, vendor=VENDOR)
    status = map_task_status(payload.get("status"))
    video_id = payload.get("video_id") or payload.get("videoId") or None
    if status is TaskStatus.READY and not video_id:
        logger.warning("[twelvelabs] Task %s reported ready without a video id; still processing.", task_id)
        status = TaskStatus.PROCESSING
    kwargs: dict[str, Any] = {
        "task_id": str(task_id),
        "status": status,
        "result_video_id": str(video_id) if status is TaskStatus.READY else None,
    }
    created_at = _parse_datetime(payload.get("created_at")) or fallback_created_at
    if created_at is not None:
        kwargs["created_at"] = created_at
    return UploadTask(**kwargs)


def details_from_payload(payload: dict[str, Any]) -> VideoDetails:
    metadata = payload.get("system_metadata") or payload.get("metadata") or {}
    hls = payload.get("hls") or {}
    return VideoDetails(
        video_id=str(payload.get("_id") or payload.get("id") or ""),
        filename=metadata.get("filename"),
        duration=metadata.get("duration"),
        width=metadata.get("width"),
        height=metadata.get("height"),
        stream_url=hls.get("video_url"),
        thumbnail_urls=list(hls.get("thumbnail_urls") or []),
        created_at=payload.get("created_at"),
        updated_at=payload.get("updated_at"),
        indexed_at=payload.get("indexed_at"),
    )


def hit_from_payload(payload: dict[str, Any]) -> SearchHit:
    return SearchHit(
        score=float(payload.get("score") or 0.0),
        start=float(payload.get("start") or 0.0),
        end=float(payload.get("end") or 0.0),
        confidence=str(payload.get("confidence") or ""),
        thumbnail_url=payload.get("thumbnail_url"),
        video_id=payload.get("video_id"),
    )


class TwelveLabsClient:
    """
    Async client for the Twelve Labs v1.3 REST API.

    :param api_key: sent as ``x-api-key``
    :param base_url: API root, e.g. "https://api.twelvelabs.io/v1.3"
    :param transport: optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"x-api-key": self._api_key, **kwargs.pop("headers", {})}
        async with httpx.AsyncClient(
            base_url=self._base_url, transport=self._transport, timeout=self._timeout
        ) as client:
            try:
                response = await client.request(method, path, headers=headers, **kwargs)
            except httpx.TransportError as exc:
                logger.error("[twelvelabs] %s %s unreachable: %s", method, path, exc)
                raise TransportError(
                    f"No response received from {VENDOR}.", details=type(exc).__name__
                ) from exc
        raise_for_vendor_status(response, vendor=VENDOR)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise VendorError(
                f"{VENDOR} returned a non-JSON body.", status=response.status_code, vendor=VENDOR
            ) from exc

    async def create_task(self, index_id: str, filename: str, data: bytes, content_type: str) -> str:
        """Upload a video file into an index; returns the vendor task id."""
        logger.info("[twelvelabs] Uploading %r (%d bytes) to index %s", filename, len(data), index_id)
        response = await self._request(
            "POST",
            "/tasks",
            data={"index_id": index_id, "enable_video_stream": "true"},
            files={"video_file": (filename, data, content_type)},
        )
        payload = self._json(response)
        task_id = payload.get("_id") if isinstance(payload, dict) else None
        if not task_id:
            raise VendorError(
                "Task ID not found in Twelve Labs API response.", vendor_payload=payload, vendor=VENDOR
            )
        return str(task_id)

    async def retrieve_task(self, task_id: str) -> dict[str, Any]:
        response = await self._request("GET", f"/tasks/{task_id}")
        return self._json(response)

    async def delete_task(self, task_id: str) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def list_videos(
        self,
        index_id: str,
        *,
        page: int = 1,
        page_limit: int = 10,
        sort_by: str = "created_at",
        sort_option: str = "desc",
    ) -> dict[str, Any]:
        """List tasks that finished indexing (status=ready), newest first by default."""
        params = {
            "index_id": index_id,
            "status": "ready",
            "page": page,
            "page_limit": min(page_limit, MAX_LIST_PAGE_LIMIT),
            "sort_by": sort_by,
            "sort_option": sort_option,
        }
        response = await self._request("GET", "/tasks", params=params)
        return self._json(response)

    async def get_video(self, index_id: str, video_id: str) -> VideoDetails:
        response = await self._request("GET", f"/indexes/{index_id}/videos/{video_id}")
        return details_from_payload(self._json(response))

    async def search(
        self,
        index_id: str,
        video_id: str,
        query: str,
        search_options: list[str] | None = None,
        *,
        page_limit: int = SEARCH_PAGE_LIMIT,
    ) -> list[SearchHit]:
        """Search one video of the index; results keep the vendor's ranking."""
        options = list(search_options or SEARCH_OPTIONS)
        unknown = [o for o in options if o not in SEARCH_OPTIONS]
        if unknown:
            raise InvalidInputError(
                f"Unsupported search options: {unknown}",
                details=f"searchOptions must be drawn from {list(SEARCH_OPTIONS)}",
            )
        # Multipart form fields without filenames; search_options repeats.
        fields: list[tuple[str, tuple[None, str]]] = [
            ("index_id", (None, index_id)),
            ("query_text", (None, query)),
            ("filter", (None, json.dumps({"id": [video_id]}))),
            ("page_limit", (None, str(page_limit))),
        ]
        fields.extend(("search_options", (None, option)) for option in options)
        response = await self._request("POST", "/search", files=fields)
        payload = self._json(response)
        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, list):
            raise VendorError("Unexpected search response from Twelve Labs.", vendor_payload=payload, vendor=VENDOR)
        return [hit_from_payload(item) for item in data]

    async def summarize(
        self,
        video_id: str,
        *,
        prompt: str | None = None,
        temperature: float | None = None,
    ) -> VideoSummary:
        body: dict[str, Any] = {"video_id": video_id, "type": "summary"}
        if prompt:
            body["prompt"] = prompt
        if temperature is not None:
            body["temperature"] = temperature
        logger.info("[twelvelabs] Requesting summary for video %s", video_id)
        response = await self._request("POST", "/summarize", json=body)
        payload = self._json(response)
        if (
            not isinstance(payload, dict)
            or not isinstance(payload.get("id"), str)
            or not isinstance(payload.get("summary"), str)
        ):
            raise VendorError(
                "Unexpected response structure from Twelve Labs summarize API.",
                vendor_payload=payload,
                vendor=VENDOR,
            )
        return VideoSummary(job_id=payload["id"], summary=payload["summary"])


def get_twelvelabs_client() -> TwelveLabsClient:
    """FastAPI dependency: a client configured from the environment."""
    return TwelveLabsClient(get_twelve_labs_api_key(), base_url=get_twelve_labs_base_url())
