"""Upload + task polling API. The client polls GET /api/tasks/{id} until ready or failed."""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, File, Form, UploadFile

from models import CamelModel, TaskStatus
from services.twelvelabs import TwelveLabsClient, get_twelvelabs_client
from services.uploads import POLL_INTERVAL_SECONDS, UploadOrchestrator

router = APIRouter(tags=["uploads"])
logger = logging.getLogger(__name__)


class UploadResponse(CamelModel):
    message: str
    task_id: str
    poll_interval_seconds: int = POLL_INTERVAL_SECONDS


class TaskStatusResponse(CamelModel):
    """Task status for polling. video_id is only present once status is ready."""

    task_id: str
    status: TaskStatus
    video_id: str | None = None
    created_at: datetime


class TaskCancelResponse(CamelModel):
    task_id: str
    cancelled: bool


def get_upload_orchestrator(
    client: TwelveLabsClient = Depends(get_twelvelabs_client),
) -> UploadOrchestrator:
    return UploadOrchestrator(client)


@router.post("/videos", response_model=UploadResponse, status_code=202)
async def upload_video(
    video: UploadFile = File(..., description="Video file to index"),
    width: int | None = Form(None, ge=1, description="Client-probed frame width"),
    height: int | None = Form(None, ge=1, description="Client-probed frame height"),
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> UploadResponse:
    """Submit a video for indexing and return the task id to poll."""
    logger.info("[uploads] POST /api/videos called filename=%s", video.filename)
    data = await video.read()
    task_id = await orchestrator.submit(
        video.filename or "upload",
        video.content_type,
        data,
        width=width,
        height=height,
    )
    return UploadResponse(message="Video upload initiated successfully.", task_id=task_id)


@router.get("/tasks/{task_id}", response_model=TaskStatusResponse)
async def get_task_status(
    task_id: str,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> TaskStatusResponse:
    """Current indexing status: pending -> processing -> ready | failed."""
    task = await orchestrator.poll_status(task_id)
    return TaskStatusResponse(
        task_id=task.task_id,
        status=task.status,
        video_id=task.result_video_id,
        created_at=task.created_at,
    )


@router.delete("/tasks/{task_id}", response_model=TaskCancelResponse)
async def cancel_task(
    task_id: str,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> TaskCancelResponse:
    """Abandon an in-flight indexing task."""
    logger.info("[uploads] DELETE /api/tasks/%s called", task_id)
    await orchestrator.cancel(task_id)
    return TaskCancelResponse(task_id=task_id, cancelled=True)
