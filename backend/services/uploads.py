"""Upload orchestration: submit a video for indexing, then poll the vendor task.

The orchestrator is a passive observer of the vendor's task state machine
(pending -> processing -> ready | failed). It never writes a status itself and
caches nothing between polls; bounding the polling loop is the caller's job.
"""

from __future__ import annotations

import logging

from models import TaskRecord, UploadTask
from services.errors import InvalidInputError
from services.media_probe import aspect_ratio_accepted, probe_dimensions
from services.settings import get_index_id
from services.store import TaskStore, upload_tasks
from services.twelvelabs import TwelveLabsClient, task_from_payload

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 5


class UploadOrchestrator:
    def __init__(
        self,
        client: TwelveLabsClient,
        *,
        index_id: str | None = None,
        tasks: TaskStore | None = None,
    ) -> None:
        self._client = client
        self._index_id = index_id
        self._tasks = tasks if tasks is not None else upload_tasks

    def _validate(
        self,
        filename: str,
        content_type: str | None,
        data: bytes,
        width: int | None,
        height: int | None,
    ) -> None:
        if not content_type or not content_type.lower().startswith("video/"):
            raise InvalidInputError(
                "Invalid file type. Only video files are allowed.",
                details=f"Received content type {content_type!r} for {filename!r}",
            )
        if not data:
            raise InvalidInputError("No video file provided.", details=f"{filename!r} is empty")
        dimensions = (width, height) if width and height else probe_dimensions(data)
        if dimensions is None:
            logger.info("[uploads] Dimensions of %r unknown; leaving decodability to the indexer.", filename)
            return
        if not aspect_ratio_accepted(*dimensions):
            raise InvalidInputError(
                "Unsupported aspect ratio. Videos must be between 1:1 and 16:9.",
                details=f"{filename!r} is {dimensions[0]}x{dimensions[1]}",
            )

    async def submit(
        self,
        filename: str,
        content_type: str | None,
        data: bytes,
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> str:
        """Validate locally, forward to the indexer and return its task id. No retry."""
        self._validate(filename, content_type, data, width, height)
        index_id = get_index_id(self._index_id)
        logger.info(
            "[uploads] Received %r type=%s size=%d bytes; submitting to index %s",
            filename,
            content_type,
            len(data),
            index_id,
        )
        task_id = await self._client.create_task(index_id, filename, data, content_type or "video/mp4")
        self._tasks.put(TaskRecord(task_id=task_id, filename=filename))
        logger.info("[uploads] Upload accepted: task_id=%s", task_id)
        return task_id

    async def poll_status(self, task_id: str) -> UploadTask:
        """One fresh vendor round trip. Safe to repeat; errors leave the task registered."""
        if not task_id or not task_id.strip():
            raise InvalidInputError("Task ID is required.")
        payload = await self._client.retrieve_task(task_id)
        record = self._tasks.get(task_id)
        task = task_from_payload(payload, fallback_created_at=record.created_at if record else None)
        logger.info("[uploads] Task %s status=%s video_id=%s", task_id, task.status.value, task.result_video_id)
        return task

    async def cancel(self, task_id: str) -> None:
        """Abandon an in-flight task at the vendor and forget it locally."""
        if not task_id or not task_id.strip():
            raise InvalidInputError("Task ID is required.")
        await self._client.delete_task(task_id)
        self._tasks.discard(task_id)
        logger.info("[uploads] Task %s cancelled", task_id)
