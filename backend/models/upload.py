from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TaskStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.READY, TaskStatus.FAILED)


@dataclass
class UploadTask:
    task_id: str                           # assigned by the indexing service
    status: TaskStatus = TaskStatus.PENDING
    result_video_id: str | None = None     # only once status is READY
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if (self.status is TaskStatus.READY) != bool(self.result_video_id):
            raise ValueError(
                f"result_video_id must be set iff status is ready (status={self.status.value}, "
                f"result_video_id={self.result_video_id!r})"
            )


@dataclass
class TaskRecord:
    task_id: str
    filename: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
