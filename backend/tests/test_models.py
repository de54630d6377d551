from datetime import datetime

import pytest

from models import (
    ClipRequest,
    ClipResult,
    ConversationSession,
    TaskStatus,
    UploadTask,
    VideoInsights,
)


def test_upload_task_defaults() -> None:
    task = UploadTask(task_id="task-1")
    assert task.status is TaskStatus.PENDING
    assert task.result_video_id is None
    assert isinstance(task.created_at, datetime)
    assert task.created_at.tzinfo is not None


def test_ready_task_requires_video_id() -> None:
    with pytest.raises(ValueError):
        UploadTask(task_id="task-1", status=TaskStatus.READY)


def test_video_id_only_allowed_when_ready() -> None:
    with pytest.raises(ValueError):
        UploadTask(task_id="task-1", status=TaskStatus.PROCESSING, result_video_id="vid-1")
    task = UploadTask(task_id="task-1", status=TaskStatus.READY, result_video_id="vid-1")
    assert task.result_video_id == "vid-1"


def test_terminal_statuses() -> None:
    assert TaskStatus.READY.is_terminal
    assert TaskStatus.FAILED.is_terminal
    assert not TaskStatus.PENDING.is_terminal
    assert not TaskStatus.PROCESSING.is_terminal
    assert TaskStatus("ready") is TaskStatus.READY


def test_clip_request_duration() -> None:
    assert ClipRequest(start=2.0, end=5.0).duration == 3.0
    assert ClipRequest(start=5.0, end=5.0).duration == 0.0


def test_clip_result_ok_tracks_error() -> None:
    good = ClipResult(id="a", file_name="clip_1.mp4", download_url="/x", message="done")
    bad = ClipResult(id="b", file_name="clip_2.mp4", download_url="", message="failed", error="boom")
    assert good.ok
    assert not bad.ok


def test_conversation_session_starts_empty() -> None:
    session = ConversationSession(session_id="chat-1")
    assert session.turns == []


def test_video_insights_defaults() -> None:
    insights = VideoInsights()
    assert insights.content_type == "general"
    assert insights.key_topics == []
    assert insights.estimated_clip_count == 3
    assert insights.has_quotes is False
