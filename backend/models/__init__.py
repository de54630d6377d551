from .api import CamelModel
from .clip import ClipRequest, ClipResult
from .conversation import ConversationSession, ConversationTurn, TurnRole
from .upload import TaskRecord, TaskStatus, UploadTask
from .video import SEARCH_OPTIONS, TOPIC_KEYWORDS, SearchHit, VideoDetails, VideoInsights, VideoSummary

__all__ = [
    "CamelModel",
    "ClipRequest",
    "ClipResult",
    "ConversationSession",
    "ConversationTurn",
    "TurnRole",
    "TaskRecord",
    "TaskStatus",
    "UploadTask",
    "SEARCH_OPTIONS",
    "TOPIC_KEYWORDS",
    "SearchHit",
    "VideoDetails",
    "VideoInsights",
    "VideoSummary",
]
