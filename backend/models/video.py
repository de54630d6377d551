from dataclasses import dataclass, field


@dataclass
class SearchHit:
    score: float
    start: float               # seconds
    end: float                 # seconds
    confidence: str            # vendor category, e.g. "high" | "medium" | "low"
    thumbnail_url: str | None = None
    video_id: str | None = None


@dataclass
class VideoDetails:
    video_id: str
    filename: str | None = None
    duration: float | None = None
    width: int | None = None
    height: int | None = None
    stream_url: str | None = None          # HLS playlist, input for clip extraction
    thumbnail_urls: list[str] = field(default_factory=list)
    created_at: str | None = None
    updated_at: str | None = None
    indexed_at: str | None = None


@dataclass
class VideoSummary:
    job_id: str
    summary: str


@dataclass
class VideoInsights:
    content_type: str = "general"
    key_topics: list[str] = field(default_factory=list)
    suggested_clips: list[str] = field(default_factory=list)
    has_quotes: bool = False
    has_visual_elements: bool = False
    estimated_clip_count: int = 3


SEARCH_OPTIONS = ("visual", "audio")   # modalities the search vendor accepts

TOPIC_KEYWORDS = [
    "innovation",
    "technology",
    "business",
    "marketing",
    "sales",
    "product",
    "feature",
    "strategy",
    "growth",
    "success",
    "tips",
    "advice",
    "insights",
    "experience",
    "project",
    "development",
    "design",
    "process",
    "method",
    "technique",
]
