"""Keyword heuristics that turn a free-text video summary into clip suggestions."""

from __future__ import annotations

from models import TOPIC_KEYWORDS, VideoInsights

ANALYSIS_PROMPT = (
    "Provide a comprehensive analysis of this video including: 1) Main topics and themes, "
    "2) Key moments or highlights, 3) Type of content (tutorial, interview, presentation, etc.), "
    "4) Potential social media clip opportunities, 5) Notable quotes or statements, "
    "6) Visual elements or scenes that stand out. Be specific and detailed."
)
ANALYSIS_TEMPERATURE = 0.3
MAX_KEY_TOPICS = 5

# content type -> (trigger phrases, estimated clip count, suggested clips); first match wins.
_CONTENT_TYPES: list[tuple[str, tuple[str, ...], int, list[str]]] = [
    (
        "tutorial",
        ("tutorial", "how to", "step"),
        4,
        [
            "Introduction and overview",
            "Key steps and process",
            "Tips and best practices",
            "Final results and conclusion",
        ],
    ),
    (
        "interview",
        ("interview", "conversation", "discussion"),
        5,
        [
            "Best quotes and insights",
            "Key discussion points",
            "Personal stories or examples",
            "Advice and recommendations",
            "Most engaging moments",
        ],
    ),
    (
        "presentation",
        ("presentation", "demo", "product"),
        4,
        [
            "Main value proposition",
            "Key features or benefits",
            "Compelling statistics or data",
            "Call to action",
        ],
    ),
]

_GENERAL_CLIPS = [
    "Most engaging moments",
    "Key highlights",
    "Notable quotes or statements",
    "Visual highlights",
]


def extract_insights(summary: str) -> VideoInsights:
    insights = VideoInsights(suggested_clips=list(_GENERAL_CLIPS))
    lower = (summary or "").lower()
    if not lower:
        return insights

    for content_type, triggers, clip_count, clips in _CONTENT_TYPES:
        if any(t in lower for t in triggers):
            insights.content_type = content_type
            insights.estimated_clip_count = clip_count
            insights.suggested_clips = list(clips)
            break

    insights.has_quotes = any(w in lower for w in ("quote", "says", "mentions"))
    insights.has_visual_elements = any(w in lower for w in ("shows", "displays", "visual"))
    insights.key_topics = [kw for kw in TOPIC_KEYWORDS if kw in lower][:MAX_KEY_TOPICS]
    return insights
