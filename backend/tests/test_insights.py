from services.insights import MAX_KEY_TOPICS, extract_insights


def test_tutorial_summary() -> None:
    insights = extract_insights(
        "A step-by-step tutorial on how to set up a home studio. The host shows each piece of gear."
    )
    assert insights.content_type == "tutorial"
    assert insights.estimated_clip_count == 4
    assert insights.suggested_clips[0] == "Introduction and overview"
    assert insights.has_visual_elements is True
    assert insights.has_quotes is False


def test_interview_detects_quotes() -> None:
    insights = extract_insights("An interview where the founder says growth matters more than profit.")
    assert insights.content_type == "interview"
    assert insights.estimated_clip_count == 5
    assert insights.has_quotes is True


def test_general_fallback() -> None:
    insights = extract_insights("A quiet walk along the river at dusk.")
    assert insights.content_type == "general"
    assert insights.estimated_clip_count == 3
    assert "Key highlights" in insights.suggested_clips


def test_empty_summary() -> None:
    insights = extract_insights("")
    assert insights.content_type == "general"
    assert insights.key_topics == []


def test_key_topics_are_capped() -> None:
    summary = " ".join(
        ["technology", "business", "marketing", "design", "development", "education", "health", "fitness"]
    )
    assert len(extract_insights(summary).key_topics) <= MAX_KEY_TOPICS
