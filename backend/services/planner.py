"""Conversational clip planner.

Forwards the user's message plus the session history to a hosted chat model
and, when the reply carries a fenced ```json block describing search queries,
lifts it out as a structured plan.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Literal

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from pydantic import Field, ValidationError

from models import CamelModel, ConversationTurn, TurnRole
from services.llm import ChatModel, classify_llm_error, get_chat_model, message_text
from services.store import SessionStore, conversation_sessions

logger = logging.getLogger(__name__)

PLANNER_SYSTEM_PROMPT = """
You are a video assistant that helps people cut engaging social media clips out of a video
they have already uploaded and indexed. Work out what the user wants and turn it into
search queries for a video search engine that understands what is seen and heard.

You handle three kinds of requests:
- A direct clip request ("a 30 second highlight of the best plays", "every time I mention pricing").
- A multi-topic showcase: the video covers several projects, features or segments and each needs its own clip.
- A tutorial breakdown: split a how-to into its steps (preparation, main steps, result).

RULES:
- Ask a short clarifying question when the request is vague.
- Confirm the search criteria before proposing queries; never propose queries the user has not agreed to.
- Keep replies brief and friendly. Do not ask for personal information.

When the user has confirmed what to search for, reply with exactly one fenced block:

```json
{
  "searchQueries": [
    {"id": "q1", "queryText": "<what to look for>", "searchOptions": ["visual", "audio"]}
  ],
  "notesForUser": "<one or two sentences telling the user what you prepared>"
}
```

searchOptions may only contain "visual" and "audio".
""".strip()

DEFAULT_PLAN_NOTE = "I've prepared some search queries for you. Please review them."

APOLOGIES: dict[str, str] = {
    "configuration": "It looks like there's an issue with the AI configuration. Please check that the language model API key is set up correctly.",
    "rate_limit": "I'm getting too many requests right now. Please wait a moment and try again.",
    "timeout": "That took longer than expected. Please try sending your message again.",
    "connectivity": "I'm having trouble connecting right now. Please check your connection and try again.",
    "unknown": "Sorry, something went wrong while preparing a reply. Please try again.",
}

_JSON_BLOCK = re.compile(r"```json[ \t]*\r?\n(.*?)```", re.DOTALL | re.IGNORECASE)


class SearchQuery(CamelModel):
    id: str | None = None
    query_text: str = Field(min_length=1)
    search_options: list[Literal["visual", "audio"]] = Field(min_length=1)


class StructuredPlan(CamelModel):
    search_queries: list[SearchQuery] = Field(min_length=1)
    notes_for_user: str | None = None


@dataclass
class PlannerReply:
    reply_text: str
    structured_plan: StructuredPlan | None = None
    error_category: str | None = None


def extract_structured_plan(reply: str) -> tuple[str, StructuredPlan | None]:
    """
    Split a model reply into (text for the user, plan or None).

    A well-formed block yields its ``notesForUser`` (or a default note) as the
    text. An absent or malformed block yields the raw reply unchanged.
    """
    match = _JSON_BLOCK.search(reply)
    if match is None:
        return reply, None
    try:
        plan = StructuredPlan.model_validate(json.loads(match.group(1)))
    except (ValueError, ValidationError) as exc:
        logger.warning("[planner] Model returned a JSON-like block that did not parse: %s", exc)
        return reply, None
    note = (plan.notes_for_user or "").strip()
    return note or DEFAULT_PLAN_NOTE, plan


class ConversationalPlanner:
    """
    :param model: chat model with ``ainvoke``; built from the environment on first use when omitted
    :param store: session history store; the process-wide in-memory store by default
    """

    def __init__(
        self,
        *,
        model: ChatModel | None = None,
        store: SessionStore | None = None,
        system_prompt: str = PLANNER_SYSTEM_PROMPT,
    ) -> None:
        self._model = model
        self._store = store if store is not None else conversation_sessions
        self._system_prompt = system_prompt

    def _get_model(self) -> ChatModel:
        if self._model is None:
            self._model = get_chat_model(temperature=0.7)
        return self._model

    def _build_messages(self, session_id: str, user_text: str, video_context: str | None) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=self._system_prompt)]
        if video_context:
            messages.append(SystemMessage(content=f"Context about the user's video:\n{video_context}"))
        session = self._store.get(session_id)
        for turn in session.turns if session else []:
            if turn.role is TurnRole.USER:
                messages.append(HumanMessage(content=turn.text))
            else:
                messages.append(AIMessage(content=turn.text))
        messages.append(HumanMessage(content=user_text))
        return messages

    async def respond(self, session_id: str, user_text: str, video_context: str | None = None) -> PlannerReply:
        """One exchange. Vendor failures become an apology; the session itself is never aborted."""
        messages = self._build_messages(session_id, user_text, video_context)
        try:
            result: Any = await self._get_model().ainvoke(messages)
        except Exception as exc:  # noqa: BLE001
            category = classify_llm_error(exc)
            logger.error(
                "[planner] Chat model call FAILED session=%s category=%s: %s",
                session_id,
                category,
                exc,
                exc_info=True,
            )
            return PlannerReply(reply_text=APOLOGIES[category], error_category=category)

        reply_text, plan = extract_structured_plan(message_text(result))
        # History keeps the user-facing text, so the JSON block is not echoed back as context.
        self._store.append(
            session_id,
            ConversationTurn(role=TurnRole.USER, text=user_text),
            ConversationTurn(role=TurnRole.ASSISTANT, text=reply_text),
        )
        logger.info(
            "[planner] Reply for session=%s plan=%s queries=%d",
            session_id,
            plan is not None,
            len(plan.search_queries) if plan else 0,
        )
        return PlannerReply(reply_text=reply_text, structured_plan=plan)
