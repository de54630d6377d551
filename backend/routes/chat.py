"""Chat + caption API backed by the hosted language model."""

import logging
import secrets

from fastapi import APIRouter, Depends
from pydantic import Field

from models import CamelModel
from services.captions import refine_caption
from services.planner import ConversationalPlanner, StructuredPlan

router = APIRouter(tags=["chat"])
logger = logging.getLogger(__name__)

_planner = ConversationalPlanner()


class ChatRequest(CamelModel):
    session_id: str | None = None
    message: str = Field(min_length=1)
    video_id: str | None = None
    video_context: str | None = None


class ChatResponse(CamelModel):
    session_id: str
    reply: str
    search_prompt_data: StructuredPlan | None = None
    error_category: str | None = None


class CaptionRequest(CamelModel):
    text_to_refine: str = Field(min_length=1)


class CaptionResponse(CamelModel):
    refined_text: str


def get_planner() -> ConversationalPlanner:
    return _planner


def _generate_session_id() -> str:
    return f"chat-{secrets.token_urlsafe(9)}"


@router.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, planner: ConversationalPlanner = Depends(get_planner)) -> ChatResponse:
    """One chat turn. Always 200: model failures come back as an apology with error_category set."""
    session_id = (body.session_id or "").strip() or _generate_session_id()
    context = body.video_context
    if not context and body.video_id:
        context = f"The uploaded video has id {body.video_id} and is indexed and ready for search."
    logger.info("[chat] POST /api/chat session=%s", session_id)
    reply = await planner.respond(session_id, body.message, context)
    return ChatResponse(
        session_id=session_id,
        reply=reply.reply_text,
        search_prompt_data=reply.structured_plan,
        error_category=reply.error_category,
    )


@router.post("/captions", response_model=CaptionResponse)
async def refine_text_for_social(body: CaptionRequest) -> CaptionResponse:
    refined = await refine_caption(body.text_to_refine)
    return CaptionResponse(refined_text=refined)
