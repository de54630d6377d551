"""One-shot caption refinement for the social preview."""

import logging

from langchain_core.messages import HumanMessage, SystemMessage

from services.errors import InvalidInputError, VendorError
from services.llm import ChatModel, get_chat_model, llm_error_to_app_error, message_text

logger = logging.getLogger(__name__)

CAPTION_SYSTEM_PROMPT = """
You write captions for short social media video posts. Rewrite the text you are given into
one punchy caption: at most 280 characters, conversational, one or two relevant emojis and
up to three hashtags. Reply with the caption only, no quotes and no explanations.
""".strip()


async def refine_caption(text: str, *, model: ChatModel | None = None) -> str:
    if not text or not text.strip():
        raise InvalidInputError("textToRefine is required.")
    try:
        chat = model or get_chat_model(temperature=0.8)
        result = await chat.ainvoke(
            [SystemMessage(content=CAPTION_SYSTEM_PROMPT), HumanMessage(content=text.strip())]
        )
    except Exception as exc:  # noqa: BLE001
        logger.error("[captions] Caption refinement FAILED: %s", exc, exc_info=True)
        raise llm_error_to_app_error(exc) from exc
    refined = message_text(result).strip().strip('"').strip()
    if not refined:
        raise VendorError("Language model returned an empty caption.", vendor="OpenAI")
    return refined
