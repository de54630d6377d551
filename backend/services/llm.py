"""Hosted chat-model access and error classification for LLM calls."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import openai
from langchain_core.messages import BaseMessage
from langchain_openai import ChatOpenAI

from services.errors import AppError, ConfigurationError, TransportError, VendorError
from services.settings import get_openai_api_key, get_openai_model

VENDOR = "OpenAI"


class ChatModel(Protocol):
    async def ainvoke(self, input: list[BaseMessage], **kwargs: Any) -> Any: ...


def get_chat_model(*, temperature: float = 0.7) -> ChatOpenAI:
    return ChatOpenAI(model=get_openai_model(), temperature=temperature, api_key=get_openai_api_key())


def classify_llm_error(exc: BaseException) -> str:
    """Bucket an LLM failure into configuration | rate_limit | timeout | connectivity | unknown."""
    if isinstance(exc, ConfigurationError):
        return "configuration"
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return "configuration"
    if isinstance(exc, openai.RateLimitError):
        return "rate_limit"
    if isinstance(exc, (openai.APITimeoutError, httpx.TimeoutException, TimeoutError)):
        return "timeout"
    if isinstance(exc, (openai.APIConnectionError, httpx.TransportError, ConnectionError)):
        return "connectivity"
    message = str(exc).lower()
    if "api key" in message:
        return "configuration"
    if "rate limit" in message:
        return "rate_limit"
    return "unknown"


def llm_error_to_app_error(exc: Exception) -> AppError:
    """Translate an LLM client exception into the shared taxonomy."""
    if isinstance(exc, AppError):
        return exc
    category = classify_llm_error(exc)
    if category == "configuration":
        return ConfigurationError("Language model credentials are not configured.", details=category)
    if category in ("timeout", "connectivity"):
        return TransportError("Language model service unreachable.", details=category)
    status = getattr(exc, "status_code", None)
    return VendorError(
        f"{VENDOR} API error: {type(exc).__name__}",
        status=status if isinstance(status, int) else None,
        vendor=VENDOR,
    )


def message_text(result: Any) -> str:
    """Text content of a model reply (AIMessage or plain string)."""
    content = getattr(result, "content", result)
    if isinstance(content, list):
        return "".join(part.get("text", "") if isinstance(part, dict) else str(part) for part in content)
    return str(content or "")
