"""Error taxonomy shared by routes and vendor adapters.

Routes never build error bodies by hand: they raise one of these and the
handlers registered in ``app.main`` render ``{"error": ..., "details": ...}``.
"""

from __future__ import annotations

import json
from typing import Any

import httpx


class AppError(Exception):
    """Base class for errors rendered as a structured JSON body."""

    status_code = 500
    summary = "Request failed."

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidInputError(AppError):
    """Caller-supplied data failed a local precondition. Never retried."""

    status_code = 400
    summary = "Invalid input."


class NotFoundError(AppError):
    status_code = 404
    summary = "Not found."


class ConfigurationError(AppError):
    """A required credential or identifier is missing from the deployment."""

    status_code = 503
    summary = "Service is not configured."


class VendorError(AppError):
    """An external service answered with a non-success status."""

    summary = "Upstream service error."

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        vendor_payload: Any = None,
        vendor: str = "vendor",
    ) -> None:
        super().__init__(message, details=message)
        self.status = status
        self.vendor_payload = vendor_payload
        self.vendor = vendor
        # 404 and 429 mean the same thing to our caller; everything else is a bad gateway.
        self.status_code = status if status in (404, 429) else 502


class TransportError(AppError):
    """An external service could not be reached at all."""

    status_code = 502
    summary = "Upstream service unreachable."


def _message_from_payload(payload: Any) -> str | None:
    if isinstance(payload, str):
        return payload.strip() or None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    detail = payload.get("detail")
    if isinstance(detail, str) and detail:
        return detail
    if detail:
        return json.dumps(detail)
    error = payload.get("error")
    if isinstance(error, str) and error:
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


def vendor_error_from_response(response: httpx.Response, *, vendor: str) -> VendorError:
    """Normalize a non-2xx vendor response into a single VendorError.

    Vendors answer with a plain string, ``{"message": ...}``, ``{"detail": ...}``
    (string or object) or ``{"error": ...}``; callers only ever see ``message``.
    """
    try:
        payload: Any = response.json()
    except ValueError:
        payload = response.text
    message = _message_from_payload(payload) or response.reason_phrase or "Unknown error"
    return VendorError(
        f"{vendor} API error ({response.status_code}): {message}",
        status=response.status_code,
        vendor_payload=payload,
        vendor=vendor,
    )


def raise_for_vendor_status(response: httpx.Response, *, vendor: str) -> None:
    if response.is_success:
        return
    raise vendor_error_from_response(response, vendor=vendor)
