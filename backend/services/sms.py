"""Send a clip link by SMS through the Twilio REST API."""

from __future__ import annotations

import logging
import re

import httpx

from services.errors import (
    ConfigurationError,
    InvalidInputError,
    TransportError,
    VendorError,
    raise_for_vendor_status,
)
from services.settings import get_twilio_credentials

logger = logging.getLogger(__name__)

VENDOR = "Twilio"
TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"
E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


def is_e164(phone_number: str) -> bool:
    return bool(E164_PATTERN.fullmatch(phone_number or ""))


async def send_sms(
    to_phone_number: str,
    message_body: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Validate, then send one SMS; returns the message SID. Nothing is sent when validation fails."""
    if not to_phone_number:
        raise InvalidInputError("Recipient phone number (toPhoneNumber) is required.")
    if not message_body or not message_body.strip():
        raise InvalidInputError("Message body (messageBody) is required.")
    if not is_e164(to_phone_number):
        raise InvalidInputError(
            "Invalid recipient phone number format. Please use E.164 format (e.g., +12223334444)."
        )
    account_sid, auth_token, sender = get_twilio_credentials()
    if not is_e164(sender):
        raise ConfigurationError("SMS service is misconfigured (invalid sender number).")

    logger.info("[sms] Sending SMS to %s from %s", to_phone_number, sender)
    async with httpx.AsyncClient(base_url=TWILIO_API_BASE, transport=transport, timeout=30.0) as client:
        try:
            response = await client.post(
                f"/Accounts/{account_sid}/Messages.json",
                data={"From": sender, "To": to_phone_number, "Body": message_body},
                auth=(account_sid, auth_token),
            )
        except httpx.TransportError as exc:
            raise TransportError(f"No response received from {VENDOR}.", details=type(exc).__name__) from exc
    raise_for_vendor_status(response, vendor=VENDOR)
    try:
        payload = response.json()
    except ValueError as exc:
        raise VendorError(
            f"{VENDOR} returned a non-JSON body.", status=response.status_code, vendor=VENDOR
        ) from exc
    if not isinstance(payload, dict):
        raise VendorError(f"Unexpected response from {VENDOR}.", vendor_payload=payload, vendor=VENDOR)
    sid = payload.get("sid", "")
    logger.info("[sms] SMS sent. SID: %s", sid)
    return sid
