"""Vendor error normalization: every payload shape collapses to one message."""

import httpx
import pytest

from services.errors import (
    InvalidInputError,
    VendorError,
    raise_for_vendor_status,
    vendor_error_from_response,
)


def _response(status: int, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://vendor.test/x"), **kwargs)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"message": "index not found"}, "index not found"),
        ({"detail": "bad field"}, "bad field"),
        ({"detail": {"field": "query_text"}}, '{"field": "query_text"}'),
        ({"error": "quota exhausted"}, "quota exhausted"),
        ({"error": {"message": "nested failure"}}, "nested failure"),
    ],
)
def test_json_payload_shapes(payload: dict, expected: str) -> None:
    error = vendor_error_from_response(_response(400, json=payload), vendor="Twelve Labs")
    assert error.message == f"Twelve Labs API error (400): {expected}"
    assert error.vendor_payload == payload
    assert error.status == 400


def test_plain_text_payload() -> None:
    error = vendor_error_from_response(_response(500, text="upstream exploded"), vendor="Twilio")
    assert error.message == "Twilio API error (500): upstream exploded"


def test_empty_payload_falls_back_to_reason_phrase() -> None:
    error = vendor_error_from_response(_response(503, json={}), vendor="Twilio")
    assert error.message == "Twilio API error (503): Service Unavailable"


@pytest.mark.parametrize(("vendor_status", "http_status"), [(404, 404), (429, 429), (400, 502), (500, 502)])
def test_vendor_status_mapping(vendor_status: int, http_status: int) -> None:
    assert VendorError("x", status=vendor_status).status_code == http_status


def test_raise_for_vendor_status_passes_success() -> None:
    raise_for_vendor_status(_response(200, json={"ok": True}), vendor="Twilio")
    with pytest.raises(VendorError):
        raise_for_vendor_status(_response(401, json={"message": "nope"}), vendor="Twilio")


def test_invalid_input_is_400() -> None:
    error = InvalidInputError("bad", details="why")
    assert error.status_code == 400
    assert error.details == "why"
