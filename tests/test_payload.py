import pytest

from services.scanner.payload import extract_ticket_id, MalformedPayloadError
from shared.utils.qr_generator import build_qr_payload


def test_json_payload_yields_ticket_id():
    assert extract_ticket_id('{"ticketId":"STU-1"}') == "STU-1"


def test_bare_identifier_is_used_as_is():
    assert extract_ticket_id("STU-1") == "STU-1"


def test_surrounding_whitespace_is_trimmed():
    assert extract_ticket_id("  STU-1\n") == "STU-1"
    assert extract_ticket_id('{"ticketId": " STU-1 "}') == "STU-1"


def test_json_scalar_is_treated_as_raw_identifier():
    assert extract_ticket_id("12345") == "12345"
    assert extract_ticket_id('"STU-1"') == '"STU-1"'


def test_invalid_json_falls_back_to_raw_text():
    assert extract_ticket_id("{ticketId: STU-1") == "{ticketId: STU-1"


def test_printed_ticket_payload_is_readable():
    assert extract_ticket_id(build_qr_payload("STU-2024-001")) == "STU-2024-001"


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    '{"id": "STU-1"}',
    '{"ticketId": ""}',
    '{"ticketId": 42}',
    '{"ticketId": null}',
])
def test_malformed_payloads(raw):
    with pytest.raises(MalformedPayloadError):
        extract_ticket_id(raw)
