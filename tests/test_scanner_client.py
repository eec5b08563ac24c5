import asyncio
import json

import httpx
import pytest

from services.scanner.client import VerificationClient, ScannerBusyError
from services.scanner.models import ScanError

TICKET = {
    "id": "STU-2024-001",
    "studentName": "Rahul Kumar",
    "rollNumber": "CS21B001",
    "email": "rahul@student.edu",
    "eventName": "Annual Tech Fest 2024",
    "scannedAt": "2024-11-04T09:30:00",
}


def _client(handler):
    return VerificationClient(base_url="http://scanner.test", transport=httpx.MockTransport(handler))


async def test_success_response():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"success": True, "message": "Ticket verified", "ticket": TICKET})

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.success is True
    assert result.message == "Entry Approved ✓"
    assert result.details == "Student verified successfully"
    assert result.error is None
    assert result.ticket.status == "used"
    assert result.ticket.student_name == "Rahul Kumar"
    assert result.ticket.scanned_at == "2024-11-04T09:30:00"

    assert len(requests) == 1
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/api/tickets/verify"
    assert json.loads(requests[0].content) == {"ticketId": "STU-2024-001"}


async def test_already_used_relays_service_message_and_ticket():
    def handler(request):
        return httpx.Response(409, json={
            "success": False,
            "error": "already_used",
            "message": "Ticket already used",
            "ticket": {**TICKET, "status": "used"},
        })

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.success is False
    assert result.error == ScanError.ALREADY_USED
    assert result.message == "Ticket already used"
    assert result.details == "Ticket already used"
    assert result.ticket.scanned_at == "2024-11-04T09:30:00"


async def test_already_used_with_incomplete_ticket_keeps_service_message():
    def handler(request):
        return httpx.Response(409, json={
            "success": False,
            "error": "already_used",
            "message": "Ticket already used",
            "ticket": {"studentName": "Rahul Kumar"},
        })

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.success is False
    assert result.error == ScanError.ALREADY_USED
    assert result.message == "Ticket already used"
    assert result.ticket is None


async def test_not_found_without_error_code_uses_status():
    def handler(request):
        return httpx.Response(404, json={"success": False, "message": "Ticket not found"})

    async with _client(handler) as client:
        result = await client.verify("NOPE")

    assert result.error == ScanError.NOT_FOUND
    assert result.message == "Ticket not found"
    assert result.ticket is None


async def test_failure_without_message_uses_defaults():
    def handler(request):
        return httpx.Response(500, json={"success": False})

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.success is False
    assert result.message == "Verification Failed"
    assert result.details == "Unable to verify ticket"
    assert result.error == ScanError.SERVICE_ERROR


async def test_success_false_in_2xx_is_a_failure():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Event closed"})

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.success is False
    assert result.message == "Event closed"


async def test_unreachable_service_is_a_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")
        assert result.error == ScanError.CONNECTION_ERROR
        assert result.message == "Connection Error"
        assert result.details == "Unable to connect to server. Please check your connection."
        assert client.in_flight is False


async def test_unreadable_body_is_a_connection_error():
    def handler(request):
        return httpx.Response(502, text="<html>Bad Gateway</html>")

    async with _client(handler) as client:
        result = await client.verify("STU-2024-001")

    assert result.error == ScanError.CONNECTION_ERROR


async def test_scan_extracts_ticket_id_from_json_payload():
    sent = []

    def handler(request):
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "ticket": TICKET})

    async with _client(handler) as client:
        result = await client.scan('{"ticketId":"STU-2024-001","event":"fest"}')

    assert result.success is True
    assert sent == [{"ticketId": "STU-2024-001"}]


async def test_scan_rejects_malformed_payload_without_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    async with _client(handler) as client:
        result = await client.scan('{"event": "fest"}')

    assert result.success is False
    assert result.error == ScanError.MALFORMED_PAYLOAD
    assert calls == []


async def test_only_one_verification_in_flight():
    release = asyncio.Event()

    async def handler(request):
        await release.wait()
        return httpx.Response(200, json={"success": True, "ticket": TICKET})

    async with _client(handler) as client:
        pending = asyncio.create_task(client.verify("STU-2024-001"))
        while not client.in_flight:
            await asyncio.sleep(0)

        with pytest.raises(ScannerBusyError):
            await client.verify("STU-2024-003")

        release.set()
        result = await pending

    assert result.success is True


async def test_end_to_end_against_service(database):
    from main import app

    client = VerificationClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    async with client:
        first = await client.scan('{"ticketId":"STU-2024-001"}')
        second = await client.scan("STU-2024-001")
        unknown = await client.scan("STU-0000-000")

    assert first.success is True
    assert first.ticket.scanned_at is not None

    assert second.success is False
    assert second.error == ScanError.ALREADY_USED
    assert "already used" in second.message
    assert second.ticket.scanned_at == first.ticket.scanned_at

    assert unknown.error == ScanError.NOT_FOUND
    assert unknown.ticket is None
