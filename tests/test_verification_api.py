async def test_health(api_client):
    response = await api_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_ready_reports_database_and_disabled_cache(api_client):
    response = await api_client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "database": "connected", "redis": "disabled"}


async def test_verify_then_reverify_same_ticket(api_client):
    first = await api_client.post("/api/tickets/verify", json={"ticketId": "STU-2024-001"})

    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["ticket"]["id"] == "STU-2024-001"
    assert body["ticket"]["rollNumber"] == "CS21B001"
    assert body["ticket"]["email"] == "rahul@student.edu"
    assert body["ticket"]["eventName"]
    assert body["ticket"]["scannedAt"] is not None

    second = await api_client.post("/api/tickets/verify", json={"ticketId": "STU-2024-001"})

    assert second.status_code == 409
    rejected = second.json()
    assert rejected["success"] is False
    assert rejected["error"] == "already_used"
    assert "already used" in rejected["message"]
    assert rejected["ticket"]["scannedAt"] == body["ticket"]["scannedAt"]


async def test_verify_unknown_ticket(api_client):
    response = await api_client.post("/api/tickets/verify", json={"ticketId": "NOPE-1"})

    assert response.status_code == 404
    body = response.json()
    assert body == {"success": False, "error": "not_found", "message": "Ticket not found"}

    ticket = await api_client.get("/api/tickets/STU-2024-001")
    assert ticket.json()["status"] == "valid"


async def test_verify_without_ticket_id(api_client):
    for payload in ({}, {"ticketId": "   "}):
        response = await api_client.post("/api/tickets/verify", json=payload)
        assert response.status_code == 400
        assert response.json()["error"] == "malformed_payload"


async def test_verify_with_non_string_ticket_id(api_client):
    response = await api_client.post("/api/tickets/verify", json={"ticketId": 123})

    assert response.status_code == 400
    assert response.json() == {
        "success": False,
        "error": "malformed_payload",
        "message": "Ticket ID is required",
    }


async def test_verify_with_body_that_is_not_json(api_client):
    response = await api_client.post(
        "/api/tickets/verify",
        content="not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "malformed_payload"

    ticket = await api_client.get("/api/tickets/STU-2024-001")
    assert ticket.json()["status"] == "valid"


async def test_list_tickets_search_is_case_insensitive(api_client):
    response = await api_client.get("/api/tickets", params={"search": "PRIYA"})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["tickets"][0]["id"] == "STU-2024-002"


async def test_list_tickets_by_status(api_client):
    response = await api_client.get("/api/tickets", params={"status": "valid"})

    ids = [t["id"] for t in response.json()["tickets"]]
    assert ids == ["STU-2024-001", "STU-2024-003"]


async def test_list_tickets_rejects_unknown_status(api_client):
    response = await api_client.get("/api/tickets", params={"status": "revoked"})
    assert response.status_code == 422


async def test_stats_follow_verifications(api_client):
    stats = await api_client.get("/api/tickets/stats")
    assert stats.json() == {"total": 3, "used": 1, "valid": 2}

    await api_client.post("/api/tickets/verify", json={"ticketId": "CS21B003"})

    stats = await api_client.get("/api/tickets/stats")
    assert stats.json() == {"total": 3, "used": 2, "valid": 1}


async def test_get_unknown_ticket(api_client):
    response = await api_client.get("/api/tickets/STU-0000-000")
    assert response.status_code == 404
