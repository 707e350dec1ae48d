import asyncio
import json
from datetime import datetime, timedelta, timezone

import httpx
import sqlalchemy as sa

from boiler_leads.domain.errors import PersistenceError
from boiler_leads.domain.inquiries.db_models import Inquiry
from boiler_leads.infra.webhook import WebhookNotifier
from boiler_leads.main import app

VALID = {"name": "Jane Doe", "phone": "07700900000", "postcode": "SW1A 1AA"}


def _count_inquiries(session_factory) -> int:
    async def count() -> int:
        async with session_factory() as session:
            result = await session.execute(sa.select(sa.func.count()).select_from(Inquiry))
            return result.scalar_one()

    return asyncio.run(count())


def test_create_inquiry_via_leads_path(client, session_factory):
    response = client.post("/api/leads", json=VALID)

    assert response.status_code == 201
    body = response.json()
    assert isinstance(body["id"], int)
    assert body["name"] == "Jane Doe"
    assert body["phone"] == "07700900000"
    assert body["postcode"] == "SW1A 1AA"
    assert body["createdAt"]
    assert _count_inquiries(session_factory) == 1


def test_caller_values_are_echoed_as_sent(client):
    padded = {"name": "  Jane Doe ", "phone": " 07700900000", "postcode": "SW1A 1AA "}

    response = client.post("/api/leads", json=padded)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "  Jane Doe "
    assert body["phone"] == " 07700900000"
    assert body["postcode"] == "SW1A 1AA "


def test_whitespace_only_name_is_rejected(client, session_factory):
    response = client.post("/api/leads", json={**VALID, "name": "   "})

    assert response.status_code == 400
    assert {error["field"] for error in response.json()["errors"]} == {"name"}
    assert _count_inquiries(session_factory) == 0


def test_created_at_is_not_before_submission(client):
    before = datetime.now(timezone.utc).replace(microsecond=0)

    response = client.post("/api/inquiries", json=VALID)

    created = datetime.fromisoformat(response.json()["createdAt"].replace("Z", "+00:00"))
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    assert created >= before
    assert created <= datetime.now(timezone.utc) + timedelta(seconds=1)


def test_inquiries_and_leads_paths_are_equivalent(client):
    payload = {**VALID, "email": "jane@example.com", "selectedModel": "8000", "message": "Asap"}

    first = client.post("/api/inquiries", json=payload).json()
    second = client.post("/api/leads", json=payload).json()

    for body in (first, second):
        assert body["email"] == "jane@example.com"
        assert body["selectedModel"] == "8000"
        assert body["notes"] == "Asap"
    assert second["id"] == first["id"] + 1


def test_missing_name_returns_400_with_field_errors(client, session_factory):
    response = client.post("/api/inquiries", json={"phone": "07700900000", "postcode": "SW1A 1AA"})

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid data"
    assert body["errors"]
    assert {error["field"] for error in body["errors"]} == {"name"}
    assert _count_inquiries(session_factory) == 0


def test_invalid_email_returns_400(client):
    response = client.post("/api/inquiries", json={**VALID, "email": "jane-at-example"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "email"


def test_non_json_body_returns_400(client):
    response = client.post(
        "/api/inquiries",
        content="name=Jane",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid data"


def test_client_supplied_id_is_ignored(client):
    response = client.post("/api/inquiries", json={**VALID, "id": 999999, "createdAt": "2000-01-01T00:00:00Z"})

    assert response.status_code == 201
    body = response.json()
    assert body["id"] != 999999
    assert not body["createdAt"].startswith("2000-01-01")


def test_duplicate_submissions_are_both_stored(client, session_factory):
    first = client.post("/api/inquiries", json=VALID)
    second = client.post("/api/inquiries", json=VALID)

    assert first.status_code == second.status_code == 201
    assert first.json()["id"] != second.json()["id"]
    assert _count_inquiries(session_factory) == 2


def test_webhook_receives_created_record(client):
    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(200)

    notifier = WebhookNotifier("https://hooks.test/lead", transport=httpx.MockTransport(handler))
    app.state.webhook_notifier = notifier

    response = client.post("/api/inquiries", json=VALID)
    client.portal.call(notifier.drain)

    assert response.status_code == 201
    assert len(received) == 1
    assert received[0]["kind"] == "form_submission"
    assert received[0]["data"]["id"] == response.json()["id"]
    assert received[0]["data"]["name"] == "Jane Doe"


def test_webhook_failure_does_not_change_response(client, session_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    notifier = WebhookNotifier("https://hooks.test/lead", transport=httpx.MockTransport(handler))
    app.state.webhook_notifier = notifier

    response = client.post("/api/inquiries", json=VALID)
    client.portal.call(notifier.drain)

    assert response.status_code == 201
    assert _count_inquiries(session_factory) == 1


def test_persistence_failure_returns_500_and_skips_webhook(client):
    class FailingStore:
        async def create_inquiry(self, inquiry):
            raise PersistenceError("database unavailable")

        async def create_visit(self, visit):
            raise PersistenceError("database unavailable")

    received = []
    notifier = WebhookNotifier(
        "https://hooks.test/lead",
        transport=httpx.MockTransport(lambda request: received.append(request) or httpx.Response(200)),
    )
    app.state.inquiry_store = FailingStore()
    app.state.webhook_notifier = notifier

    response = client.post("/api/inquiries", json=VALID)
    client.portal.call(notifier.drain)

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Internal server error"
    assert "database unavailable" not in response.text
    assert received == []


def test_error_response_carries_request_id(client):
    response = client.post("/api/inquiries", json={}, headers={"X-Request-ID": "req-123"})

    assert response.status_code == 400
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.json()["request_id"] == "req-123"


def test_unknown_route_returns_problem_response(client):
    response = client.get("/api/nothing-here", headers={"X-Request-ID": "req-404"})

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["request_id"] == "req-404"


def test_responses_carry_security_headers(client):
    response = client.post("/api/inquiries", json=VALID)

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Request-ID"]
