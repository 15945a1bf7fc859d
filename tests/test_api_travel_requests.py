from __future__ import annotations

from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from travel_requests.api.core.container import Container, get_container
from travel_requests.app.main import app
from travel_requests.config import Settings
from travel_requests.db.connection import get_db
from travel_requests.domain.travel.status import TravelRequestStatus
from tests.fixtures.mock_policy_provider import MockPolicyProvider
from tests.fixtures.recording_channel import RecordingNotificationChannel

ALICE = {"X-User-Id": "alice", "X-User-Name": "Alice Requester"}
BOB = {"X-User-Id": "bob", "X-User-Name": "Bob Approver"}


@pytest.fixture
def channel() -> RecordingNotificationChannel:
    return RecordingNotificationChannel()


@pytest.fixture
def container(channel) -> Container:
    return Container(Settings(), notifier=channel)


@pytest_asyncio.fixture
async def client(session_factory, container):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_container] = lambda: container
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
    app.dependency_overrides.clear()


def _trip(today, start: int = 10, end: int = 15, destination: str = "Lisbon") -> dict:
    return {
        "destination": destination,
        "departure_date": (today + timedelta(days=start)).isoformat(),
        "return_date": (today + timedelta(days=end)).isoformat(),
    }


@pytest.mark.asyncio
async def test_health(client) -> None:
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["checks"] == {"database": "healthy"}
    assert "X-Trace-Id" in resp.headers


@pytest.mark.asyncio
async def test_missing_identity_is_unauthenticated(client, today) -> None:
    resp = await client.post("/v1/travel-requests", json=_trip(today))

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_ignores_client_status(client, today) -> None:
    payload = {**_trip(today), "status": "APPROVED", "requester_id": "mallory"}

    resp = await client.post("/v1/travel-requests", json=payload, headers=ALICE)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "REQUESTED"
    assert data["status_label"] == "Requested"
    assert data["requester_id"] == "alice"
    assert data["requester_name"] == "Alice Requester"


@pytest.mark.asyncio
async def test_create_reports_field_errors(client, today) -> None:
    resp = await client.post("/v1/travel-requests", json=_trip(today, start=5, end=5), headers=ALICE)

    assert resp.status_code == 422
    body = resp.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["errors"]["return_date"] == ["The return date must be after the departure date."]


@pytest.mark.asyncio
async def test_show_is_forbidden_for_others_and_404_when_missing(client, make_request) -> None:
    request = make_request("alice")

    own = await client.get(f"/v1/travel-requests/{request.id}", headers=ALICE)
    other = await client.get(f"/v1/travel-requests/{request.id}", headers=BOB)
    missing = await client.get("/v1/travel-requests/9999", headers=ALICE)

    assert own.status_code == 200
    assert other.status_code == 403
    assert other.json()["code"] == "FORBIDDEN"
    assert missing.status_code == 404
    assert missing.json()["message"] == "Travel request 9999 not found"


@pytest.mark.asyncio
async def test_listing_is_scoped_filtered_and_clamped(client, make_request) -> None:
    make_request("alice", destination="Paris")
    make_request("alice", destination="Berlin")
    make_request("bob", destination="Paris")

    resp = await client.get(
        "/v1/travel-requests",
        params={"destination": "par", "status": "", "per_page": 500},
        headers=ALICE,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert [r["destination"] for r in body["data"]] == ["Paris"]
    assert body["meta"]["total"] == 1
    assert body["meta"]["per_page"] == 100


@pytest.mark.asyncio
async def test_listing_uses_default_page_size(client, make_request) -> None:
    for _ in range(16):
        make_request("alice")

    resp = await client.get("/v1/travel-requests", headers=ALICE)

    meta = resp.json()["meta"]
    assert len(resp.json()["data"]) == 15
    assert meta["per_page"] == 15
    assert meta["last_page"] == 2
    assert meta["has_next"] is True


@pytest.mark.asyncio
async def test_listing_huge_page_is_empty(client, make_request) -> None:
    make_request("alice")

    resp = await client.get("/v1/travel-requests", params={"page": 10**18}, headers=ALICE)

    assert resp.status_code == 200
    assert resp.json()["data"] == []
    assert resp.json()["meta"]["total"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "params",
    [
        {"travel_from": "2026-02-01"},
        {"created_to": "2026-02-01"},
        {"departure_from": "2026-02-10", "departure_to": "2026-02-01"},
        {"status": "PENDING"},
    ],
)
async def test_listing_rejects_bad_filters(client, params) -> None:
    resp = await client.get("/v1/travel-requests", params=params, headers=ALICE)

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_update_by_owner_and_protected_fields(client, make_request) -> None:
    request = make_request("alice")

    ok = await client.patch(f"/v1/travel-requests/{request.id}", json={"destination": "Rome"}, headers=ALICE)
    protected = await client.put(f"/v1/travel-requests/{request.id}", json={"status": "APPROVED"}, headers=ALICE)
    not_owner = await client.put(f"/v1/travel-requests/{request.id}", json={"status": "APPROVED"}, headers=BOB)

    assert ok.status_code == 200
    assert ok.json()["data"]["destination"] == "Rome"
    assert protected.status_code == 422
    assert protected.json()["errors"]["status"] == ["The status field is prohibited."]
    assert not_owner.status_code == 403


@pytest.mark.asyncio
async def test_status_flow_notifies_requester(client, channel, today) -> None:
    created = await client.post("/v1/travel-requests", json=_trip(today), headers=ALICE)
    request_id = created.json()["data"]["id"]

    self_approve = await client.patch(
        f"/v1/travel-requests/{request_id}/status", json={"status": "APPROVED"}, headers=ALICE
    )
    approved = await client.patch(
        f"/v1/travel-requests/{request_id}/status", json={"status": "APPROVED"}, headers=BOB
    )
    again = await client.patch(
        f"/v1/travel-requests/{request_id}/status", json={"status": "APPROVED"}, headers=BOB
    )

    assert self_approve.status_code == 403
    assert self_approve.json()["message"] == "You cannot approve your own travel request."
    assert approved.status_code == 200
    data = approved.json()["data"]
    assert data["status"] == "APPROVED"
    assert data["approved_by"] == "bob"
    assert data["cancelled_by"] is None
    assert again.status_code == 403
    assert [s.new_status for s in channel.signals] == [TravelRequestStatus.APPROVED]
    assert channel.signals[0].actor_name == "Bob Approver"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["REQUESTED", "PENDING", ""])
async def test_status_update_rejects_invalid_targets(client, make_request, status) -> None:
    request = make_request("alice")

    resp = await client.patch(f"/v1/travel-requests/{request.id}/status", json={"status": status}, headers=BOB)

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_cancel_policy_comes_from_provider(client, channel, make_request) -> None:
    mock_provider = MockPolicyProvider()
    container = Container(Settings(), notifier=channel, policy_provider=mock_provider)
    app.dependency_overrides[get_container] = lambda: container
    request = make_request("alice")

    resp = await client.patch(
        f"/v1/travel-requests/{request.id}/status", json={"status": "CANCELLED"}, headers=ALICE
    )

    assert resp.status_code == 200
    assert resp.json()["data"]["cancelled_by"] == "alice"
    assert mock_provider.actors == ["alice"]


@pytest.mark.asyncio
async def test_delete(client, make_request) -> None:
    pending = make_request("alice")
    approved = make_request("alice", status=TravelRequestStatus.APPROVED)

    deleted = await client.delete(f"/v1/travel-requests/{pending.id}", headers=ALICE)
    refused = await client.delete(f"/v1/travel-requests/{approved.id}", headers=ALICE)
    gone = await client.get(f"/v1/travel-requests/{pending.id}", headers=ALICE)

    assert deleted.status_code == 204
    assert refused.status_code == 403
    assert gone.status_code == 404
