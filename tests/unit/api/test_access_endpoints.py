"""
Name: HTTP API Unit Tests

Responsibilities:
  - Card issuance / lifecycle endpoints (facade ids only, never the real id)
  - Token + decision flow
  - Boundary validation as RFC 7807 (422) and unknown cards (404 / denied)
  - Audit queries, /healthz and /metrics

Collaborators:
  - fastapi.testclient.TestClient
  - access_engine.api.main.create_app (isolated Container per app)
  - access_engine.container.build_container (engine clock pinned to a Monday)
"""

import pytest
from fastapi.testclient import TestClient

from access_engine.api.main import create_app
from access_engine.container import build_container
from access_engine.crosscutting.config import Settings
from tests.conftest import MONDAY_10AM, FakeClock


@pytest.fixture
def client():
    settings = Settings(
        app_env="test",
        audit_log_path="",
        token_secret="api-test-secret",
        site_timezone="UTC",
    )
    container = build_container(settings, clock=FakeClock(MONDAY_10AM))
    with TestClient(create_app(settings, container=container)) as test_client:
        yield test_client


def _issue(client, floors=("LOW",), rooms=(), **permission) -> dict:
    body = {
        "issuer_id": "ACME",
        "serial_number": "001",
        "issue_date": "2025-01-01",
        "permission": {"floors": list(floors), "rooms": list(rooms), **permission},
        "issued_by": "admin",
    }
    response = client.post("/v1/cards", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def _token(client, facade_id: str) -> str:
    response = client.post("/v1/tokens", json={"facade_id": facade_id})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def _decide(client, facade_id, token, floor="LOW", room=None, **extra):
    return client.post(
        "/v1/access/decisions",
        json={
            "facade_id": facade_id,
            "floor": floor,
            "token": token,
            "room": room,
            **extra,
        },
    )


@pytest.mark.unit
class TestCardEndpoints:
    def test_issue_returns_facade_ids_only(self, client):
        card = _issue(client)

        assert len(card["facade_ids"]) == 1
        assert card["active"] is True
        assert "ACM-001-20250101" not in str(card)

    def test_duplicate_issue_is_409(self, client):
        facade = _issue(client)["facade_ids"][0]
        client.post(f"/v1/cards/{facade}/revoke", json={"actor": "security"})

        response = client.post(
            "/v1/cards",
            json={
                "issuer_id": "ACME",
                "serial_number": "001",
                "issue_date": "2025-01-01",
                "permission": {"floors": ["LOW", "MEDIUM", "HIGH"]},
            },
        )

        assert response.status_code == 409
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "CONFLICT"
        assert "ACM-001-20250101" not in response.text
        assert client.get(f"/v1/cards/{facade}").json()["active"] is False

    def test_get_card(self, client):
        facade = _issue(client)["facade_ids"][0]

        response = client.get(f"/v1/cards/{facade}")

        assert response.status_code == 200
        assert response.json()["facade_ids"] == [facade]

    def test_unknown_card_is_404(self, client):
        response = client.get("/v1/cards/unknown")

        assert response.status_code == 404
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "NOT_FOUND"

    def test_modify_permissions(self, client):
        facade = _issue(client)["facade_ids"][0]

        response = client.put(
            f"/v1/cards/{facade}/permissions",
            json={"permission": {"floors": ["HIGH"]}, "modified_by": "admin"},
        )

        assert response.status_code == 200
        assert "HIGH" in response.json()["permission"]

    def test_time_limited_requires_window(self, client):
        response = client.post(
            "/v1/cards",
            json={
                "issuer_id": "ACME",
                "serial_number": "002",
                "permission": {"kind": "time_limited", "floors": ["LOW"]},
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_inverted_window_is_invalid_time(self, client):
        response = client.post(
            "/v1/cards",
            json={
                "issuer_id": "ACME",
                "serial_number": "003",
                "permission": {
                    "kind": "time_limited",
                    "floors": ["LOW"],
                    "valid_from": "2025-01-07T00:00:00Z",
                    "valid_until": "2025-01-06T00:00:00Z",
                },
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_TIME"

    def test_unknown_floor_in_permission(self, client):
        response = client.post(
            "/v1/cards",
            json={
                "issuer_id": "ACME",
                "serial_number": "004",
                "permission": {"floors": ["ROOFTOP"]},
            },
        )

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_FLOOR"


@pytest.mark.unit
class TestDecisionEndpoints:
    def test_token_then_decision(self, client):
        facade = _issue(client, floors=("LOW", "HIGH"))["facade_ids"][0]
        token = _token(client, facade)

        assert _decide(client, facade, token, "LOW").json() == {"granted": True}
        assert _decide(client, facade, token, "HIGH").json() == {"granted": True}
        assert _decide(client, facade, token, "MEDIUM").json() == {"granted": False}

    def test_token_for_unknown_card_is_404(self, client):
        response = client.post("/v1/tokens", json={"facade_id": "nobody"})

        assert response.status_code == 404

    def test_unknown_card_decision_is_denied(self, client):
        response = _decide(client, "nobody", "token")

        assert response.status_code == 200
        assert response.json() == {"granted": False}

    def test_bad_token_is_denied(self, client):
        facade = _issue(client)["facade_ids"][0]
        _token(client, facade)

        assert _decide(client, facade, "forged").json() == {"granted": False}

    def test_invalid_floor_is_422(self, client):
        facade = _issue(client)["facade_ids"][0]
        token = _token(client, facade)

        response = _decide(client, facade, token, floor="BASEMENT")

        assert response.status_code == 422
        assert response.headers["content-type"].startswith("application/problem+json")
        assert response.json()["code"] == "INVALID_FLOOR"

    def test_caller_cannot_choose_decision_time(self, client):
        card = _issue(
            client,
            kind="time_limited",
            valid_from="2025-01-01T00:00:00Z",
            valid_until="2025-01-02T00:00:00Z",
        )
        facade = card["facade_ids"][0]
        token = _token(client, facade)

        response = _decide(client, facade, token, at="2025-01-01T12:00:00Z")

        assert response.status_code == 200
        assert response.json() == {"granted": False}

    def test_high_floor_at_engine_clock(self, client):
        facade = _issue(client, floors=("HIGH",))["facade_ids"][0]
        token = _token(client, facade)

        assert _decide(client, facade, token, "HIGH").json() == {"granted": True}

    def test_revoke_then_denied_and_reactivate(self, client):
        facade = _issue(client)["facade_ids"][0]
        token = _token(client, facade)

        revoke = client.post(f"/v1/cards/{facade}/revoke", json={"actor": "security"})
        assert revoke.json() == {"ok": True}
        assert _decide(client, facade, token).json() == {"granted": False}
        assert client.get(f"/v1/cards/{facade}").json()["active"] is False

        client.post(f"/v1/cards/{facade}/reactivate", json={"actor": "security"})
        assert _decide(client, facade, token).json() == {"granted": True}


@pytest.mark.unit
class TestAuditEndpoints:
    def test_card_history(self, client):
        facade = _issue(client)["facade_ids"][0]
        token = _token(client, facade)
        _decide(client, facade, token)

        response = client.get(f"/v1/audit/cards/{facade}")

        assert response.status_code == 200
        records = response.json()["records"]
        assert [r["event_type"] for r in records] == ["CARD_CREATION", "ACCESS_ATTEMPT"]
        assert records[1]["location"] == "Floor: LOW"
        assert "card_id" not in records[0]

    def test_location_history(self, client):
        facade = _issue(client)["facade_ids"][0]
        token = _token(client, facade)
        _decide(client, facade, token)

        response = client.get(
            "/v1/audit/locations",
            params={
                "location": "Floor: LOW",
                "start": "2025-01-06T00:00:00Z",
                "end": "2025-01-06T23:59:59Z",
            },
        )

        assert response.status_code == 200
        assert len(response.json()["records"]) == 1

    def test_inverted_range_is_422(self, client):
        response = client.get(
            "/v1/audit/locations",
            params={
                "location": "Floor: LOW",
                "start": "2025-01-07T00:00:00Z",
                "end": "2025-01-06T00:00:00Z",
            },
        )

        assert response.status_code == 422


@pytest.mark.unit
class TestOperationalEndpoints:
    def test_healthz_echoes_request_id(self, client):
        response = client.get("/healthz", headers={"X-Request-Id": "req-123"})

        assert response.status_code == 200
        assert response.json() == {
            "ok": True,
            "durable_audit": False,
            "request_id": "req-123",
        }
        assert response.headers["X-Request-Id"] == "req-123"

    def test_metrics_exposes_decisions(self, client):
        facade = _issue(client)["facade_ids"][0]
        _decide(client, facade, _token(client, facade))

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "access_decisions_total" in response.text
