"""Tests for the Web3DNA HTTP and websocket API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from web3dna.api.app.main import create_app
from web3dna.api.config.settings import APISettings
from web3dna.core.hashing import digest, keyed_digest
from web3dna.core.ip_risk import FAILED_TAG
from web3dna.database.registry import InMemoryFraudRegistry
from web3dna.database.sql_registry import SqlFraudRegistry
from web3dna.models.alerts import DeliveryStatus, FraudSignature

from conftest import WebhookRecorder

DNA_HASH = "7b5e11e2ade1a8b5ba87245b7bc7c01c5c818133cb363e8e6e631f76fd5fd91d"


@pytest.fixture
def registry():
    return InMemoryFraudRegistry(seed=[
        FraudSignature(fraud_id="fraud-001", dna_hash=DNA_HASH, tags=["rugpull", "vpn"], source="RugHunter AI"),
        FraudSignature(fraud_id="fraud-002", dna_hash="e" * 64, tags=["vpn"], source="manual review"),
    ])


@pytest.fixture
def api_client(registry):
    """FastAPI test client with in-memory registry and mocked webhooks."""
    with TestClient(make_app(registry)) as client:
        yield client


def make_app(registry):
    settings = APISettings(
        mattermost_webhook_url=None,
        admin_webhook_url=None,
        log_format="text",
        access_log=False,
    )
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(WebhookRecorder()))
    return create_app(settings, registry=registry, http_client=http_client)


def drain_alerts(client):
    """Wait for in-flight alert deliveries on the app loop; outcomes by sink."""
    fanout = client.app.state.fanout
    client.portal.call(fanout.drain)
    return {outcome.sink: outcome for outcome in fanout.recent_outcomes()}


class TestHealth:
    def test_health(self, api_client):
        response = api_client.get("/health")
        
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["registry"] == "InMemoryFraudRegistry"
        assert body["registry_connected"] is True
        assert body["sinks"] == {"websocket": True, "mattermost": False, "admin_webhook": False}
    
    def test_metrics(self, api_client):
        api_client.get("/health")
        response = api_client.get("/metrics")
        
        assert response.status_code == 200
        assert "web3dna_api_requests_total" in response.text


class TestFraudSignatures:
    def test_list(self, api_client):
        response = api_client.get("/api/v1/fraud-signatures")
        
        assert response.status_code == 200
        assert [s["fraud_id"] for s in response.json()] == ["fraud-001", "fraud-002"]
    
    def test_add_assigns_id(self, api_client):
        response = api_client.post("/api/v1/fraud-signatures",
                                   json={"dna_hash": "d" * 64, "tags": ["drainer"], "source": "RugHunter AI"})
        
        assert response.status_code == 201
        assert response.json()["fraud_id"].startswith("fraud-")
        assert len(api_client.get("/api/v1/fraud-signatures").json()) == 3

    def test_duplicate_explicit_id_conflicts(self, api_client):
        response = api_client.post("/api/v1/fraud-signatures", json={"fraud_id": "fraud-001", "dna_hash": "d" * 64})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DuplicateFraudIdError"
        assert len(api_client.get("/api/v1/fraud-signatures").json()) == 2

    def test_duplicate_explicit_id_conflicts_with_database(self):
        registry = SqlFraudRegistry("sqlite://")
        registry.create_tables()

        with TestClient(make_app(registry)) as client:
            first = client.post("/api/v1/fraud-signatures", json={"fraud_id": "fraud-777", "dna_hash": "d" * 64})
            second = client.post("/api/v1/fraud-signatures", json={"fraud_id": "fraud-777", "dna_hash": "c" * 64})
            health = client.get("/health").json()

        assert first.status_code == 201
        assert second.status_code == 409
        assert health["registry"] == "SqlFraudRegistry"
        assert health["registry_connected"] is True


class TestDNACheck:
    def test_clean_hash(self, api_client):
        response = api_client.post("/api/v1/dna/check", json={"dna_hash": "0" * 64})
        
        assert response.status_code == 200
        assert response.json() == {"matched": False, "signature": None, "alert": None}
    
    def test_match_is_broadcast_to_live_subscribers(self, api_client):
        with api_client.websocket_connect("/ws/dna-alerts") as websocket:
            response = api_client.post("/api/v1/dna/check",
                                       json={"dna_hash": DNA_HASH, "wallet": "0xabc", "platform": "DexSwap"})
            outcomes = drain_alerts(api_client)
            assert outcomes["websocket"].status is DeliveryStatus.DELIVERED
            message = websocket.receive_json()
        
        body = response.json()
        assert body["matched"] is True
        assert body["signature"]["fraud_id"] == "fraud-001"
        assert body["alert"]["severity"] == "critical"
        assert body["alert"]["risk_score"] == 90
        
        assert message["event"] == "FRAUD_MATCH"
        assert message["dna_hash"] == DNA_HASH
        assert message["wallet"] == "0xabc"
        assert message["matched_tags"] == ["rugpull", "vpn"]
    
    def test_non_critical_tags_are_moderate(self, api_client):
        body = api_client.post("/api/v1/dna/check", json={"dna_hash": "e" * 64}).json()
        
        assert body["alert"]["severity"] == "moderate"
        assert body["alert"]["risk_score"] == 60
    
    def test_risk_score_override(self, api_client):
        body = api_client.post("/api/v1/dna/check", json={"dna_hash": DNA_HASH, "risk_score": 77}).json()
        assert body["alert"]["risk_score"] == 77


class TestAlerts:
    def test_manual_alert_is_accepted(self, api_client):
        with api_client.websocket_connect("/ws/dna-alerts") as websocket:
            response = api_client.post("/api/v1/alerts", json={
                "severity": "info", "risk_score": 15, "matched_tags": [], "dna_hash": "a" * 64,
            })
            outcomes = drain_alerts(api_client)
            assert outcomes["websocket"].status is DeliveryStatus.DELIVERED
            message = websocket.receive_json()
        
        assert response.status_code == 202
        assert message["severity"] == "info"
    
    def test_binary_frame_keeps_subscription(self, api_client):
        with api_client.websocket_connect("/ws/dna-alerts") as websocket:
            websocket.send_bytes(b"\x00\x01")
            api_client.post("/api/v1/alerts", json={"severity": "moderate", "risk_score": 60, "dna_hash": "b" * 64})
            outcomes = drain_alerts(api_client)
            assert outcomes["websocket"].status is DeliveryStatus.DELIVERED
            message = websocket.receive_json()

        assert message["dna_hash"] == "b" * 64

    def test_health_counts_live_subscribers(self, api_client):
        with api_client.websocket_connect("/ws/dna-alerts"):
            assert api_client.get("/health").json()["live_subscribers"] == 1

    def test_invalid_alert_rejected(self, api_client):
        response = api_client.post("/api/v1/alerts", json={"severity": "info", "risk_score": 150, "dna_hash": "a"})
        assert response.status_code == 422


class TestIdentityEndpoints:
    def test_identity_hash(self, api_client):
        response = api_client.post("/api/v1/dna/identity", json={
            "name": "Ada Lovelace", "dob": "1815-12-10", "selfie_vector": "0.12,0.98", "id_number": "GB123456",
        })
        
        assert response.json()["identity_hash"] == digest("Ada Lovelace|1815-12-10|0.12,0.98|GB123456")
    
    def test_keyed_credential(self, api_client):
        response = api_client.post("/api/v1/dna/credential", json={
            "identity_hash": "a" * 64, "device_hash": "b" * 64, "secret": "s3cr3t", "use_hmac": True,
        })
        
        expected = keyed_digest("s3cr3t", f"{'a' * 64}|{'b' * 64}|s3cr3t")
        assert response.json()["dna_hash"] == expected
    
    def test_keyed_credential_requires_secret(self, api_client):
        response = api_client.post("/api/v1/dna/credential", json={
            "identity_hash": "a" * 64, "device_hash": "b" * 64, "use_hmac": True,
        })
        
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "EmptyKeyError"
    
    def test_fingerprint_from_report(self, api_client):
        report = {
            "userAgent": "Mozilla/5.0", "language": "en-US", "platform": "MacIntel", "screen": "1440x900",
            "pixelRatio": 2, "timezone": "America/New_York", "doNotTrack": "unavailable", "plugins": "",
            "webgl": "webgl_unsupported", "canvas": "canvas_error", "audio": "audio_error",
            "ipinfo": {"ip": "unavailable"},
        }
        
        body = api_client.post("/api/v1/dna/fingerprint", json=report).json()
        
        assert len(body["fingerprint"]) == 64
        assert body["rawSignals"]["ipinfo"]["tag"] == FAILED_TAG
        assert body["rawSignals"]["webgl"] == "webgl_unsupported"
