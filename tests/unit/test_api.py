"""Tests for the HTTP layer in atpexplorer.api.app."""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from atpexplorer.api.app import create_app
from atpexplorer.registry.store import RegistryStore
from atpexplorer.schema.config import ExplorerConfig

from conftest import BETA_FP, SHRIKE_FP, write_document


@pytest.fixture()
def store(config: ExplorerConfig) -> RegistryStore:
    store = RegistryStore(config)
    store.reload()
    return store


@pytest.fixture()
def client(store: RegistryStore) -> TestClient:
    return TestClient(create_app(store, manage_refresh=False))


class TestServiceInfo:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "protocol": "ATP",
            "version": "0.4",
            "identityCount": 3,
        }

    def test_health_checks_without_refresh_loop(self, client: TestClient) -> None:
        response = client.get("/health/checks")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["checks"]["registry_snapshot"]["status"] == "healthy"
        assert body["checks"]["refresh_loop"]["status"] == "degraded"

    def test_health_checks_with_running_store(self, config: ExplorerConfig) -> None:
        with TestClient(create_app(RegistryStore(config))) as client:
            body = client.get("/health/checks").json()
        assert body["status"] == "healthy"
        assert set(body["checks"]) == {"registry_snapshot", "refresh_loop"}

    def test_protocol_info(self, client: TestClient) -> None:
        body = client.get("/v1").json()
        assert body["protocol"] == "Agent Trust Protocol"
        assert body["endpoints"]["search"] == "/v1/search?q=query"


class TestListing:
    def test_default_page(self, client: TestClient) -> None:
        body = client.get("/v1/identities").json()
        assert body["total"] == 3
        assert body["limit"] == 100
        assert body["offset"] == 0
        assert [i["name"] for i in body["identities"]] == ["Shrike_Bot", "Beta", "Gamma"]

    def test_offset_past_end(self, client: TestClient) -> None:
        body = client.get("/v1/identities", params={"limit": 5, "offset": 10}).json()
        assert body["total"] == 3
        assert body["identities"] == []

    def test_invalid_params_fall_back_to_defaults(self, client: TestClient) -> None:
        response = client.get("/v1/identities", params={"limit": "lots", "offset": "x"})
        assert response.status_code == 200
        assert (response.json()["limit"], response.json()["offset"]) == (100, 0)

    def test_limit_is_capped(self, client: TestClient) -> None:
        assert client.get("/v1/identities?limit=99999").json()["limit"] == 1000


class TestLookups:
    def test_fingerprint_short_form(self, client: TestClient) -> None:
        response = client.get(f"/v1/identities/{SHRIKE_FP[-8:]}")
        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "Shrike_Bot"
        assert body["wallets"] == {"btc": "1ShrikeAddr"}

    def test_fingerprint_not_found(self, client: TestClient) -> None:
        response = client.get("/v1/identities/DEADBEEF")
        assert response.status_code == 404
        assert response.json() == {"error": "Identity not found", "fingerprint": "DEADBEEF"}

    def test_name(self, client: TestClient) -> None:
        assert client.get("/v1/lookup/name/BETA").json()["gpgFingerprint"] == BETA_FP

    def test_name_not_found(self, client: TestClient) -> None:
        response = client.get("/v1/lookup/name/Nobody")
        assert response.status_code == 404
        assert response.json() == {"error": "No identity found", "name": "Nobody"}

    def test_platform(self, client: TestClient) -> None:
        response = client.get("/v1/lookup/platform/github/beta-dev")
        assert response.status_code == 200
        assert response.json()["name"] == "Beta"

    def test_platform_unknown(self, client: TestClient) -> None:
        response = client.get("/v1/lookup/platform/myspace/tom")
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Platform not indexed"
        assert body["platform"] == "myspace"
        assert sorted(body["availablePlatforms"]) == ["github", "moltbook", "twitter"]

    def test_platform_handle_not_found(self, client: TestClient) -> None:
        response = client.get("/v1/lookup/platform/twitter/nobody")
        assert response.status_code == 404
        assert response.json() == {
            "error": "No identity found",
            "platform": "twitter",
            "handle": "nobody",
        }

    def test_wallet(self, client: TestClient) -> None:
        assert client.get("/v1/lookup/wallet/0xbetawallet").json()["name"] == "Beta"

    def test_wallet_not_found(self, client: TestClient) -> None:
        response = client.get("/v1/lookup/wallet/1Nothing")
        assert response.status_code == 404
        assert response.json()["address"] == "1Nothing"


class TestSearchAndStats:
    def test_search(self, client: TestClient) -> None:
        body = client.get("/v1/search", params={"q": "shrike"}).json()
        assert body["query"] == "shrike"
        assert body["count"] == 1
        assert body["results"][0]["proofOfExistence"] == {
            "txid": "abc123",
            "network": "bitcoin",
        }

    def test_short_query_is_bad_request(self, client: TestClient) -> None:
        response = client.get("/v1/search", params={"q": "s"})
        assert response.status_code == 400
        assert response.json() == {"error": "Query must be at least 2 characters"}

    def test_missing_query_is_bad_request(self, client: TestClient) -> None:
        assert client.get("/v1/search").status_code == 400

    def test_stats(self, client: TestClient) -> None:
        body = client.get("/v1/stats").json()
        assert body["totalIdentities"] == 3
        assert body["platforms"]["github"] == 2
        assert body["chains"] == {"btc": 1, "eth": 1}
        assert "lastUpdated" in body


class TestLifespan:
    def test_app_starts_and_stops_store(self, config: ExplorerConfig) -> None:
        store = RegistryStore(config)
        with TestClient(create_app(store)) as client:
            assert store.is_running
            assert client.get("/health").json()["identityCount"] == 3
        assert not store.is_running

    def test_reload_is_visible_to_next_request(
        self, store: RegistryStore, client: TestClient, identities_dir: Path
    ) -> None:
        write_document(identities_dir, "d-delta.json", {"name": "Delta"})
        assert client.get("/v1/lookup/name/delta").status_code == 404
        store.reload()
        assert client.get("/v1/lookup/name/delta").status_code == 200
