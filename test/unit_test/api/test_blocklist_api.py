"""
Unit tests for the /api/v1/blocklist-entries endpoints.

Requests go through the full app (middleware, exception handlers,
camelCase envelopes) against an in-memory database.
"""

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio

BASE = "/api/v1/blocklist-entries"


async def _create(client: AsyncClient, **overrides) -> dict:
    payload = {"pattern": "badword", "nameEn": "Bad word"}
    payload.update(overrides)
    response = await client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def _subsidiary(client: AsyncClient, code: str, parent_id=None) -> dict:
    response = await client.post(
        "/api/v1/subsidiaries", json={"code": code, "nameEn": code.title(), "parentId": parent_id}
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCrud:
    async def test_create_returns_camel_case(self, client: AsyncClient):
        data = await _create(client, severity="high", category="abuse")
        assert data["nameEn"] == "Bad word"
        assert data["patternType"] == "keyword"
        assert data["ownerType"] == "tenant"
        assert data["isForceUse"] is False
        assert data["version"] == 1
        assert data["tenantId"] == "tenant-a"

    async def test_create_invalid_regex(self, client: AsyncClient):
        response = await client.post(
            BASE, json={"pattern": "([", "patternType": "regex", "nameEn": "Broken"}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_PATTERN"

    async def test_create_rejects_nested_quantifiers(self, client: AsyncClient):
        response = await client.post(
            BASE, json={"pattern": "(a+)+$", "patternType": "regex", "nameEn": "Slow"}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_PATTERN"

    async def test_create_rejects_unknown_action(self, client: AsyncClient):
        response = await client.post(BASE, json={"pattern": "x", "nameEn": "X", "action": "allow"})
        assert response.status_code == 422

    async def test_create_rejects_long_pattern(self, client: AsyncClient):
        response = await client.post(BASE, json={"pattern": "x" * 513, "nameEn": "X"})
        assert response.status_code == 422

    async def test_get_missing_entry(self, client: AsyncClient):
        response = await client.get(f"{BASE}/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_update_with_version(self, client: AsyncClient):
        entry = await _create(client)
        response = await client.patch(
            f"{BASE}/{entry['id']}", json={"severity": "high", "version": 1}
        )
        assert response.status_code == 200
        assert response.json()["data"]["version"] == 2

        stale = await client.patch(f"{BASE}/{entry['id']}", json={"severity": "low", "version": 1})
        assert stale.status_code == 409
        assert stale.json()["error"]["code"] == "VERSION_CONFLICT"

    async def test_update_requires_version(self, client: AsyncClient):
        entry = await _create(client)
        response = await client.patch(f"{BASE}/{entry['id']}", json={"severity": "high"})
        assert response.status_code == 422

    async def test_delete_and_reactivate(self, client: AsyncClient):
        entry = await _create(client)
        response = await client.delete(f"{BASE}/{entry['id']}")
        assert response.status_code == 200
        assert response.json()["data"] == {"id": entry["id"], "deleted": True}

        fetched = (await client.get(f"{BASE}/{entry['id']}")).json()["data"]
        assert fetched["isActive"] is False

        response = await client.post(f"{BASE}/{entry['id']}/reactivate")
        assert response.json()["data"]["isActive"] is True

    async def test_tenant_isolation(self, client: AsyncClient):
        entry = await _create(client)
        response = await client.get(f"{BASE}/{entry['id']}", headers={"X-Tenant-ID": "tenant-b"})
        assert response.status_code == 404


class TestListing:
    async def test_paginated_envelope(self, client: AsyncClient):
        for i in range(3):
            await _create(client, pattern=f"w{i}", sortOrder=i)
        response = await client.get(BASE, params={"page": 1, "limit": 2})
        body = response.json()
        assert response.status_code == 200
        assert [item["pattern"] for item in body["data"]] == ["w0", "w1"]
        assert body["meta"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}

    async def test_inheritance_flags(self, client: AsyncClient):
        entry = await _create(client)
        jp = await _subsidiary(client, "JP")
        response = await client.get(BASE, params={"scopeType": "subsidiary", "scopeId": jp["id"]})
        item = response.json()["data"][0]
        assert item["id"] == entry["id"]
        assert item["isInherited"] is True
        assert item["canDisable"] is True
        assert item["isDisabledHere"] is False

    async def test_effective_meta(self, client: AsyncClient):
        await _create(client, pattern="a", severity="high")
        await _create(client, pattern="b", severity="low")
        response = await client.get(f"{BASE}/effective")
        body = response.json()
        assert [item["pattern"] for item in body["data"]] == ["a", "b"]
        assert body["meta"] == {"totalCount": 2, "bySeverity": {"high": 1, "medium": 0, "low": 1}}


class TestTester:
    async def test_blocked_text(self, client: AsyncClient):
        await _create(client, severity="high")
        response = await client.post(
            f"{BASE}/test", json={"scopeType": "tenant", "text": "This has a BadWord inside"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["isBlocked"] is True
        assert data["action"] == "reject"
        assert data["originalText"] == "This has a BadWord inside"
        assert data["filteredText"] == data["originalText"]
        match = data["matches"][0]
        assert match["matchedText"] == "BadWord"
        assert match["position"] == {"start": 11, "end": 18}
        assert match["severity"] == "high"
        assert match["ownerType"] == "tenant"

    async def test_replace_text(self, client: AsyncClient):
        await _create(client, action="replace", replacement="[x]")
        response = await client.post(f"{BASE}/test", json={"text": "a badword b"})
        data = response.json()["data"]
        assert data["isBlocked"] is False
        assert data["filteredText"] == "a [x] b"

    async def test_clean_text(self, client: AsyncClient):
        await _create(client)
        response = await client.post(f"{BASE}/test", json={"text": "all fine"})
        data = response.json()["data"]
        assert data == {
            "originalText": "all fine",
            "isBlocked": False,
            "action": "allow",
            "matches": [],
            "filteredText": "all fine",
        }

    @pytest.mark.parametrize("text", ["", "   "])
    async def test_empty_text_rejected(self, client: AsyncClient, text):
        response = await client.post(f"{BASE}/test", json={"text": text})
        assert response.status_code == 422

    async def test_disabled_in_scope_is_not_matched(self, client: AsyncClient):
        entry = await _create(client)
        jp = await _subsidiary(client, "JP")
        target = {"scopeType": "subsidiary", "scopeId": jp["id"]}

        response = await client.post(f"{BASE}/{entry['id']}/disable", json=target)
        assert response.json()["data"] == {"id": entry["id"], "disabled": True}
        tested = await client.post(f"{BASE}/test", json={**target, "text": "badword"})
        assert tested.json()["data"]["isBlocked"] is False

        response = await client.post(f"{BASE}/{entry['id']}/enable", json=target)
        assert response.json()["data"] == {"id": entry["id"], "enabled": True}
        tested = await client.post(f"{BASE}/test", json={**target, "text": "badword"})
        assert tested.json()["data"]["isBlocked"] is True

    async def test_disable_at_owner_scope_fails(self, client: AsyncClient):
        entry = await _create(client)
        response = await client.post(f"{BASE}/{entry['id']}/disable", json={"scopeType": "tenant"})
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "CONFIG_NOT_INHERITED"

    async def test_unknown_scope(self, client: AsyncClient):
        response = await client.post(
            f"{BASE}/test", json={"scopeType": "talent", "scopeId": "nope", "text": "hi"}
        )
        assert response.status_code == 404


class TestModeration:
    async def test_match_records_statistics(self, client: AsyncClient):
        entry = await _create(client, action="flag")
        response = await client.post(
            f"{BASE}/match", json={"text": "badword!", "scope": "marshmallow"}
        )
        assert response.status_code == 200
        assert response.json()["data"]["action"] == "flag"

        fetched = (await client.get(f"{BASE}/{entry['id']}")).json()["data"]
        assert fetched["matchCount"] == 1
        assert fetched["lastMatchedAt"] is not None

    async def test_match_requires_usage_scope(self, client: AsyncClient):
        response = await client.post(f"{BASE}/match", json={"text": "badword"})
        assert response.status_code == 422

    async def test_usage_scope_is_respected(self, client: AsyncClient):
        await _create(client, scope=["marshmallow"])
        response = await client.post(f"{BASE}/match", json={"text": "badword", "scope": "chat"})
        assert response.json()["data"]["matches"] == []


class TestPatternPreview:
    async def test_highlight(self, client: AsyncClient):
        response = await client.post(
            f"{BASE}/test-pattern",
            json={"testContent": "call 555-1234", "pattern": r"\d+", "patternType": "regex"},
        )
        data = response.json()["data"]
        assert data["matched"] is True
        assert data["positions"] == [5, 9]
        assert data["highlightedContent"] == "call <mark>555</mark>-<mark>1234</mark>"

    async def test_invalid_regex(self, client: AsyncClient):
        response = await client.post(
            f"{BASE}/test-pattern",
            json={"testContent": "x", "pattern": "(", "patternType": "regex"},
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_PATTERN"
