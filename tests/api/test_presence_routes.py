"""Presence and Settings Routes - HTTP surface over the scheduler and store.

Invariants:
    - enable publishes once, disable clears presence once
    - preview never reaches the host bus
    - settings edits while enabled republish before the response returns
    - domain errors come back as structured JSON with their status code
"""

import logging

from dynamic_rpc.core.errors import AssetResolutionError


async def test_health(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_status_starts_disabled(client):
    res = await client.get("/api/v1/presence")
    body = res.json()
    assert res.status_code == 200
    assert body["enabled"] is False
    assert [lane["name"] for lane in body["lanes"]] == ["details", "state"]
    assert body["last_event"] is None


async def test_enable_publishes_activity(client, host_events):
    res = await client.post("/api/v1/presence/enable")
    body = res.json()
    assert res.status_code == 200
    assert body["enabled"] is True
    assert body["activity"]["name"] == "Test Game"
    assert len(host_events) == 1
    assert host_events[0]["type"] == "LOCAL_ACTIVITY_UPDATE"
    assert host_events[0]["activity"]["name"] == "Test Game"


async def test_disable_clears_presence_once(client, host_events):
    await client.post("/api/v1/presence/enable")
    await client.post("/api/v1/presence/disable")
    await client.post("/api/v1/presence/disable")
    assert [e["activity"] for e in host_events[1:]] == [None]
    status = (await client.get("/api/v1/presence")).json()
    assert status["enabled"] is False
    assert status["last_event"]["activity"] is None


async def test_preview_does_not_dispatch(client, host_events):
    res = await client.get("/api/v1/presence/preview")
    assert res.status_code == 200
    assert res.json()["activity"]["name"] == "Test Game"
    assert host_events == []


async def test_settings_patch_republishes_when_enabled(client, host_events):
    await client.post("/api/v1/presence/enable")
    res = await client.patch("/api/v1/settings", json={
        "details": "In the lobby",
        "stateRandomLines": "one\ntwo",
        "stateRotationMode": "sequential",
        "stateRotationInterval": 30,
    })
    body = res.json()
    assert res.status_code == 200
    assert body["appName"] == "Test Game"
    assert body["stateRotationMode"] == "sequential"
    assert host_events[-1]["activity"]["details"] == "In the lobby"
    assert host_events[-1]["activity"]["state"] == "one"

    status = (await client.get("/api/v1/presence")).json()
    state_lane = status["lanes"][1]
    assert state_lane["armed"] is True
    assert state_lane["lines"] == ["one", "two"]


async def test_settings_patch_when_disabled_does_not_publish(client, host_events):
    res = await client.patch("/api/v1/settings", json={"details": "quiet"})
    assert res.status_code == 200
    assert host_events == []
    assert (await client.get("/api/v1/settings")).json()["details"] == "quiet"


async def test_invalid_setting_returns_400(client):
    res = await client.patch("/api/v1/settings", json={"timestampMode": 42})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "CONFIGURATION_ERROR"


async def test_non_object_settings_body_returns_400(client):
    res = await client.patch("/api/v1/settings", json=["not", "an", "object"])
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_asset_failure_returns_502(client, store, resolver):
    store.update({"imageBig": "logo"})
    resolver.error = AssetResolutionError("unknown asset", "0", "logo")
    res = await client.get("/api/v1/presence/preview")
    assert res.status_code == 502
    body = res.json()["error"]
    assert body["code"] == "ASSET_RESOLUTION_ERROR"
    assert body["context"]["asset_key"] == "logo"


async def test_asset_failure_logged_with_presence_context(client, store, resolver, caplog):
    store.update({"appID": "42", "imageSmall": "badge"})
    resolver.error = AssetResolutionError("unknown asset", "42", "badge")
    with caplog.at_level(logging.WARNING, logger="dynamic_rpc.api.error_handlers"):
        await client.get("/api/v1/presence/preview")
    record = next(r for r in caplog.records if r.name == "dynamic_rpc.api.error_handlers")
    assert record.levelno == logging.ERROR
    assert record.error_code == "ASSET_RESOLUTION_ERROR"
    assert record.app_id == "42"
    assert record.asset_key == "badge"


async def test_configuration_error_logged_as_warning(client, caplog):
    with caplog.at_level(logging.WARNING, logger="dynamic_rpc.api.error_handlers"):
        await client.patch("/api/v1/settings", json={"timestampMode": 42})
    record = next(r for r in caplog.records if r.name == "dynamic_rpc.api.error_handlers")
    assert record.levelno == logging.WARNING
    assert record.error_code == "CONFIGURATION_ERROR"
