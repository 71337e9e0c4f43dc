"""Request ID propagation and access log levels."""

import logging

import pytest

from app.middleware.logging import level_for_status
from app.middleware.request_id import new_request_id, resolve_request_id


@pytest.mark.parametrize(
    "status,level",
    [(200, logging.INFO), (204, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
)
def test_level_for_status(status, level):
    assert level_for_status(status) == level


def test_new_request_id_is_short_hex():
    rid = new_request_id()
    assert len(rid) == 8
    int(rid, 16)


@pytest.mark.asyncio
async def test_request_id_generated_when_absent(test_client):
    response = await test_client.get("/api/users")
    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_access_log_line(test_client, caplog):
    caplog.set_level(logging.INFO, logger="userbase.access")

    await test_client.get("/api/users/missing", headers={"X-Request-ID": "trace-1"})

    records = [r for r in caplog.records if r.name == "userbase.access"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert records[0].status == 404
    assert records[0].request_id == "trace-1"
    assert records[0].route == "/api/users/{user_id}"
    assert records[0].getMessage().startswith("GET /api/users/missing -> 404 in ")


@pytest.mark.asyncio
async def test_health_not_access_logged(test_client, caplog):
    caplog.set_level(logging.INFO, logger="userbase.access")
    await test_client.get("/health")
    assert not [r for r in caplog.records if r.name == "userbase.access"]


@pytest.mark.parametrize("header", ["trace-1", "a.b_c-9", "x" * 64])
def test_client_request_id_kept(header):
    assert resolve_request_id(header) == header


@pytest.mark.parametrize("header", [None, "", "x" * 65, "has space", "line\nbreak"])
def test_unusable_client_request_id_replaced(header):
    rid = resolve_request_id(header)
    assert rid != header
    assert len(rid) == 8


@pytest.mark.asyncio
async def test_unmatched_path_logged_with_raw_path(test_client, caplog):
    caplog.set_level(logging.INFO, logger="userbase.access")

    await test_client.get("/nowhere")

    records = [r for r in caplog.records if r.name == "userbase.access"]
    assert records[0].route == "/nowhere"
