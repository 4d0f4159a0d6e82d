"""
Tests for the Collins client using the fake Collins server.

Starts the fake server in a thread, points the client at it, and
checks what comes back through the real HTTP and JSON path.
"""

import threading

import httpx
import pytest

from collins_exporter.collector.collins_client import CollinsClient
from collins_exporter.collector.errors import BackendUnavailable, MidPaginationFailure
from collins_exporter.collector.fetcher import InventoryFetcher
from collins_exporter.config import CollinsConfig
from collins_exporter.mock.fake_collins_server import (
    DEFAULT_PASSWORD,
    DEFAULT_USERNAME,
    FakeCollinsServer,
)
from collins_exporter.mock.generator import MockInventory


@pytest.fixture
def fake_collins():
    server = FakeCollinsServer(inventory=MockInventory(asset_count=25, seed=7))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


def _client(server, password=DEFAULT_PASSWORD) -> CollinsClient:
    return CollinsClient(CollinsConfig(
        host=server.url, username=DEFAULT_USERNAME, password=password, timeout=5,
    ))


def test_find_returns_one_page(fake_collins):
    client = _client(fake_collins)
    try:
        records, pagination = client.find("TYPE = SERVER_NODE", 0, 10)
    finally:
        client.close()

    assert len(records) == 10
    assert records[0].tag == "M0000000"
    assert pagination.current_page == 0
    assert pagination.next_page == 1
    assert pagination.total_results == 25


def test_fetcher_pages_through_everything(fake_collins):
    client = _client(fake_collins)
    try:
        records = InventoryFetcher(client, page_size=10).fetch_all()
    finally:
        client.close()

    assert [r.tag for r in records] == [f"M{i:07d}" for i in range(25)]
    assert fake_collins.requests_seen == 3


def test_bad_credentials_are_backend_unavailable(fake_collins):
    client = _client(fake_collins, password="wrong")
    try:
        with pytest.raises(BackendUnavailable) as excinfo:
            client.find("", 0, 10)
    finally:
        client.close()

    assert "401" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)


def test_server_error_mid_pagination(fake_collins):
    fake_collins.fail_pages = {1}
    client = _client(fake_collins)
    try:
        with pytest.raises(MidPaginationFailure) as excinfo:
            InventoryFetcher(client, page_size=10).fetch_all()
    finally:
        client.close()

    assert len(excinfo.value.records) == 10
    assert excinfo.value.page == 1


def test_connection_refused():
    # Grab a free port, then close it so nothing is listening
    server = FakeCollinsServer()
    url = server.url
    server.server_close()

    client = CollinsClient(CollinsConfig(host=url, timeout=2))
    try:
        with pytest.raises(BackendUnavailable):
            client.find("", 0, 10)
    finally:
        client.close()


def test_non_json_body():
    def handler(request):
        return httpx.Response(200, text="<html>login</html>")

    client = CollinsClient(CollinsConfig(host="http://collins.test"), transport=httpx.MockTransport(handler))
    with pytest.raises(BackendUnavailable):
        client.find("", 0, 10)
    client.close()


def test_sends_query_and_page_options():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json=MockInventory(asset_count=3).page(0, 10))

    config = CollinsConfig(host="http://collins.test/", username="u", password="p")
    client = CollinsClient(config, transport=httpx.MockTransport(handler))
    records, _ = client.find("TYPE = SERVER_NODE", 2, 50)
    client.close()

    assert len(records) == 3
    assert seen["query"] == "TYPE = SERVER_NODE"
    assert seen["page"] == "2"
    assert seen["size"] == "50"
    assert seen["details"] == "true"
    assert seen["auth"].startswith("Basic ")


def test_name_includes_host():
    client = CollinsClient(CollinsConfig(host="http://collins.example.com:8080"))
    assert "collins.example.com:8080" in client.name()
    client.close()
