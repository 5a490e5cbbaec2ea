"""
Tests for the block-explorer helpers (no network: httpx.MockTransport).
"""
import httpx
import pytest

from poa_receipts.deps import get_explorer
from poa_receipts.explorer import (
    ExplorerClient,
    ExplorerError,
    explorer_tx_url,
    normalize_txid,
)
from poa_receipts.main import app


def _client(handler, network="testnet"):
    return ExplorerClient(network=network, transport=httpx.MockTransport(handler))


def _sequence(*responses):
    """Handler returning the given (status, json) pairs in order, then repeating the last."""
    calls = []

    def handler(request):
        calls.append(request.url.path)
        status, body = responses[min(len(calls) - 1, len(responses) - 1)]
        return httpx.Response(status, json=body)

    return handler, calls


class TestLinks:
    def test_mainnet(self):
        assert explorer_tx_url("0xabc") == "https://explorer.stacks.co/txid/0xabc"

    def test_testnet(self):
        assert explorer_tx_url("0xabc", "testnet").endswith("/txid/0xabc?chain=testnet")

    def test_normalize(self):
        assert normalize_txid("abc") == "0xabc"
        assert normalize_txid(" 0xabc ") == "0xabc"


class TestExplorerClient:
    def test_get_transaction(self):
        handler, calls = _sequence((200, {"tx_id": "0xabc", "tx_status": "success"}))
        with _client(handler) as c:
            tx = c.get_transaction("abc")
        assert tx["tx_status"] == "success"
        assert calls == ["/extended/v1/tx/0xabc"]

    def test_not_indexed_yet(self):
        handler, _ = _sequence((404, {"error": "not found"}))
        with _client(handler) as c:
            assert c.get_transaction("0xabc") is None

    def test_server_error(self):
        handler, _ = _sequence((503, {}))
        with _client(handler) as c, pytest.raises(ExplorerError):
            c.get_transaction("0xabc")

    def test_unknown_network(self):
        with pytest.raises(ValueError):
            ExplorerClient(network="devnet")


class TestPolling:
    def test_waits_until_settled(self):
        handler, calls = _sequence(
            (404, {}),
            (200, {"tx_status": "pending"}),
            (200, {"tx_status": "success", "block_height": 12}),
        )
        sleeps = []
        with _client(handler) as c:
            tx = c.wait_for_confirmation("0xabc", sleep=sleeps.append)
        assert tx["block_height"] == 12
        assert len(calls) == 3
        assert sleeps == [5.0, 5.0]

    def test_gives_up_after_budget(self):
        handler, calls = _sequence((200, {"tx_status": "pending"}))
        sleeps = []
        with _client(handler) as c:
            assert c.wait_for_confirmation("0xabc", attempts=4, interval=1.0, sleep=sleeps.append) is None
        assert len(calls) == 4
        assert sleeps == [1.0, 1.0, 1.0]

    def test_transient_error_counts_as_attempt(self):
        handler, calls = _sequence(
            (503, {}),
            (200, {"tx_status": "success", "block_height": 8}),
        )
        sleeps = []
        with _client(handler) as c:
            tx = c.wait_for_confirmation("0xabc", attempts=3, interval=2.0, sleep=sleeps.append)
        assert tx["tx_status"] == "success"
        assert len(calls) == 2
        assert sleeps == [2.0]

    def test_errors_until_budget_spent(self):
        handler, calls = _sequence((502, {}))
        with _client(handler) as c:
            assert c.wait_for_confirmation("0xabc", attempts=3, sleep=lambda _: None) is None
        assert len(calls) == 3


class TestTxStatusEndpoint:
    def _override(self, handler):
        def _dep():
            c = _client(handler)
            try:
                yield c
            finally:
                c.close()

        app.dependency_overrides[get_explorer] = _dep

    def test_status(self, client):
        handler, _ = _sequence(
            (200, {"tx_id": "0xabc", "tx_status": "success", "block_height": 3})
        )
        self._override(handler)
        resp = client.get("/api/tx-status", params={"txid": "0xabc"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "success"
        assert body["blockHeight"] == 3
        assert body["explorerUrl"].endswith("?chain=testnet")

    def test_not_found(self, client):
        handler, _ = _sequence((404, {}))
        self._override(handler)
        assert client.get("/api/tx-status", params={"txid": "0xabc"}).status_code == 404

    def test_upstream_failure(self, client):
        handler, _ = _sequence((500, {}))
        self._override(handler)
        resp = client.get("/api/tx-status", params={"txid": "0xabc"})
        assert resp.status_code == 502
        assert resp.json() == {"error": "Block explorer unavailable"}
