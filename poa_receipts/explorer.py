"""
Stacks block-explorer helpers: deep links and a read-only transaction client.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

EXPLORER_BASE = "https://explorer.stacks.co"
API_BASES = {
    "mainnet": "https://api.mainnet.hiro.so",
    "testnet": "https://api.testnet.hiro.so",
}

# 60 attempts × 5 s: give up after five minutes
POLL_ATTEMPTS = 60
POLL_INTERVAL = 5.0


def normalize_txid(txid: str) -> str:
    txid = txid.strip()
    return txid if txid.startswith("0x") else f"0x{txid}"


def explorer_tx_url(txid: str, network: str = "mainnet") -> str:
    url = f"{EXPLORER_BASE}/txid/{txid}"
    if network != "mainnet":
        url += f"?chain={network}"
    return url


class ExplorerError(RuntimeError):
    """The explorer API answered with something other than a transaction."""


class ExplorerClient:
    """Thin synchronous client for the Hiro ``/extended/v1/tx`` endpoint."""

    def __init__(
        self,
        network: str = "testnet",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        if network not in API_BASES:
            raise ValueError(f"unknown network: {network}")
        self.network = network
        self._client = httpx.Client(
            base_url=API_BASES[network], timeout=timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ExplorerClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def get_transaction(self, txid: str) -> Optional[dict[str, Any]]:
        """Return the transaction JSON, or ``None`` if the API does not know it yet."""
        try:
            resp = self._client.get(f"/extended/v1/tx/{normalize_txid(txid)}")
        except httpx.HTTPError as exc:
            raise ExplorerError(f"explorer request failed: {exc}") from exc
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise ExplorerError(f"explorer returned HTTP {resp.status_code}")
        return resp.json()

    def wait_for_confirmation(
        self,
        txid: str,
        attempts: int = POLL_ATTEMPTS,
        interval: float = POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Optional[dict[str, Any]]:
        """Poll until the transaction leaves ``pending``.

        Library helper for clients that just submitted a proof (wallet UIs,
        scripts); the HTTP service itself only does single lookups.

        Explorer errors count as a spent attempt. Returns the final
        transaction JSON, or ``None`` once the attempt budget is spent (the
        transaction may still confirm later).
        """
        for attempt in range(1, attempts + 1):
            try:
                tx = self.get_transaction(txid)
            except ExplorerError as exc:
                logger.warning("Tx %s lookup failed (attempt %d/%d): %s", txid, attempt, attempts, exc)
                tx = None
            status = tx.get("tx_status") if tx else None
            if status and status != "pending":
                logger.info("Tx %s settled as %s after %d attempt(s)", txid, status, attempt)
                return tx
            if attempt < attempts:
                sleep(interval)
        logger.info("Tx %s still unconfirmed after %d attempts", txid, attempts)
        return None
