"""
Read-only receipt endpoints.

GET /receipt/{id}                  — public receipt page data
GET /api/receipt/by-txid?txid=     — full receipt by transaction id
GET /api/receipts/by-user?address= — a user's receipts, newest block first
GET /api/verify?hash=              — does a receipt exist for this hash
GET /api/tx-status?txid=           — live status from the block explorer
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from poa_receipts.config import settings
from poa_receipts.deps import get_explorer, get_store
from poa_receipts.explorer import ExplorerClient, ExplorerError, explorer_tx_url
from poa_receipts.schemas import Receipt, ReceiptDetail, ReceiptList, TxStatus, VerifyResult
from poa_receipts.store import DEFAULT_USER_LIMIT, ReceiptStore

logger = logging.getLogger(__name__)
router = APIRouter()
public_router = APIRouter()


def _require(value: Optional[str], name: str) -> str:
    if not value or not value.strip():
        raise HTTPException(status_code=400, detail=f"{name} parameter required")
    return value.strip()


# ── GET /receipt/{receipt_id} ────────────────────────────────────────────
@public_router.get("/receipt/{receipt_id}", response_model=ReceiptDetail)
async def get_receipt(receipt_id: str, store: ReceiptStore = Depends(get_store)):
    receipt = store.get_by_id(receipt_id)
    if receipt is None:
        logger.warning("Receipt not found: %s", receipt_id)
        raise HTTPException(status_code=404, detail="Receipt not found")
    return ReceiptDetail(
        **receipt.model_dump(exclude={"created_at"}),
        verify_url=explorer_tx_url(receipt.txid, settings.STACKS_NETWORK),
    )


# ── GET /api/receipt/by-txid ─────────────────────────────────────────────
@router.get("/receipt/by-txid", response_model=Receipt)
async def get_receipt_by_txid(
    txid: Optional[str] = Query(None),
    store: ReceiptStore = Depends(get_store),
):
    receipt = store.get_by_txid(_require(txid, "txid"))
    if receipt is None:
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


# ── GET /api/receipts/by-user ────────────────────────────────────────────
@router.get("/receipts/by-user", response_model=ReceiptList)
async def list_receipts_by_user(
    address: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_USER_LIMIT, ge=1, le=500),
    store: ReceiptStore = Depends(get_store),
):
    receipts = store.list_by_user(_require(address, "address"), limit=limit)
    logger.info("Found %d receipts for %s", len(receipts), address)
    return ReceiptList(receipts=receipts)


# ── GET /api/verify ──────────────────────────────────────────────────────
@router.get("/verify", response_model=VerifyResult, response_model_exclude_unset=True)
async def verify_hash(
    hash: Optional[str] = Query(None),
    store: ReceiptStore = Depends(get_store),
):
    return store.verify(_require(hash, "hash"))


# ── GET /api/tx-status ───────────────────────────────────────────────────
@router.get("/tx-status", response_model=TxStatus)
def get_tx_status(
    txid: Optional[str] = Query(None),
    explorer: ExplorerClient = Depends(get_explorer),
):
    txid = _require(txid, "txid")
    try:
        tx = explorer.get_transaction(txid)
    except ExplorerError as exc:
        logger.warning("Explorer lookup failed for %s: %s", txid, exc)
        raise HTTPException(status_code=502, detail="Block explorer unavailable")
    if tx is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TxStatus(
        txid=tx.get("tx_id", txid),
        status=tx.get("tx_status", "unknown"),
        block_height=tx.get("block_height"),
        explorer_url=explorer_tx_url(tx.get("tx_id", txid), explorer.network),
    )
