"""
Chain-indexer webhook.

POST    /api/webhook/proof — ingest a notification → receipt id + URL
OPTIONS /api/webhook/proof — CORS preflight
"""
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from poa_receipts.config import settings
from poa_receipts.deps import get_store, require_webhook_token
from poa_receipts.pipeline import extract_proof_event
from poa_receipts.schemas import WebhookAck
from poa_receipts.store import ReceiptStore

logger = logging.getLogger(__name__)
router = APIRouter()


def receipt_url(receipt_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/receipt/{receipt_id}"


# ── POST /api/webhook/proof ──────────────────────────────────────────────
@router.post(
    "/webhook/proof",
    response_model=WebhookAck,
    response_model_exclude_none=True,
    dependencies=[Depends(require_webhook_token)],
)
async def webhook_proof(request: Request, store: ReceiptStore = Depends(get_store)):
    try:
        body = await request.body()
        payload = json.loads(body) if body else {}
    except ValueError:
        logger.exception("Webhook body is not valid JSON")
        raise HTTPException(status_code=500, detail="Internal server error")

    submission = extract_proof_event(payload)
    if submission is None:
        logger.info("Webhook ignored: no proof event")
        return WebhookAck(status="ignored", message="No proof event found")

    # No await between here and the response: insert runs as one step
    try:
        receipt = store.insert(submission)
    except Exception:  # noqa: BLE001
        logger.exception("Webhook error storing txid %s", submission.txid)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info("Stored receipt: %s for txid: %s", receipt.id, receipt.txid)
    return WebhookAck(
        status="success",
        receipt_id=receipt.id,
        receipt_url=receipt_url(receipt.id),
    )


# ── OPTIONS /api/webhook/proof ───────────────────────────────────────────
@router.options("/webhook/proof", status_code=204)
async def webhook_preflight():
    return Response(status_code=204)
