"""
Pydantic v2 models shared by the extractor, the store and the HTTP layer.
"""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Largest value an SQL INTEGER column can hold
MAX_INT64 = 2**63 - 1


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------

class ProofSubmission(BaseModel):
    """A normalized ``proof-submitted`` event pulled out of a chain notification."""
    txid: str = Field(..., min_length=1)
    user_address: str = Field(..., min_length=1)
    proof_hash: str = Field(..., min_length=1)
    block_height: Optional[int] = Field(None, ge=0, le=MAX_INT64)
    submission_id: Optional[int] = Field(None, ge=0, le=MAX_INT64)


# ---------------------------------------------------------------------------
# Receipt record
# ---------------------------------------------------------------------------

class Receipt(BaseModel):
    """Durable record of one accepted proof submission. Never mutated."""
    model_config = ConfigDict(frozen=True)

    id: str
    txid: str
    user_address: str
    proof_hash: str
    block_height: Optional[int] = None
    submission_id: Optional[int] = None
    timestamp: str
    created_at: str


class ReceiptDetail(BaseModel):
    """Public receipt page payload (camelCase, with an explorer deep link)."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    txid: str
    user_address: str = Field(..., alias="userAddress")
    proof_hash: str = Field(..., alias="proofHash")
    block_height: Optional[int] = Field(None, alias="blockHeight")
    submission_id: Optional[int] = Field(None, alias="submissionId")
    timestamp: str
    verify_url: str = Field(..., alias="verifyUrl")


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class WebhookAck(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success", "ignored"]
    receipt_id: Optional[str] = Field(None, alias="receiptId")
    receipt_url: Optional[str] = Field(None, alias="receiptUrl")
    message: Optional[str] = None


class ReceiptList(BaseModel):
    receipts: list[Receipt] = Field(default_factory=list)


class VerifyResult(BaseModel):
    verified: bool
    receipt: Optional[Receipt] = None


class TxStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    txid: str
    status: str
    block_height: Optional[int] = Field(None, alias="blockHeight")
    explorer_url: str = Field(..., alias="explorerUrl")
