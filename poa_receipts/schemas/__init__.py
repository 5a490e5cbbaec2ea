from poa_receipts.schemas.base import (
    ProofSubmission,
    Receipt,
    ReceiptDetail,
    ReceiptList,
    TxStatus,
    VerifyResult,
    WebhookAck,
)

__all__ = [
    "ProofSubmission",
    "Receipt",
    "ReceiptDetail",
    "ReceiptList",
    "TxStatus",
    "VerifyResult",
    "WebhookAck",
]
