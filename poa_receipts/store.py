"""
Receipt store: in-memory indexes over an append-only receipt log.

The whole log is loaded into memory at startup and every insert is written
through to the database before :meth:`ReceiptStore.insert` returns.  A failed
write does not undo the in-memory insert; the receipt stays pending and the
next :meth:`ReceiptStore.flush` retries it.
"""
from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import sessionmaker

from poa_receipts.models.receipt import ReceiptModel
from poa_receipts.schemas import ProofSubmission, Receipt, VerifyResult

logger = logging.getLogger(__name__)

DEFAULT_USER_LIMIT = 50


def generate_receipt_id() -> str:
    """Short URL-safe id (8 random bytes, base64url)."""
    return secrets.token_urlsafe(8)


def _to_row(receipt: Receipt, seq: int) -> ReceiptModel:
    return ReceiptModel(seq=seq, **receipt.model_dump())


def _from_row(row: ReceiptModel) -> Receipt:
    return Receipt(
        id=row.id,
        txid=row.txid,
        user_address=row.user_address,
        proof_hash=row.proof_hash,
        block_height=row.block_height,
        submission_id=row.submission_id,
        timestamp=row.timestamp,
        created_at=row.created_at,
    )


class ReceiptStore:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._receipts: list[Receipt] = []
        self._by_id: dict[str, Receipt] = {}
        self._by_txid: dict[str, Receipt] = {}
        self._by_hash: dict[str, list[Receipt]] = {}
        self._by_user: dict[str, list[Receipt]] = {}
        # Positions in ``_receipts`` not yet written to the database
        self._pending: list[int] = []

    # ── Persistence ─────────────────────────────────────────────────────
    def load(self) -> int:
        """Replace in-memory state with the persisted log; return its size."""
        with self._session_factory() as db:
            rows = db.query(ReceiptModel).order_by(ReceiptModel.seq).all()
            receipts = [_from_row(r) for r in rows]

        self._receipts = []
        self._by_id.clear()
        self._by_txid.clear()
        self._by_hash.clear()
        self._by_user.clear()
        self._pending = []
        for receipt in receipts:
            self._index(receipt)
        logger.info("Loaded %d receipts", len(self._receipts))
        return len(self._receipts)

    def flush(self) -> bool:
        """Write pending receipts; ``True`` once nothing is left pending.

        Each receipt is committed on its own so one unwritable row cannot
        hold back the others.  Rows that fail stay pending for the next call.
        """
        if not self._pending:
            return True
        failed: list[int] = []
        with self._session_factory() as db:
            for seq in self._pending:
                receipt = self._receipts[seq]
                try:
                    db.add(_to_row(receipt, seq))
                    db.commit()
                except Exception:  # noqa: BLE001
                    db.rollback()
                    logger.exception("Error saving receipt %s; kept in memory", receipt.id)
                    failed.append(seq)
        self._pending = failed
        return not failed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    # ── Mutation ────────────────────────────────────────────────────────
    def _index(self, receipt: Receipt) -> int:
        seq = len(self._receipts)
        self._receipts.append(receipt)
        self._by_id[receipt.id] = receipt
        self._by_txid[receipt.txid] = receipt
        self._by_hash.setdefault(receipt.proof_hash, []).append(receipt)
        self._by_user.setdefault(receipt.user_address, []).append(receipt)
        return seq

    def insert(self, submission: ProofSubmission) -> Receipt:
        """Store *submission*; redelivery of a known txid returns the original."""
        existing = self._by_txid.get(submission.txid)
        if existing is not None:
            logger.info("Duplicate txid %s → receipt %s", submission.txid, existing.id)
            return existing

        receipt_id = generate_receipt_id()
        while receipt_id in self._by_id:
            receipt_id = generate_receipt_id()
        now = datetime.now(timezone.utc).isoformat()

        receipt = Receipt(
            id=receipt_id,
            timestamp=now,
            created_at=now,
            **submission.model_dump(),
        )
        self._pending.append(self._index(receipt))
        self.flush()
        return receipt

    # ── Lookups ─────────────────────────────────────────────────────────
    def get_by_id(self, receipt_id: str) -> Optional[Receipt]:
        return self._by_id.get(receipt_id)

    def get_by_txid(self, txid: str) -> Optional[Receipt]:
        return self._by_txid.get(txid)

    def get_by_hash(self, proof_hash: str) -> Optional[Receipt]:
        """First receipt ever stored for *proof_hash*."""
        matches = self._by_hash.get(proof_hash)
        return matches[0] if matches else None

    def list_by_hash(self, proof_hash: str) -> list[Receipt]:
        return list(self._by_hash.get(proof_hash, ()))

    def list_by_user(self, user_address: str, limit: int = DEFAULT_USER_LIMIT) -> list[Receipt]:
        """Receipts of *user_address*, highest block first."""
        receipts = self._by_user.get(user_address, [])
        ordered = sorted(
            receipts,
            key=lambda r: r.block_height if r.block_height is not None else -1,
            reverse=True,
        )
        return ordered[: max(limit, 0)]

    def verify(self, proof_hash: str) -> VerifyResult:
        receipt = self.get_by_hash(proof_hash)
        if receipt is None:
            return VerifyResult(verified=False)
        return VerifyResult(verified=True, receipt=receipt)

    def count(self) -> int:
        return len(self._receipts)

    def __len__(self) -> int:
        return len(self._receipts)

    def __iter__(self):
        return iter(list(self._receipts))
