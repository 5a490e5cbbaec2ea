"""
Chain-notification event extractor.

Walks a Chainhook-style notification (``apply`` blocks → transactions →
event sources → events) and returns the first ``proof-submitted`` print
event as a :class:`ProofSubmission`.  Payload dialects differ between
indexer versions, so every lookup below is an ordered list of candidates.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from pydantic import ValidationError

from poa_receipts.schemas import ProofSubmission
from poa_receipts.schemas.base import MAX_INT64

logger = logging.getLogger(__name__)

PROOF_EVENT_NAME = "proof-submitted"

# ---------------------------------------------------------------------------
# Dialect configuration
# ---------------------------------------------------------------------------

# Event ``type`` labels meaning "smart-contract print / log entry"
PRINT_EVENT_TYPES: frozenset[str] = frozenset(
    {"SmartContractEvent", "print_event", "smart_contract_log"}
)

# Where an event keeps its decoded print value, in priority order
EVENT_DATA_PATHS: tuple[tuple[str, ...], ...] = (
    ("data", "value"),
    ("contract_event", "value"),
    ("contract_log", "value"),
    ("data",),
)

TXID_PATHS: tuple[tuple[str, ...], ...] = (
    ("transaction_identifier", "hash"),
    ("txid",),
    ("tx_id",),
)

BLOCK_HEIGHT_PATHS: tuple[tuple[str, ...], ...] = (
    ("block_identifier", "index"),
    ("block_height",),
    ("height",),
)

_CLARITY_UINT = re.compile(r"^u?(\d+)$")


# ---------------------------------------------------------------------------
# Tree helpers
# ---------------------------------------------------------------------------

def _dig(node: Any, path: Iterable[str]) -> Any:
    """Follow *path* through nested dicts; ``None`` on any miss."""
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first(node: Any, paths: Iterable[tuple[str, ...]]) -> Any:
    for path in paths:
        value = _dig(node, path)
        if value is not None:
            return value
    return None


def _as_list(value: Any) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        return [value]
    return []


def _as_int(value: Any) -> Optional[int]:
    """Coerce ints, numeric strings and Clarity uints (``"u100"``).

    Values outside ``0..MAX_INT64`` cannot be stored and are treated as absent.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        m = _CLARITY_UINT.match(value.strip())
        value = int(m.group(1)) if m else None
    if not isinstance(value, int):
        return None
    if not 0 <= value <= MAX_INT64:
        logger.warning("Integer %d out of range, ignored", value)
        return None
    return value


# ---------------------------------------------------------------------------
# Event sources
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EventSource:
    """A named place where one indexer dialect keeps a transaction's events."""
    name: str
    locate: Callable[[dict], Any]

    def events(self, tx: dict) -> list:
        return _as_list(self.locate(tx))


EVENT_SOURCES: tuple[EventSource, ...] = (
    EventSource("receipt_metadata", lambda tx: _dig(tx, ("metadata", "receipt", "events"))),
    EventSource("operations", lambda tx: tx.get("operations")),
    EventSource("events", lambda tx: tx.get("events")),
)


def event_data(event: Any) -> Optional[dict]:
    """Return the structured print value of *event* if it is a print event."""
    if not isinstance(event, dict) or event.get("type") not in PRINT_EVENT_TYPES:
        return None
    for path in EVENT_DATA_PATHS:
        value = _dig(event, path)
        if isinstance(value, dict):
            return value
    return None


def is_proof_event(data: Optional[dict]) -> bool:
    return bool(data) and data.get("event") == PROOF_EVENT_NAME


# ---------------------------------------------------------------------------
# Walk
# ---------------------------------------------------------------------------

def _iter_candidates(payload: Any):
    """Yield ``(block, tx, source_name, data)`` for every print event in order."""
    if not isinstance(payload, dict):
        return
    for block in _as_list(payload.get("apply")):
        if not isinstance(block, dict):
            continue
        for tx in _as_list(block.get("transactions")):
            if not isinstance(tx, dict):
                continue
            for source in EVENT_SOURCES:
                for event in source.events(tx):
                    data = event_data(event)
                    if data is not None:
                        yield block, tx, source.name, data


def _build_submission(block: dict, tx: dict, data: dict) -> ProofSubmission:
    block_height = _as_int(data.get("block-height"))
    if block_height is None:
        block_height = _as_int(_first(block, BLOCK_HEIGHT_PATHS))
    raw_submission_id = data.get("submission-id")
    submission_id = _as_int(raw_submission_id)
    if raw_submission_id is not None and submission_id is None:
        logger.warning("Unusable submission-id %r dropped", raw_submission_id)
    return ProofSubmission(
        txid=_first(tx, TXID_PATHS),
        user_address=data.get("user"),
        proof_hash=data.get("hash"),
        block_height=block_height,
        submission_id=submission_id,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_proof_event(payload: Any) -> Optional[ProofSubmission]:
    """Return the first proof submission found in *payload*, else ``None``.

    Never raises: malformed payloads and incomplete matches are logged and
    reported as "no match".
    """
    try:
        for block, tx, source_name, data in _iter_candidates(payload):
            if not is_proof_event(data):
                continue
            logger.debug("Proof event matched via %s", source_name)
            try:
                return _build_submission(block, tx, data)
            except ValidationError as exc:
                logger.warning(
                    "Proof event in %s is missing required fields: %s",
                    source_name,
                    exc.errors(include_url=False),
                )
                return None
        return None
    except Exception:  # noqa: BLE001
        logger.exception("Error extracting proof event")
        return None
