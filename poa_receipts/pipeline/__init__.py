"""
Ingestion pipeline: chain notification → proof submission.
"""
from poa_receipts.pipeline.extractor import (
    EVENT_SOURCES,
    PRINT_EVENT_TYPES,
    PROOF_EVENT_NAME,
    extract_proof_event,
)

__all__ = [
    "EVENT_SOURCES",
    "PRINT_EVENT_TYPES",
    "PROOF_EVENT_NAME",
    "extract_proof_event",
]
