"""
FastAPI dependencies shared by the routers.
"""
from __future__ import annotations

import secrets
from typing import Iterator, Optional

from fastapi import Header, HTTPException, Request

from poa_receipts.config import settings
from poa_receipts.explorer import ExplorerClient
from poa_receipts.store import ReceiptStore


def get_store(request: Request) -> ReceiptStore:
    """The process-wide store built during app startup."""
    return request.app.state.store


def get_explorer() -> Iterator[ExplorerClient]:
    client = ExplorerClient(
        network=settings.STACKS_NETWORK, timeout=settings.EXPLORER_API_TIMEOUT
    )
    try:
        yield client
    finally:
        client.close()


def require_webhook_token(authorization: Optional[str] = Header(None)) -> None:
    """Reject the request unless it carries ``Bearer <WEBHOOK_SECRET>``."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not secrets.compare_digest(
        token.strip().encode(), settings.WEBHOOK_SECRET.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")
