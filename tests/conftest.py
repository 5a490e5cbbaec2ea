"""
Shared pytest fixtures — in-memory SQLite store + FastAPI TestClient.
"""
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="poa-test-")
os.environ["WEBHOOK_SECRET"] = "test-secret"
os.environ["PUBLIC_BASE_URL"] = "https://receipts.example"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from poa_receipts.database import Base, make_session_factory  # noqa: E402
from poa_receipts.deps import get_store  # noqa: E402
from poa_receipts.main import app  # noqa: E402
from poa_receipts.models import ReceiptModel  # noqa: E402,F401  — register model
from poa_receipts.store import ReceiptStore  # noqa: E402

WEBHOOK_SECRET = "test-secret"
AUTH = {"Authorization": f"Bearer {WEBHOOK_SECRET}"}


def make_payload(
    txid="0xabc",
    user="SP123",
    proof_hash="0xdeadbeef",
    block_height=100,
    event_type="SmartContractEvent",
    event_name="proof-submitted",
):
    """One block, one transaction, one print event under receipt metadata."""
    value = {"event": event_name, "user": user, "hash": proof_hash}
    if block_height is not None:
        value["block-height"] = block_height
    return {
        "apply": [
            {
                "block_identifier": {"index": 99, "hash": "0xblock"},
                "transactions": [
                    {
                        "transaction_identifier": {"hash": txid},
                        "metadata": {
                            "receipt": {
                                "events": [{"type": event_type, "data": {"value": value}}]
                            }
                        },
                    }
                ],
            }
        ]
    }


# StaticPool ensures all connections share the same in-memory database
@pytest.fixture()
def engine():
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def store(session_factory):
    s = ReceiptStore(session_factory)
    s.load()
    return s


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
