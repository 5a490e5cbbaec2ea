"""
SQLAlchemy model for receipt persistence.

One row per accepted proof submission; rows are only ever inserted.
"""
from sqlalchemy import Column, Integer, String

from poa_receipts.database import Base


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(String, primary_key=True)
    seq = Column(Integer, nullable=False, unique=True)  # insertion order
    txid = Column(String, nullable=False, unique=True)
    user_address = Column(String, nullable=False, index=True)
    proof_hash = Column(String, nullable=False, index=True)
    block_height = Column(Integer)
    submission_id = Column(Integer)
    timestamp = Column(String, nullable=False)
    created_at = Column(String, nullable=False)
