from poa_receipts.models.receipt import ReceiptModel

__all__ = ["ReceiptModel"]
