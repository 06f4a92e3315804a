"""
Ledger enumerations.
"""

import enum


class PaymentStatus(str, enum.Enum):
    """Settlement state of an entry, always derived from its payments."""
    PENDING = "pending"  # Nothing received yet
    PARTIAL = "partial"  # Some received, some outstanding
    FULL = "full"  # Fully settled


class RecordStatus(str, enum.Enum):
    """Soft-delete flag shared by entries, payments and advance payments."""
    ACTIVE = "active"
    DELETED = "deleted"


class PaymentMode(str, enum.Enum):
    """How a payment was made."""
    CASH = "cash"
    UPI = "upi"
    CHEQUE = "cheque"
    NETBANKING = "netbanking"
    ADVANCE_PAYMENT = "advance_payment"  # Funded from the donor's advance credit


class TransactionType(str, enum.Enum):
    """Transaction log row type."""
    CREDIT = "credit"  # Obligation or credit created / payment reversed
    DEBIT = "debit"  # Payment recorded / obligation removed
    UPDATE_PAYMENT = "update_payment"
    UPDATE_ENTRY = "update_entry"


class ReceiptCategory(str, enum.Enum):
    """Receipt series, also identifies which table a log row refers to."""
    BOLI = "boli"
    ADVANCE = "advance"
    PREVIOUS_OUTSTANDING = "previous_outstanding"
