"""
Money & Status Rules.

Pure functions deriving received/pending/status from payment records.
No I/O. Every payment mutation ends with `reconcile()`, which rewrites the
derived columns from scratch instead of adjusting them incrementally.
"""

from typing import Iterable

from backend.app.core.exceptions import LedgerIntegrityError
from backend.app.models.ledger_enums import PaymentMode, PaymentStatus, RecordStatus

RECEIPT_SEPARATOR = ", "

PROOF_REQUIRED_MODES = frozenset({PaymentMode.UPI, PaymentMode.CHEQUE, PaymentMode.NETBANKING})


def compute_received(payments: Iterable) -> int:
    """Sum of amounts of active payments."""
    return sum(p.amount for p in payments if p.status == RecordStatus.ACTIVE)


def compute_pending(total: int, received: int) -> int:
    # Not clamped: a negative result is a bug that check_invariants reports
    return total - received


def compute_status(total: int, received: int) -> PaymentStatus:
    if received <= 0:
        return PaymentStatus.PENDING
    if received < total:
        return PaymentStatus.PARTIAL
    return PaymentStatus.FULL


def compute_receipt_numbers(payments: Iterable, status: RecordStatus) -> str:
    """Comma-joined receipt numbers of the payments in `status`, in payment order."""
    return RECEIPT_SEPARATOR.join(p.receipt_no for p in payments if p.status == status)


def split_receipt_numbers(value: str) -> list:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def requires_proof(mode: PaymentMode) -> bool:
    return mode in PROOF_REQUIRED_MODES


def check_invariants(subject) -> None:
    """
    Verify an Entry or PreviousOutstandingRecord against its own payments.

    Raises:
        LedgerIntegrityError: if any derived column disagrees with the payments
    """
    received = compute_received(subject.payments)
    problems = []

    if subject.received_amount != received:
        problems.append(f"received_amount {subject.received_amount} != sum of active payments {received}")
    if subject.total_amount != subject.received_amount + subject.pending_amount:
        problems.append(
            f"total_amount {subject.total_amount} != received {subject.received_amount} + pending {subject.pending_amount}"
        )
    if subject.pending_amount < 0:
        problems.append(f"pending_amount {subject.pending_amount} is negative")
    expected_status = compute_status(subject.total_amount, received)
    if subject.status != expected_status:
        problems.append(f"status {subject.status.value} != {expected_status.value}")

    if problems:
        raise LedgerIntegrityError(
            "Ledger invariant violated",
            details={"subject_id": subject.id, "problems": problems}
        )


def reconcile(subject) -> None:
    """Re-derive every computed column of `subject` from its payments, then verify."""
    received = compute_received(subject.payments)
    subject.received_amount = received
    subject.pending_amount = compute_pending(subject.total_amount, received)
    subject.status = compute_status(subject.total_amount, received)
    subject.receipt_numbers = compute_receipt_numbers(subject.payments, RecordStatus.ACTIVE)
    subject.deleted_receipt_numbers = compute_receipt_numbers(subject.payments, RecordStatus.DELETED)
    check_invariants(subject)
