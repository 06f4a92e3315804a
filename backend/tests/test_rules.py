"""
Money & Status Rules tests.

Pure functions, no database.
"""

import pytest
from types import SimpleNamespace

from backend.app.core.exceptions import LedgerIntegrityError
from backend.app.domain.ledger.rules import (
    compute_received, compute_pending, compute_status, compute_receipt_numbers,
    split_receipt_numbers, requires_proof, check_invariants, reconcile
)
from backend.app.models.ledger_enums import PaymentMode, PaymentStatus, RecordStatus


def payment(amount, receipt_no, status=RecordStatus.ACTIVE):
    return SimpleNamespace(amount=amount, receipt_no=receipt_no, status=status)


def subject(total, payments):
    return SimpleNamespace(
        id=1,
        total_amount=total,
        payments=payments,
        received_amount=0,
        pending_amount=total,
        status=PaymentStatus.PENDING,
        receipt_numbers="",
        deleted_receipt_numbers="",
    )


def test_received_ignores_deleted_payments():
    payments = [
        payment(10000, "SPDJMSJ-2025-00001"),
        payment(5000, "SPDJMSJ-2025-00002", RecordStatus.DELETED),
        payment(2500, "SPDJMSJ-2025-00003"),
    ]
    assert compute_received(payments) == 12500
    assert compute_received([]) == 0


def test_pending_is_not_clamped():
    assert compute_pending(1000, 400) == 600
    assert compute_pending(1000, 1200) == -200


@pytest.mark.parametrize("total,received,expected", [
    (100000, 0, PaymentStatus.PENDING),
    (100000, -5, PaymentStatus.PENDING),
    (100000, 1, PaymentStatus.PARTIAL),
    (100000, 99999, PaymentStatus.PARTIAL),
    (100000, 100000, PaymentStatus.FULL),
    (100000, 100001, PaymentStatus.FULL),
])
def test_status_from_totals(total, received, expected):
    assert compute_status(total, received) == expected


def test_receipt_numbers_partitioned_by_status():
    payments = [
        payment(1, "SPDJMSJ-2025-00001"),
        payment(1, "SPDJMSJ-2025-00002", RecordStatus.DELETED),
        payment(1, "SPDJMSJ-2025-00003"),
    ]
    assert compute_receipt_numbers(payments, RecordStatus.ACTIVE) == "SPDJMSJ-2025-00001, SPDJMSJ-2025-00003"
    assert compute_receipt_numbers(payments, RecordStatus.DELETED) == "SPDJMSJ-2025-00002"
    assert split_receipt_numbers("SPDJMSJ-2025-00001, SPDJMSJ-2025-00003") == [
        "SPDJMSJ-2025-00001", "SPDJMSJ-2025-00003"
    ]
    assert split_receipt_numbers("") == []


def test_proof_required_only_for_bank_modes():
    assert requires_proof(PaymentMode.UPI)
    assert requires_proof(PaymentMode.CHEQUE)
    assert requires_proof(PaymentMode.NETBANKING)
    assert not requires_proof(PaymentMode.CASH)
    assert not requires_proof(PaymentMode.ADVANCE_PAYMENT)


def test_reconcile_rederives_everything():
    s = subject(100000, [
        payment(10000, "SPDJMSJ-2025-00001", RecordStatus.DELETED),
        payment(90000, "SPDJMSJ-2025-00002"),
    ])
    # Stale values must be overwritten, not adjusted
    s.received_amount = 12345
    s.status = PaymentStatus.FULL

    reconcile(s)

    assert s.received_amount == 90000
    assert s.pending_amount == 10000
    assert s.status == PaymentStatus.PARTIAL
    assert s.receipt_numbers == "SPDJMSJ-2025-00002"
    assert s.deleted_receipt_numbers == "SPDJMSJ-2025-00001"


def test_reconcile_rejects_overpayment():
    s = subject(1000, [payment(600, "A-2025-00001"), payment(600, "A-2025-00002")])

    with pytest.raises(LedgerIntegrityError) as exc_info:
        reconcile(s)

    assert any("negative" in problem for problem in exc_info.value.details["problems"])


def test_check_invariants_detects_drift():
    s = subject(1000, [payment(400, "A-2025-00001")])
    s.received_amount = 400
    s.pending_amount = 500
    s.status = PaymentStatus.PARTIAL

    with pytest.raises(LedgerIntegrityError):
        check_invariants(s)
