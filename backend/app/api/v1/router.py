"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    users, entries, previous_outstanding, advance_payments,
    transaction_logs, dashboard, expenses
)

router = APIRouter()

# Donors and staff
router.include_router(users.router)

# Ledger
router.include_router(entries.router)
router.include_router(previous_outstanding.router)
router.include_router(advance_payments.router)

# Audit trail
router.include_router(transaction_logs.router)

# Reporting
router.include_router(dashboard.router)
router.include_router(expenses.router)
