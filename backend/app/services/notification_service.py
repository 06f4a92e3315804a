"""
Notification Service.

Downstream hook invoked after a ledger change has committed. Message
composition and delivery (WhatsApp) live outside this service; here the
hook only records that a notification is due. Failures never propagate to
the caller: the ledger change is already durable.
"""

import logging
from typing import Callable

from backend.app.core.reliability import notification_circuit_breaker, CircuitOpenError

logger = logging.getLogger("ledger.notifications")


class NotificationService:

    @staticmethod
    async def notify_entry_created(entry) -> None:
        logger.info(
            "Entry created notification due",
            extra={"entry_id": entry.id, "user_id": entry.user_id, "total_amount": entry.total_amount}
        )

    @staticmethod
    async def notify_payment_recorded(subject, payment) -> None:
        logger.info(
            "Payment recorded notification due",
            extra={
                "subject_id": subject.id,
                "category": subject.category.value,
                "user_id": subject.user_id,
                "receipt_no": payment.receipt_no,
                "amount": payment.amount,
                "pending_amount": subject.pending_amount,
            }
        )

    @staticmethod
    async def dispatch(hook: Callable, *args) -> None:
        """Run a notification hook through the circuit breaker."""
        try:
            await notification_circuit_breaker.call(hook, *args)
        except CircuitOpenError:
            logger.warning("Notification circuit open, skipping %s", hook.__name__)
        except Exception:
            logger.exception("Notification hook %s failed", hook.__name__)
