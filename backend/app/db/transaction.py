"""
Transaction boundary for ledger mutations.

Every state-changing ledger operation runs inside `atomic()`: one database
transaction that either commits all of its writes (rows, receipt counters,
transaction log) or none of them. Row locks taken inside it are held until
commit. On PostgreSQL a lock wait is bounded by `lock_timeout`, so contention
surfaces as a retryable ConflictError instead of a hang.
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import ConflictError, LedgerIntegrityError

logger = logging.getLogger("ledger.transaction")

# lock_not_available, deadlock_detected, serialization_failure
CONFLICT_SQLSTATES = {"55P03", "40P01", "40001"}


def is_conflict(exc: DBAPIError) -> bool:
    """Whether a driver error means "lost a race", as opposed to a real failure."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    return "database is locked" in str(orig).lower()


def dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


@asynccontextmanager
async def atomic(db: AsyncSession):
    """
    Run the enclosed block as a single transaction.

    Usage:
        async with atomic(db):
            entry = await lock_entry(db, entry_id)
            ...

    Commits on success. Rolls back on any exception and translates
    driver-level lock/serialization failures into ConflictError and
    constraint violations into LedgerIntegrityError.
    """
    try:
        if dialect_name(db) == "postgresql":
            await db.execute(text(f"SET LOCAL lock_timeout = '{int(settings.lock_timeout_ms)}ms'"))
        yield db
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.error("Constraint violation, transaction rolled back: %s", exc.orig)
        raise LedgerIntegrityError(
            "Database constraint violated",
            details={"reason": str(exc.orig)}
        ) from exc
    except DBAPIError as exc:
        await db.rollback()
        if is_conflict(exc):
            logger.warning("Lock conflict, transaction rolled back: %s", exc.orig)
            raise ConflictError(details={"reason": str(exc.orig)}) from exc
        raise
    except Exception:
        await db.rollback()
        raise
