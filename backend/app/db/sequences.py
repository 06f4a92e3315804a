"""
Atomic named sequences backed by the sequence_counters table.
"""

from sqlalchemy import update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.transaction import dialect_name
from backend.app.models.sequence_counter import SequenceCounter


async def next_value(db: AsyncSession, name: str) -> int:
    """
    Increment the named counter and return the new value.

    The counter row is created on first use. The increment and the read are
    a single UPDATE ... RETURNING, so the row stays locked until the caller's
    transaction ends and no two transactions can read the same value.
    """
    insert = pg_insert if dialect_name(db) == "postgresql" else sqlite_insert
    await db.execute(
        insert(SequenceCounter)
        .values(name=name, last_value=0)
        .on_conflict_do_nothing(index_elements=["name"])
    )

    result = await db.execute(
        update(SequenceCounter)
        .where(SequenceCounter.name == name)
        .values(last_value=SequenceCounter.last_value + 1)
        .returning(SequenceCounter.last_value)
        .execution_options(synchronize_session=False)
    )
    return result.scalar_one()
