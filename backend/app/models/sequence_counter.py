"""
Sequence counter database model.

One row per named sequence (receipt numbers per category and year,
entry serial numbers, outstanding record numbers).
"""

from sqlalchemy import Column, Integer, String
from backend.app.db.session import Base


class SequenceCounter(Base):
    """
    Monotonic counter row.

    Incremented only through `backend.app.db.sequences.next_value`, which does
    the increment and the read in one statement. Values are never handed out
    twice and never reused.
    """
    __tablename__ = "sequence_counters"

    name = Column(String(100), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<SequenceCounter(name='{self.name}', last_value={self.last_value})>"
