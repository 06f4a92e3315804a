"""
Corpus settings database model.

Opening fund balance used as the base of the dashboard's cash-in-bank figure.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime
from backend.app.db.session import Base, utcnow


class CorpusSettings(Base):
    __tablename__ = "corpus_settings"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    corpus_value = Column(Integer, nullable=False, default=0)
    base_date = Column(Date, nullable=False)
    updated_by = Column(String(100), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<CorpusSettings(corpus_value={self.corpus_value}, base_date={self.base_date})>"
