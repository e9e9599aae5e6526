from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import declarative_base
from datetime import datetime, timezone

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class StorageSlot(Base):
    """One named key/value slot holding a serialized collection."""
    __tablename__ = "storage_slots"

    name = Column(String, primary_key=True, index=True)
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<StorageSlot(name={self.name}, size={len(self.payload or '')})>"
