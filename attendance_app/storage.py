from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from attendance_app.models import Base, StorageSlot
from attendance_app.utils.logger import get_logger

logger = get_logger("storage")


class SlotStore(ABC):
    """
    Durable key/value storage made of named slots, each holding one
    serialized collection.

    read() returns None for an absent (or unreadable) slot.
    write() reports failure with False instead of raising.
    clear() removes a slot, so the next read() returns None.
    """

    @abstractmethod
    def read(self, slot: str) -> Optional[str]:
        ...

    @abstractmethod
    def write(self, slot: str, payload: str) -> bool:
        ...

    @abstractmethod
    def clear(self, slot: str) -> bool:
        ...


class SqlSlotStore(SlotStore):
    """Slot store backed by a SQL database (SQLite by default) through SQLAlchemy."""

    def __init__(self, database_url: str, max_slot_bytes: int = 0):
        self.database_url = database_url
        self.max_slot_bytes = max_slot_bytes

        engine_kwargs = {}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # A single shared connection, otherwise every session sees a new empty DB
                engine_kwargs["poolclass"] = StaticPool
            else:
                _ensure_sqlite_parent(database_url)

        self.engine = create_engine(database_url, **engine_kwargs)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def read(self, slot: str) -> Optional[str]:
        try:
            with self.Session() as session:
                row = session.get(StorageSlot, slot)
                return row.payload if row is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Read failed for slot '{slot}': {e}")
            return None

    def write(self, slot: str, payload: str) -> bool:
        size = len(payload.encode("utf-8"))
        if self.max_slot_bytes and size > self.max_slot_bytes:
            logger.error(
                f"Write rejected for slot '{slot}': {size} bytes exceeds quota of {self.max_slot_bytes}"
            )
            return False

        try:
            with self.Session() as session, session.begin():
                row = session.get(StorageSlot, slot)
                if row is None:
                    session.add(StorageSlot(name=slot, payload=payload))
                else:
                    row.payload = payload
        except SQLAlchemyError as e:
            logger.error(f"Write failed for slot '{slot}': {e}")
            return False

        logger.debug(f"Slot '{slot}' saved ({size} bytes)")
        return True

    def clear(self, slot: str) -> bool:
        try:
            with self.Session() as session, session.begin():
                row = session.get(StorageSlot, slot)
                if row is not None:
                    session.delete(row)
        except SQLAlchemyError as e:
            logger.error(f"Clear failed for slot '{slot}': {e}")
            return False
        return True


def _ensure_sqlite_parent(database_url: str):
    # sqlite:///relative/path.db or sqlite:////absolute/path.db
    path = database_url.split("///", 1)[-1]
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
