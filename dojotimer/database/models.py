"""SQLAlchemy ORM models for DojoTimer."""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class ConfigEntry(Base):
    """One persisted slice of the timer configuration.

    ``key`` is one of ``config_store.SNAPSHOT_KEYS``; ``value`` is its
    JSON encoding.  Keys are written independently so a partial save
    never touches the others.
    """

    __tablename__ = "timer_config"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<ConfigEntry key={self.key} updated_at={self.updated_at}>"


class SharedConfigEntry(Base):
    """Configuration mirrored to a remote peer, one namespace per link code."""

    __tablename__ = "shared_timer_config"

    device_code = Column(String(16), primary_key=True)
    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return (
            f"<SharedConfigEntry code={self.device_code} key={self.key} "
            f"updated_at={self.updated_at}>"
        )
