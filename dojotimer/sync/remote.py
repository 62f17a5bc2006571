"""Remote peer: a shared database both linked devices point at.

Any SQLAlchemy URL works (a SQLite file on a shared drive, a Postgres
server, ...).  Rows are namespaced by the six-character link code so
several device pairs can share one database.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..database.models import Base, SharedConfigEntry


class RemotePeer:
    """Push/pull raw configuration rows for one link code.

    Raises ``sqlalchemy.exc.SQLAlchemyError`` on any connection or
    query failure; ``SyncManager`` decides what to do about it.
    """

    def __init__(self, url: str, device_code: str) -> None:
        connect_args = {}
        if make_url(url).get_backend_name() == "sqlite":
            # pulls run on a worker thread
            connect_args["check_same_thread"] = False
        self._engine = create_engine(url, connect_args=connect_args, echo=False)
        self._factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        self._device_code = device_code

    @property
    def device_code(self) -> str:
        return self._device_code

    @contextmanager
    def _session(self):
        session: OrmSession = self._factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create the shared table if needed; doubles as a reachability check."""
        Base.metadata.create_all(self._engine, tables=[SharedConfigEntry.__table__])

    def push(self, entries: dict[str, str]) -> None:
        now = datetime.utcnow()
        with self._session() as db:
            for key, value in entries.items():
                db.merge(SharedConfigEntry(
                    device_code=self._device_code,
                    key=key,
                    value=value,
                    updated_at=now,
                ))

    def pull(self) -> dict[str, str]:
        with self._session() as db:
            rows = (
                db.query(SharedConfigEntry)
                .filter(SharedConfigEntry.device_code == self._device_code)
                .all()
            )
            return {row.key: row.value for row in rows}

    def dispose(self) -> None:
        self._engine.dispose()
