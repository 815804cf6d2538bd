"""Database handle and per-request session management."""

from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker


class Database:
    """
    Owns the engine and session factory for one database.

    Constructed explicitly, opened at startup and closed at shutdown; nothing
    connects at import time.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs: Any) -> None:
        self.url = url
        self.echo = echo
        self.engine_kwargs = engine_kwargs
        self.engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.engine is None:
            kwargs = dict(self.engine_kwargs)
            if not self.url.startswith("sqlite"):
                kwargs.setdefault("pool_pre_ping", True)
            self.engine = create_engine(self.url, echo=self.echo, **kwargs)
            self._sessionmaker = sessionmaker(
                autocommit=False, autoflush=False, bind=self.engine
            )
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self._sessionmaker = None

    def session(self) -> Session:
        """Return a new session; the caller closes it."""
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        return self._sessionmaker()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
