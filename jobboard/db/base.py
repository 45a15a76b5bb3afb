"""Database configuration and session management."""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite leaves FK enforcement off per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Engine plus session factory, owned by whoever constructs it.

    The API builds one in its lifespan and hangs it on ``app.state``; tests
    and background jobs get it passed in.
    """

    def __init__(self, url: str, echo: bool = False):
        if not url:
            raise ValueError("DATABASE_URL not configured")

        kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            # Sessions cross threads (request pool + scoring workers)
            kwargs["connect_args"] = {"check_same_thread": False}
        else:
            kwargs["pool_recycle"] = 300  # Recycle connections after 5 minutes

        self.url = url
        self.engine: Engine = create_engine(url, **kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        """Create tables that don't exist yet."""
        from jobboard.db import tables  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        from jobboard.db import tables  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def sessions(self) -> Generator[Session, None, None]:
        """Yield one session and close it afterwards (FastAPI dependency shape)."""
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Context-managed session for code running outside a request."""
        yield from self.sessions()

    def dispose(self) -> None:
        self.engine.dispose()
