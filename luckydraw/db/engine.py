from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from ..config import settings


def make_engine(database_url: Optional[str] = None, echo: Optional[bool] = None):
    url = database_url or settings.DB_URL
    engine = create_engine(
        url,
        echo=settings.DB_ECHO if echo is None else echo,
        future=True,
    )
    if url.startswith("sqlite"):
        # ensure FK constraints (and ON DELETE CASCADE) are enforced on SQLite
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def get_sessionmaker(engine):
    return sessionmaker(
        bind=engine,
        expire_on_commit=False,  # records stay readable after the accessor's transaction closes
        future=True,
    )
