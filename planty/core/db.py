from functools import lru_cache

from sqlalchemy import Engine, event
from sqlmodel import create_engine

from planty.core.settings import settings


def get_engine_url() -> str:
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    return "postgresql+psycopg://{username}:{password}@{host}:{port}/{db_name}".format(
        username=settings.POSTGRES_USER,
        password=settings.POSTGRES_PASSWORD,
        host=settings.POSTGRES_HOST,
        port=settings.POSTGRES_PORT,
        db_name=settings.POSTGRES_DB,
    )


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # sqlite ignores ON DELETE CASCADE unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(url: str, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        engine = create_engine(url, echo=False, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_engine(
        url,
        echo=False,  # Enable SQL query logging
        pool_pre_ping=True,  # Enable connection health checks
        connect_args={"connect_timeout": 5},  # Add connection timeout
        **kwargs,
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine(get_engine_url())
