"""Database engine, session factory, and base model."""
import logging
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import Engine, create_engine, inspect, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import DATABASE_URL

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def sqlite_path(database_url: str) -> Path | None:
    """Return the file behind a SQLite URL, or None for other backends/in-memory."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)


def make_engine(database_url: str = DATABASE_URL) -> Engine:
    """Create an engine for *database_url*, creating the SQLite folder if needed."""
    db_file = sqlite_path(database_url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(database_url, echo=False)


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine)


@contextmanager
def with_db(engine: Engine):
    """Yield a session bound to *engine*; it is closed on exit, error or not."""
    session = session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


# Columns introduced after the first release; older stores lack them
_ADDED_COLUMNS = [
    ("products", "location", "TEXT"),
    ("products", "alert_threshold", "INTEGER"),
]

# Tree links read on every load
_INDEXED_COLUMNS = [
    ("products", "category_id"),
    ("categories", "parent_id"),
]


def _migrate_columns(engine: Engine):
    """Add new columns to existing tables if missing."""
    inspector = inspect(engine)
    tables = inspector.get_table_names()
    for table, column, sql_type in _ADDED_COLUMNS:
        if table not in tables:
            continue
        columns = {col["name"] for col in inspector.get_columns(table)}
        if column in columns:
            continue
        logger.info("Adding %s column to %s table", column, table)
        try:
            with engine.begin() as conn:
                conn.execute(text(
                    f"ALTER TABLE {table} ADD COLUMN {column} {sql_type}"
                ))
        except OperationalError as e:
            # Column appeared between inspection and ALTER
            logger.debug("Skipped adding %s.%s: %s", table, column, e)


def _migrate_indexes(engine: Engine):
    """Index the parent-link columns of stores created before they were indexed."""
    inspector = inspect(engine)
    tables = set(inspector.get_table_names())
    for table, column in _INDEXED_COLUMNS:
        if table not in tables:
            continue
        name = f"ix_{table}_{column}"
        if any(idx["name"] == name for idx in inspector.get_indexes(table)):
            continue
        logger.info("Indexing %s.%s", table, column)
        with engine.begin() as conn:
            conn.execute(text(f"CREATE INDEX IF NOT EXISTS {name} ON {table} ({column})"))


def init_db(engine: Engine):
    """Create the catalog tables if absent, then apply additive migrations."""
    # Import all models so they register with Base.metadata
    import src.models.category  # noqa: F401
    import src.models.product  # noqa: F401

    Base.metadata.create_all(bind=engine)
    _migrate_columns(engine)
    _migrate_indexes(engine)
