"""
core/database.py -- SQLAlchemy engine construction shared by all stores.

SQLite specifics:
  check_same_thread=False -- FastAPI runs sync work in a thread pool, so a
      pooled connection may be used from a different thread than the one
      that opened it.
  WAL journal mode -- readers proceed without blocking during writes. Set per
      connection because SQLite PRAGMAs are not inherited from the pool.
  foreign_keys=ON -- SQLite ignores FOREIGN KEY clauses unless enabled on
      every connection.

Any other URL (e.g. postgresql://) is passed through unchanged.
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str) -> Engine:
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if the database answers a trivial query."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        return False
    return True
