import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional


def connect(db_path: str) -> sqlite3.Connection:
    # Generous timeout so concurrent browser sessions wait instead of failing on a lock.
    conn = sqlite3.connect(db_path, timeout=30.0)

    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")

    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def db_session(db_path: str) -> Iterator[sqlite3.Connection]:
    conn: Optional[sqlite3.Connection] = None
    try:
        conn = connect(db_path)
        yield conn
        conn.commit()
    except Exception:
        if conn is not None:
            conn.rollback()
        raise
    finally:
        if conn is not None:
            conn.close()
