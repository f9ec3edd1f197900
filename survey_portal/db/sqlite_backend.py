# sqlite_backend.py
from __future__ import annotations

import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

import bcrypt

from survey_portal.app.errors import AuthenticationFailed, BackendError
from survey_portal.app.logging import get_logger

from .backend import AuthSession, AuthUser, Backend, Row, _require_filters
from .connection import connect, db_session


logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")
BCRYPT_ROUNDS = 12


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    # bcrypt only reads the first 72 bytes.
    hashed = bcrypt.hashpw(password.encode("utf-8")[:72], bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, stored: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], stored.encode("utf-8"))
    except ValueError:
        # Not a bcrypt hash.
        return False


class SQLiteBackend(Backend):
    """
    Local stand-in for the hosted backend.

    Mirrors the hosted tables in one SQLite file and implements the same generic
    table operations plus a password-based session provider. Identifiers are
    UUID strings and ``created_at`` is filled in UTC when a row omits it.
    """

    def __init__(self, db_path: str, schema_path: Optional[Path] = None):
        self.db_path = db_path
        self._session: Optional[AuthSession] = None
        self._columns: Dict[str, List[str]] = {}
        self.init_schema((schema_path or SCHEMA_PATH).read_text(encoding="utf-8"))

    def init_schema(self, schema_sql: str) -> None:
        # Execute schema SQL in a single transaction.
        conn = connect(self.db_path)
        try:
            conn.executescript(schema_sql)
            conn.commit()
            tables = [r["name"] for r in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            ).fetchall()]
            self._columns = {
                t: [c["name"] for c in conn.execute(f"PRAGMA table_info({t})").fetchall()]
                for t in tables
            }
        finally:
            conn.close()

    # -------------------------
    # Identifier checks
    # -------------------------
    def _table(self, table: str) -> List[str]:
        if table not in self._columns:
            raise BackendError(f"Unknown table: {table}")
        return self._columns[table]

    def _check_columns(self, table: str, names: Iterable[str]) -> List[str]:
        known = self._table(table)
        out = list(names)
        unknown = [n for n in out if n not in known]
        if unknown:
            raise BackendError(f"Unknown column(s) for {table}: {', '.join(unknown)}")
        return out

    def _parse_columns(self, table: str, columns: str) -> List[str]:
        if columns.strip() == "*":
            return list(self._table(table))
        return self._check_columns(table, [c.strip() for c in columns.split(",") if c.strip()])

    def _where(self, table: str, filters: Optional[Mapping[str, Any]]) -> Tuple[str, List[Any]]:
        if not filters:
            return "", []
        keys = self._check_columns(table, filters.keys())
        return " WHERE " + " AND ".join(f"{k} = ?" for k in keys), [filters[k] for k in keys]

    # -------------------------
    # DataBackend
    # -------------------------
    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        cols = self._parse_columns(table, columns)
        where, params = self._where(table, filters)
        order = ""
        if order_by:
            self._check_columns(table, [order_by])
            # rowid keeps ties in insertion order, like the hosted store's default.
            order = f" ORDER BY {order_by} {'DESC' if descending else 'ASC'}, rowid ASC"
        sql = f"SELECT {', '.join(cols)} FROM {table}{where}{order}"
        try:
            with db_session(self.db_path) as conn:
                return [dict(r) for r in conn.execute(sql, params).fetchall()]
        except sqlite3.Error as e:
            raise BackendError(f"select from {table} failed: {e}") from e

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]], returning: bool = True) -> List[Row]:
        known = self._table(table)
        prepared: List[Dict[str, Any]] = []
        for row in rows:
            r = dict(row)
            r.setdefault("id", str(uuid4()))
            if "created_at" in known:
                r.setdefault("created_at", _now_iso())
            self._check_columns(table, r.keys())
            prepared.append(r)
        if not prepared:
            return []

        try:
            with db_session(self.db_path) as conn:
                for r in prepared:
                    keys = list(r.keys())
                    conn.execute(
                        f"INSERT INTO {table} ({', '.join(keys)}) VALUES ({', '.join('?' for _ in keys)})",
                        [r[k] for k in keys],
                    )
                if not returning:
                    return []
                return self._fetch_by_ids(conn, table, [r["id"] for r in prepared])
        except sqlite3.Error as e:
            raise BackendError(f"insert into {table} failed: {e}") from e

    def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> List[Row]:
        _require_filters(filters, "update")
        keys = self._check_columns(table, values.keys())
        if not keys:
            return []
        where, params = self._where(table, filters)
        try:
            with db_session(self.db_path) as conn:
                ids = [r["id"] for r in conn.execute(f"SELECT id FROM {table}{where}", params).fetchall()]
                conn.execute(
                    f"UPDATE {table} SET {', '.join(f'{k} = ?' for k in keys)}{where}",
                    [values[k] for k in keys] + params,
                )
                return self._fetch_by_ids(conn, table, ids)
        except sqlite3.Error as e:
            raise BackendError(f"update of {table} failed: {e}") from e

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Row]:
        _require_filters(filters, "delete")
        where, params = self._where(table, filters)
        try:
            with db_session(self.db_path) as conn:
                removed = [dict(r) for r in conn.execute(f"SELECT * FROM {table}{where}", params).fetchall()]
                conn.execute(f"DELETE FROM {table}{where}", params)
                return removed
        except sqlite3.Error as e:
            raise BackendError(f"delete from {table} failed: {e}") from e

    def _fetch_by_ids(self, conn: sqlite3.Connection, table: str, ids: Sequence[str]) -> List[Row]:
        if not ids:
            return []
        placeholders = ",".join(["?"] * len(ids))
        rows = conn.execute(f"SELECT * FROM {table} WHERE id IN ({placeholders})", list(ids)).fetchall()
        by_id = {r["id"]: dict(r) for r in rows}
        return [by_id[i] for i in ids if i in by_id]

    # -------------------------
    # AuthProvider
    # -------------------------
    def ensure_user(self, email: str, password: str, roles: Sequence[str] = ()) -> str:
        # Create (or re-key) a local account and bind the given roles. Returns the user id.
        email = email.strip().lower()
        try:
            with db_session(self.db_path) as conn:
                row = conn.execute("SELECT id FROM users WHERE email = ?", (email,)).fetchone()
                if row is None:
                    user_id = str(uuid4())
                    conn.execute(
                        "INSERT INTO users(id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                        (user_id, email, hash_password(password), _now_iso()),
                    )
                else:
                    user_id = row["id"]
                    conn.execute(
                        "UPDATE users SET password_hash = ? WHERE id = ?",
                        (hash_password(password), user_id),
                    )
                for role in roles:
                    conn.execute(
                        """
                        INSERT INTO user_roles(id, user_id, role, created_at)
                        VALUES (?, ?, ?, ?)
                        ON CONFLICT(user_id, role) DO NOTHING
                        """,
                        (str(uuid4()), user_id, role, _now_iso()),
                    )
        except sqlite3.Error as e:
            raise BackendError(f"could not create user {email}: {e}") from e
        logger.info("Local user ensured", extra={"user_id": user_id, "roles": list(roles)})
        return user_id

    def get_session(self) -> Optional[AuthSession]:
        return self._session

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            with db_session(self.db_path) as conn:
                row = conn.execute(
                    "SELECT id, email, password_hash FROM users WHERE email = ?",
                    (email.strip().lower(),),
                ).fetchone()
        except sqlite3.Error as e:
            raise BackendError(f"sign-in lookup failed: {e}") from e

        if row is None or not verify_password(password, row["password_hash"]):
            raise AuthenticationFailed("Invalid login credentials")

        self._session = AuthSession(
            user=AuthUser(user_id=row["id"], email=row["email"]),
            access_token=secrets.token_urlsafe(24),
        )
        return self._session

    def sign_out(self) -> None:
        self._session = None
