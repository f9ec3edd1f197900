# supabase_backend.py
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

import httpx
from postgrest.exceptions import APIError
from postgrest.types import ReturnMethod
from supabase import AuthError, Client, create_client

from survey_portal.app.errors import AuthenticationFailed, BackendError
from survey_portal.app.logging import get_logger

from .backend import AuthSession, AuthUser, Backend, Row, _require_filters


logger = get_logger(__name__)

# Failures of the PostgREST table API and of the underlying HTTP transport.
_REMOTE_ERRORS = (APIError, httpx.HTTPError)


class SupabaseBackend(Backend):
    """
    Hosted backend: Supabase tables through PostgREST, sessions through Supabase Auth.

    The client keeps the signed-in session in memory, so one instance must be
    created per browser session.
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def connect(cls, url: str, key: str) -> "SupabaseBackend":
        return cls(create_client(url, key))

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
        query = self.client.table(table).select(columns)
        for key, value in (filters or {}).items():
            query = query.eq(key, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        try:
            response = query.execute()
        except _REMOTE_ERRORS as e:
            raise BackendError(f"select from {table} failed: {e}") from e
        return list(response.data or [])

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]], returning: bool = True) -> List[Row]:
        # Minimal return needs no SELECT grant on the table.
        if not rows:
            return []
        method = ReturnMethod.representation if returning else ReturnMethod.minimal
        try:
            response = self.client.table(table).insert([dict(r) for r in rows], returning=method).execute()
        except _REMOTE_ERRORS as e:
            raise BackendError(f"insert into {table} failed: {e}") from e
        return list(response.data or [])

    def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> List[Row]:
        _require_filters(filters, "update")
        query = self.client.table(table).update(dict(values))
        for key, value in filters.items():
            query = query.eq(key, value)
        try:
            response = query.execute()
        except _REMOTE_ERRORS as e:
            raise BackendError(f"update of {table} failed: {e}") from e
        return list(response.data or [])

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Row]:
        _require_filters(filters, "delete")
        query = self.client.table(table).delete()
        for key, value in filters.items():
            query = query.eq(key, value)
        try:
            response = query.execute()
        except _REMOTE_ERRORS as e:
            raise BackendError(f"delete from {table} failed: {e}") from e
        return list(response.data or [])

    # -------------------------
    # AuthProvider
    # -------------------------
    def get_session(self) -> Optional[AuthSession]:
        try:
            session = self.client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            raise BackendError(f"session lookup failed: {e}") from e
        if session is None or session.user is None:
            return None
        return AuthSession(
            user=AuthUser(user_id=str(session.user.id), email=session.user.email),
            access_token=session.access_token,
        )

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            response = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except AuthError as e:
            raise AuthenticationFailed(str(e)) from e
        except httpx.HTTPError as e:
            raise BackendError(f"sign-in request failed: {e}") from e
        if response.session is None or response.user is None:
            raise AuthenticationFailed("No session returned for these credentials")
        return AuthSession(
            user=AuthUser(user_id=str(response.user.id), email=response.user.email),
            access_token=response.session.access_token,
        )

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as e:
            # The local session is dropped by the client even when revocation fails.
            logger.warning("Remote sign-out failed", extra={"error": str(e)})
