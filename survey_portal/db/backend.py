"""Collaborator interfaces for the hosted backend.

``DataBackend`` is the table store (select/insert/update/delete with equality
filters and single-column ordering). ``AuthProvider`` is the session provider.
Both are implemented by ``SupabaseBackend`` (production) and ``SQLiteBackend``
(local development and tests); the application entry point owns the instance.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence


Row = Dict[str, Any]


@dataclass(frozen=True)
class AuthUser:
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class AuthSession:
    user: AuthUser
    access_token: Optional[str] = None


def _require_filters(filters: Optional[Mapping[str, Any]], op: str) -> None:
    # Mutations are always scoped by an equality filter.
    if not filters:
        raise ValueError(f"{op} requires at least one equality filter")


class DataBackend(ABC):
    @abstractmethod
    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        ...

    @abstractmethod
    def insert(self, table: str, rows: Sequence[Mapping[str, Any]], returning: bool = True) -> List[Row]:
        # Returns the inserted rows, including generated identifiers.
        # With returning=False nothing is read back and the result is empty.
        ...

    @abstractmethod
    def update(self, table: str, values: Mapping[str, Any], filters: Mapping[str, Any]) -> List[Row]:
        ...

    @abstractmethod
    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Row]:
        ...


class AuthProvider(ABC):
    @abstractmethod
    def get_session(self) -> Optional[AuthSession]:
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    def sign_out(self) -> None:
        ...


class Backend(DataBackend, AuthProvider, ABC):
    # One client handle serving both the table store and the session provider.
    pass
