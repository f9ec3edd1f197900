from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional


NoticeKind = Literal["success", "error"]


@dataclass(frozen=True)
class Notice:
    # A transient, user-facing notification (rendered as a toast).
    kind: NoticeKind
    message: str

    @classmethod
    def success(cls, message: str) -> "Notice":
        return cls("success", message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls("error", message)


@dataclass(frozen=True)
class Outcome:
    ok: bool
    notice: Optional[Notice] = None
    field_errors: Dict[str, str] = field(default_factory=dict)
    value: Any = None

    @classmethod
    def invalid(cls, field_errors: Dict[str, str]) -> "Outcome":
        # Validation failures are shown inline; no toast.
        return cls(ok=False, field_errors=dict(field_errors))

    @classmethod
    def failed(cls, message: str) -> "Outcome":
        return cls(ok=False, notice=Notice.error(message))

    @classmethod
    def succeeded(cls, message: str, value: Any = None) -> "Outcome":
        return cls(ok=True, notice=Notice.success(message), value=value)
