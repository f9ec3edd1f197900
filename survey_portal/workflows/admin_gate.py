from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from survey_portal.app.errors import AppError, AuthenticationFailed, BackendError
from survey_portal.app.i18n import translate
from survey_portal.app.logging import get_logger
from survey_portal.db.backend import AuthProvider, AuthUser
from survey_portal.db.repository import SurveyRepository

from .outcome import Notice, Outcome


logger = get_logger(__name__)

ADMIN_ROLE = "admin"


class GateStatus(str, Enum):
    GRANTED = "granted"
    NO_SESSION = "no_session"
    NOT_ADMIN = "not_admin"
    ERROR = "error"


@dataclass(frozen=True)
class GateDecision:
    status: GateStatus
    user: Optional[AuthUser] = None
    notice: Optional[Notice] = None

    @property
    def granted(self) -> bool:
        return self.status is GateStatus.GRANTED

    @property
    def redirect(self) -> bool:
        # Every refusal sends the visitor to the sign-in page.
        return not self.granted


class AdminGate:
    """Session + role check guarding the admin dashboard."""

    def __init__(self, auth: AuthProvider, repo: SurveyRepository, role: str = ADMIN_ROLE):
        self.auth = auth
        self.repo = repo
        self.role = role

    def check(self) -> GateDecision:
        try:
            session = self.auth.get_session()
            if session is None:
                return GateDecision(GateStatus.NO_SESSION)

            if not self.repo.has_role(session.user.user_id, self.role):
                logger.warning("Admin access refused", extra={"user_id": session.user.user_id})
                self.auth.sign_out()
                return GateDecision(
                    GateStatus.NOT_ADMIN,
                    user=session.user,
                    notice=Notice.error(translate("admin.access_denied", "en")),
                )
        except AppError:
            logger.exception("Admin access check failed")
            return GateDecision(GateStatus.ERROR)

        return GateDecision(GateStatus.GRANTED, user=session.user)

    def sign_in(self, email: str, password: str) -> Outcome:
        try:
            session = self.auth.sign_in(email.strip(), password)
        except AuthenticationFailed:
            logger.info("Sign-in rejected")
            return Outcome.failed(translate("auth.failed", "en"))
        except BackendError:
            logger.exception("Sign-in request failed")
            return Outcome.failed(translate("auth.failed", "en"))
        logger.info("Signed in", extra={"user_id": session.user.user_id})
        return Outcome.succeeded(translate("auth.signed_in", "en"), value=session.user)

    def logout(self) -> Notice:
        self.auth.sign_out()
        return Notice.success(translate("admin.logged_out", "en"))
