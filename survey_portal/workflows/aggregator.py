from __future__ import annotations

from typing import Optional

from survey_portal.app.errors import BackendError
from survey_portal.app.i18n import translate
from survey_portal.app.logging import get_logger
from survey_portal.db.repository import SurveyRepository
from survey_portal.tools.demand import DemandReport, build_demand_report

from .outcome import Notice


logger = get_logger(__name__)


class DemandAggregator:
    # Most-demanded products and services, recomputed from a single item read on every load.

    def __init__(self, repo: SurveyRepository):
        self.repo = repo
        self.report = DemandReport()

    def load(self) -> Optional[Notice]:
        try:
            rows = self.repo.list_item_demand_rows()
        except BackendError:
            logger.exception("Failed to fetch demand data")
            return Notice.error(translate("demand.fetch_failed", "en"))
        self.report = build_demand_report(rows)
        return None
