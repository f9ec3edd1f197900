from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from survey_portal.app.errors import BackendError
from survey_portal.app.i18n import translate
from survey_portal.app.logging import get_logger
from survey_portal.db.models import ResponseHeader, ResponseLineItem
from survey_portal.db.repository import SurveyRepository
from survey_portal.tools.stats import ResponseSummary, summarize_responses

from .outcome import Notice


logger = get_logger(__name__)


@dataclass(frozen=True)
class BrowserSnapshot:
    headers: List[ResponseHeader] = field(default_factory=list)
    items_by_response: Dict[str, List[ResponseLineItem]] = field(default_factory=dict)
    summary: ResponseSummary = ResponseSummary(total_responses=0, unique_items=0)

    def items_for(self, response_id: str) -> List[ResponseLineItem]:
        return self.items_by_response.get(response_id, [])


class ResponseBrowser:
    """
    Admin view of submitted responses.

    Headers are read newest first; each header's items are fetched with their
    own read. The unique-item statistic comes from a separate read of the whole
    item table. Item reads that fail degrade to empty lists.
    """

    def __init__(self, repo: SurveyRepository):
        self.repo = repo
        self.snapshot = BrowserSnapshot()

    def load(self) -> Optional[Notice]:
        try:
            headers = self.repo.list_responses()
        except BackendError:
            logger.exception("Failed to fetch surveys")
            return Notice.error(translate("surveys.fetch_failed", "en"))

        try:
            item_names = self.repo.list_item_names()
        except BackendError:
            logger.warning("Item name read failed; unique item count unavailable", exc_info=True)
            item_names = []

        items_by_response: Dict[str, List[ResponseLineItem]] = {}
        for header in headers:
            try:
                items_by_response[header.response_id] = self.repo.list_items_for_response(header.response_id)
            except BackendError:
                logger.warning(
                    "Item read failed for survey", exc_info=True, extra={"response_id": header.response_id}
                )
                items_by_response[header.response_id] = []

        self.snapshot = BrowserSnapshot(
            headers=headers,
            items_by_response=items_by_response,
            summary=summarize_responses(headers, item_names),
        )
        return None

    def delete(self, response_id: str, confirmed: bool = False) -> Optional[Notice]:
        # Removes the header only; its items remain in the store.
        if not confirmed:
            return None
        try:
            self.repo.delete_response(response_id)
        except BackendError:
            logger.exception("Survey delete failed", extra={"response_id": response_id})
            return Notice.error(translate("surveys.delete_failed", "en"))

        logger.info("Survey deleted", extra={"response_id": response_id})
        return self.load() or Notice.success(translate("surveys.deleted", "en"))
