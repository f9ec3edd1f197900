# repository.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from survey_portal.app.errors import BackendError

from .backend import DataBackend
from .models import (
    ITEMS_TABLE,
    LOCATIONS_TABLE,
    RESPONSES_TABLE,
    ROLES_TABLE,
    Category,
    Location,
    ResponseHeader,
    ResponseLineItem,
    location_payload,
)
from .validation import validate_row


class SurveyRepository:
    """Typed operations over the survey tables. Every row read is validated into a record."""

    def __init__(self, backend: DataBackend):
        self.backend = backend

    # -------------------------
    # Locations (panchayaths)
    # -------------------------
    def list_locations(self) -> List[Location]:
        rows = self.backend.select(LOCATIONS_TABLE, "id, name, name_ml, ward_count", order_by="name")
        return [Location.from_row(r) for r in rows]

    def create_location(self, name: str, name_ml: Optional[str], ward_count: int) -> Location:
        rows = self.backend.insert(LOCATIONS_TABLE, [location_payload(name, name_ml, ward_count)])
        if not rows:
            raise BackendError(f"insert into {LOCATIONS_TABLE} returned no row")
        return Location.from_row(rows[0])

    def update_location(self, location_id: str, name: str, name_ml: Optional[str], ward_count: int) -> None:
        self.backend.update(LOCATIONS_TABLE, location_payload(name, name_ml, ward_count), {"id": location_id})

    def delete_location(self, location_id: str) -> None:
        self.backend.delete(LOCATIONS_TABLE, {"id": location_id})

    # -------------------------
    # Responses (header + line items)
    # -------------------------
    def insert_response(self, name: str, mobile: str, panchayath: str, ward: str, role: str) -> ResponseHeader:
        rows = self.backend.insert(
            RESPONSES_TABLE,
            [{"name": name, "mobile": mobile, "panchayath": panchayath, "ward": ward, "user_type": role}],
        )
        if not rows:
            raise BackendError(f"insert into {RESPONSES_TABLE} returned no row")
        return ResponseHeader.from_row(rows[0])

    def insert_line_items(self, response_id: str, item_names: Sequence[str], category: Category) -> int:
        # One batched write, one row per requested item. Written without reading back,
        # since anonymous visitors may insert items but not select them.
        rows = [{"survey_id": response_id, "item_name": n, "item_type": category} for n in item_names]
        self.backend.insert(ITEMS_TABLE, rows, returning=False)
        return len(rows)

    def list_responses(self) -> List[ResponseHeader]:
        rows = self.backend.select(RESPONSES_TABLE, order_by="created_at", descending=True)
        return [ResponseHeader.from_row(r) for r in rows]

    def list_items_for_response(self, response_id: str) -> List[ResponseLineItem]:
        rows = self.backend.select(
            ITEMS_TABLE, "id, survey_id, item_name, item_type", filters={"survey_id": response_id}
        )
        return [ResponseLineItem.from_row(r) for r in rows]

    def list_item_names(self) -> List[str]:
        rows = self.backend.select(ITEMS_TABLE, "item_name")
        for r in rows:
            validate_row(ITEMS_TABLE, r, columns=("item_name",))
        return [r["item_name"] for r in rows]

    def list_item_demand_rows(self) -> List[Tuple[str, Category]]:
        rows = self.backend.select(ITEMS_TABLE, "item_name, item_type")
        for r in rows:
            validate_row(ITEMS_TABLE, r, columns=("item_name", "item_type"))
        return [(r["item_name"], r["item_type"]) for r in rows]

    def delete_response(self, response_id: str) -> None:
        # Header only; line items are left in place.
        self.backend.delete(RESPONSES_TABLE, {"id": response_id})

    # -------------------------
    # Roles
    # -------------------------
    def has_role(self, user_id: str, role: str = "admin") -> bool:
        rows = self.backend.select(ROLES_TABLE, "role", filters={"user_id": user_id, "role": role})
        for r in rows:
            validate_row(ROLES_TABLE, r, columns=("role",))
        return any(r["role"] == role for r in rows)
