# models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Mapping, Optional

from .validation import validate_row


Role = Literal["respondent", "agent"]
Category = Literal["product", "service"]

ROLES = ("respondent", "agent")
CATEGORIES = ("product", "service")

# Backend table names (kept identical to the hosted schema).
LOCATIONS_TABLE = "panchayaths"
RESPONSES_TABLE = "surveys"
ITEMS_TABLE = "survey_items"
ROLES_TABLE = "user_roles"


def category_for(role: str) -> Category:
    # Respondents ask for products, agents offer services.
    if role == "respondent":
        return "product"
    if role == "agent":
        return "service"
    raise ValueError(f"Unknown role: {role!r}")


@dataclass(frozen=True)
class Location:
    location_id: str
    name: str
    name_ml: Optional[str]
    ward_count: int

    @property
    def display_name(self) -> str:
        return self.name_ml or self.name

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Location":
        validate_row(LOCATIONS_TABLE, row)
        return cls(
            location_id=str(row["id"]),
            name=row["name"],
            name_ml=row.get("name_ml") or None,
            ward_count=int(row["ward_count"]),
        )


@dataclass(frozen=True)
class ResponseHeader:
    response_id: str
    name: str
    mobile: str
    panchayath: str
    ward: str
    role: Role
    created_at: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ResponseHeader":
        validate_row(RESPONSES_TABLE, row)
        return cls(
            response_id=str(row["id"]),
            name=row["name"],
            mobile=row["mobile"],
            panchayath=row["panchayath"],
            ward=row["ward"],
            role=row["user_type"],
            created_at=str(row["created_at"]),
        )


@dataclass(frozen=True)
class ResponseLineItem:
    item_id: str
    response_id: str
    item_name: str
    category: Category

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ResponseLineItem":
        validate_row(ITEMS_TABLE, row)
        return cls(
            item_id=str(row["id"]),
            response_id=str(row["survey_id"]),
            item_name=row["item_name"],
            category=row["item_type"],
        )


def location_payload(name: str, name_ml: Optional[str], ward_count: int) -> Dict[str, Any]:
    return {"name": name, "name_ml": name_ml or None, "ward_count": int(ward_count)}
