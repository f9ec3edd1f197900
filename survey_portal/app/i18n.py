"""Message catalogs for the public survey form and the admin dashboard.

The public form is Malayalam-first with an English fallback; the admin dashboard
only ships English strings. ``translate`` falls back to English, then to the key.
"""
from __future__ import annotations

from typing import Dict


DEFAULT_LANGUAGE = "ml"

LANGUAGE_LABELS: Dict[str, str] = {
    "ml": "മലയാളം",
    "en": "English",
}

MESSAGES: Dict[str, Dict[str, str]] = {
    "ml": {
        # Form labels and placeholders
        "form.title": "ഉൽപ്പന്ന/സേവന ആവശ്യകതാ സർവേ",
        "form.name": "പൂർണ്ണ നാമം",
        "form.name_placeholder": "നിങ്ങളുടെ പൂർണ്ണ നാമം നൽകുക",
        "form.mobile": "മൊബൈൽ നമ്പർ",
        "form.mobile_placeholder": "10 അക്ക മൊബൈൽ നമ്പർ നൽകുക",
        "form.panchayath": "പഞ്ചായത്ത്",
        "form.panchayath_placeholder": "പഞ്ചായത്ത് തിരഞ്ഞെടുക്കുക",
        "form.ward": "വാർഡ്",
        "form.ward_placeholder": "നിങ്ങളുടെ വാർഡ് നൽകുക",
        "form.role": "ഞാൻ ഒരു",
        "form.role_respondent": "ഉപഭോക്താവ്",
        "form.role_agent": "ഏജന്റ്",
        "form.items": "ഞങ്ങളുടെ ആപ്പിൽ നിങ്ങൾ കാണാൻ ആഗ്രഹിക്കുന്ന ഉൽപ്പന്നങ്ങൾ/സേവനങ്ങൾ",
        "form.item_placeholder": "ഉൽപ്പന്നം/സേവനം {index}",
        "form.add_item": "കൂടുതൽ ചേർക്കുക",
        "form.submit": "സർവേ സമർപ്പിക്കുക",
        # Confirmation state
        "thanks.title": "നന്ദി!",
        "thanks.body": "നിങ്ങളുടെ പ്രതികരണം വിജയകരമായി രേഖപ്പെടുത്തി. നിങ്ങളുടെ വിലപ്പെട്ട ഫീഡ്‌ബാക്കിന് ഞങ്ങൾ നന്ദിയുള്ളവരാണ്.",
        "thanks.again": "മറ്റൊരു പ്രതികരണം സമർപ്പിക്കുക",
        # Validation
        "error.name_min": "പേര് കുറഞ്ഞത് 2 അക്ഷരങ്ങളായിരിക്കണം",
        "error.name_max": "പേര് 100 അക്ഷരങ്ങളിൽ കുറവായിരിക്കണം",
        "error.mobile_invalid": "സാധുവായ 10 അക്ക മൊബൈൽ നമ്പർ നൽകുക",
        "error.panchayath_required": "പഞ്ചായത്ത് ആവശ്യമാണ്",
        "error.panchayath_max": "പഞ്ചായത്ത് 100 അക്ഷരങ്ങളിൽ കുറവായിരിക്കണം",
        "error.ward_required": "വാർഡ് ആവശ്യമാണ്",
        "error.ward_max": "വാർഡ് 50 അക്ഷരങ്ങളിൽ കുറവായിരിക്കണം",
        "error.role_required": "ഉപയോക്താവിന്റെ തരം തിരഞ്ഞെടുക്കുക",
        "error.item_min": "ഉൽപ്പന്നം/സേവനം കുറഞ്ഞത് 2 അക്ഷരങ്ങളായിരിക്കണം",
        "error.item_max": "ഉൽപ്പന്നം/സേവനം 200 അക്ഷരങ്ങളിൽ കുറവായിരിക്കണം",
        "error.items_required": "കുറഞ്ഞത് ഒരു ഉൽപ്പന്നം/സേവനം ചേർക്കുക",
        # Notifications
        "notice.submitted": "സർവേ വിജയകരമായി സമർപ്പിച്ചു!",
        "notice.submit_failed": "സർവേ സമർപ്പിക്കുന്നതിൽ പിശക്",
        "notice.locations_failed": "പഞ്ചായത്തുകൾ ലോഡ് ചെയ്യുന്നതിൽ പിശക്",
    },
    "en": {
        "form.title": "Product/Service Demand Survey",
        "form.name": "Full name",
        "form.name_placeholder": "Enter your full name",
        "form.mobile": "Mobile number",
        "form.mobile_placeholder": "Enter a 10-digit mobile number",
        "form.panchayath": "Panchayath",
        "form.panchayath_placeholder": "Select a panchayath",
        "form.ward": "Ward",
        "form.ward_placeholder": "Enter your ward",
        "form.role": "I am a",
        "form.role_respondent": "Customer",
        "form.role_agent": "Agent",
        "form.items": "Products/services you would like to see in our app",
        "form.item_placeholder": "Product/service {index}",
        "form.add_item": "Add more",
        "form.submit": "Submit survey",
        "thanks.title": "Thank you!",
        "thanks.body": "Your response has been recorded. We are grateful for your valuable feedback.",
        "thanks.again": "Submit another response",
        "error.name_min": "Name must be at least 2 characters",
        "error.name_max": "Name must be under 100 characters",
        "error.mobile_invalid": "Enter a valid 10-digit mobile number",
        "error.panchayath_required": "Panchayath is required",
        "error.panchayath_max": "Panchayath must be under 100 characters",
        "error.ward_required": "Ward is required",
        "error.ward_max": "Ward must be under 50 characters",
        "error.role_required": "Select the user type",
        "error.item_min": "Product/service must be at least 2 characters",
        "error.item_max": "Product/service must be under 200 characters",
        "error.items_required": "Add at least one product/service",
        "notice.submitted": "Survey submitted successfully!",
        "notice.submit_failed": "Error submitting the survey",
        "notice.locations_failed": "Error loading panchayaths",
        # Admin dashboard (English only)
        "admin.title": "Admin Panel",
        "admin.logout": "Logout",
        "admin.loading": "Loading...",
        "admin.tab_locations": "Panchayaths",
        "admin.tab_surveys": "Surveys",
        "admin.tab_demand": "Most Demanded",
        "admin.access_denied": "Access denied",
        "admin.logged_out": "Logged out successfully",
        "locations.title": "Panchayath Management",
        "locations.add": "Add Panchayath",
        "locations.edit": "Edit Panchayath",
        "locations.name": "Name (English)",
        "locations.name_ml": "Name (Malayalam)",
        "locations.ward_count": "Ward Count",
        "locations.wards": "Wards",
        "locations.save_add": "Add",
        "locations.save_update": "Update",
        "locations.confirm_delete": "Are you sure you want to delete this panchayath?",
        "locations.fetch_failed": "Failed to fetch panchayaths",
        "locations.added": "Panchayath added successfully",
        "locations.updated": "Panchayath updated successfully",
        "locations.deleted": "Panchayath deleted successfully",
        "locations.delete_failed": "Failed to delete panchayath",
        "locations.save_failed": "Operation failed",
        "locations.name_required": "Name is required",
        "locations.name_too_long": "Name must be under 100 characters",
        "locations.ward_count_invalid": "Ward count must be a whole number of at least 1",
        "surveys.total": "Total Surveys",
        "surveys.unique_items": "Unique Products/Services",
        "surveys.title": "Survey Responses",
        "surveys.mobile": "Mobile",
        "surveys.panchayath": "Panchayath",
        "surveys.ward": "Ward",
        "surveys.submitted": "Submitted",
        "surveys.requested": "Requested Items:",
        "surveys.confirm_delete": "Are you sure you want to delete this survey?",
        "surveys.fetch_failed": "Failed to fetch surveys",
        "surveys.deleted": "Survey deleted successfully",
        "surveys.delete_failed": "Failed to delete survey",
        "demand.products": "Most Demanded Products",
        "demand.services": "Most Demanded Services",
        "demand.no_products": "No products yet",
        "demand.no_services": "No services yet",
        "demand.fetch_failed": "Failed to fetch data",
        "common.confirm": "Delete",
        "common.cancel": "Cancel",
        # Sign-in page
        "auth.title": "Admin Sign In",
        "auth.email": "Email",
        "auth.password": "Password",
        "auth.submit": "Sign in",
        "auth.failed": "Invalid email or password",
        "auth.signed_in": "Signed in successfully",
    },
}


def translate(key: str, language: str = DEFAULT_LANGUAGE, **fmt: object) -> str:
    text = MESSAGES.get(language, {}).get(key) or MESSAGES["en"].get(key) or key
    if fmt:
        return text.format(**fmt)
    return text
