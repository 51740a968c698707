# phenofarm/services/business_profile.py
"""Grower / dispensary settings form: read with empty-string defaults, save
with the one-line address split into its columns."""
from typing import Dict, Optional

from phenofarm.utils.errors import ValidationError

DEFAULT_STATE = "VT"

_TEXT_FIELDS = ("license_number", "contact_name", "phone", "website", "description")


def split_address(address: str) -> Dict[str, Optional[str]]:
    """"12 Main St, Burlington, VT 05401" -> address/city/state/zip.

    A string without commas is kept whole as the street line. A last part
    that is not "ST ZIP" leaves city, state and zip empty.
    """
    parts = [p.strip() for p in address.split(",")]
    result: Dict[str, Optional[str]] = {"address": address, "city": None, "state": DEFAULT_STATE, "zip": None}
    if len(parts) < 2:
        return result

    result["address"] = parts[0] or None
    state_zip = parts[-1].split(" ")
    if len(state_zip) >= 2:
        result["city"] = (parts[1] if len(parts) >= 3 else "") or None
        result["state"] = state_zip[-2] or DEFAULT_STATE
        result["zip"] = state_zip[-1] or None
    return result


def settings_view(profile, email: str) -> dict:
    return {
        "business_name": profile.business_name,
        "license_number": profile.license_number or "",
        "contact_name": profile.contact_name or "",
        "email": email or "",
        "phone": profile.phone or "",
        "address": profile.address or "",
        "city": profile.city or "",
        "state": profile.state or DEFAULT_STATE,
        "zip": profile.zip or "",
        "website": profile.website or "",
        "description": profile.description or "",
        "logo": profile.logo or "",
    }


def apply_settings(profile, data: dict) -> None:
    """Copy the settings form onto a Grower or Dispensary row. Does not commit."""
    business_name = (data.get("business_name") or "").strip()
    if not business_name:
        raise ValidationError("Business name is required", field="business_name")
    profile.business_name = business_name

    for name in _TEXT_FIELDS:
        setattr(profile, name, data.get(name) or None)

    if data.get("address"):
        for column, value in split_address(data["address"]).items():
            setattr(profile, column, value)

    if "logo" in data:
        profile.logo = data["logo"] or None
