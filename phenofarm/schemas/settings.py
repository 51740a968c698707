# phenofarm/schemas/settings.py
from pydantic import BaseModel, EmailStr
from typing import Optional


# Business profile as shown in the settings form; missing values are ""
class BusinessSettingsOut(BaseModel):
    business_name: str
    license_number: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = "VT"
    zip: str = ""
    website: str = ""
    description: str = ""
    logo: str = ""


class BusinessSettingsUpdate(BaseModel):
    business_name: Optional[str] = None
    license_number: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    # One-line address, e.g. "12 Main St, Burlington, VT 05401"
    address: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None


class StripeAccountOut(BaseModel):
    connected: bool
    stripe_account_id: Optional[str] = None
    status: Optional[str] = None


class StripeConnectOut(BaseModel):
    success: bool = True
    url: Optional[str] = None
    stripe_account_id: str
