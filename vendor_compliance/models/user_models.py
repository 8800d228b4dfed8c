from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum

from .common import coerce_datetime, stringify_id

# =====================================================
# USER MODELS
# =====================================================

DEFAULT_AGREEMENT_PERIOD = "Annual Contract"


class UserRole(str, Enum):
    """Enum for portal roles relevant to reporting."""
    VENDOR = "vendor"
    CONSULTANT = "consultant"
    ADMIN = "admin"


class UserStatus(str, Enum):
    """Enum for account status."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class User(BaseModel):
    """Vendor, consultant or admin account as stored by the portal."""
    id: str = Field(..., alias="_id")
    name: str = "Unknown"
    email: Optional[str] = None
    role: str = UserRole.VENDOR.value
    status: UserStatus = UserStatus.ACTIVE
    company: Optional[str] = None
    vendor_code: Optional[str] = Field(None, alias="vendorId")
    assigned_consultant: Optional[str] = Field(None, alias="assignedConsultant")
    agreement_period: Optional[str] = Field(DEFAULT_AGREEMENT_PERIOD, alias="agreementPeriod")
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def derive_status(cls, data):
        # The portal stores an isActive flag; an explicit status wins when present
        if isinstance(data, dict) and not data.get("status") and "isActive" in data:
            data = dict(data)
            data["status"] = UserStatus.ACTIVE if data["isActive"] else UserStatus.INACTIVE
        return data

    @field_validator("id", "assigned_consultant", mode="before")
    @classmethod
    def validate_reference(cls, v):
        return stringify_id(v)

    @field_validator("name", mode="before")
    @classmethod
    def validate_name(cls, v):
        return v or "Unknown"

    @field_validator("role", mode="before")
    @classmethod
    def validate_role(cls, v):
        return str(v).lower() if v else UserRole.VENDOR.value

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if isinstance(v, UserStatus):
            return v
        if isinstance(v, str) and v:
            known = {s.value for s in UserStatus}
            return v.lower() if v.lower() in known else UserStatus.PENDING
        return UserStatus.ACTIVE

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v):
        return coerce_datetime(v)

    @property
    def is_vendor(self) -> bool:
        return self.role == UserRole.VENDOR.value

    @property
    def display_vendor_code(self) -> str:
        """Vendor code, falling back to the last six characters of the id."""
        return self.vendor_code or self.id[-6:].upper()
