# gate_register/schemas/profile.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from gate_register.utils.clock import to_local_naive

ProfileType = Literal["Individual", "Vehicle"]


class ProfileCreate(BaseModel):
    profile_type: ProfileType
    name: str
    identifier: str              # phone number (Individual) | plate number (Vehicle)
    email: Optional[str] = None
    company: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    linked_profile_id: Optional[str] = None

    @field_validator("name", "identifier")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v


class ProfileUpdate(BaseModel):
    """Partial update. Only fields the caller actually sets are merged."""
    profile_id: str
    profile_type: Optional[ProfileType] = None
    name: Optional[str] = None
    identifier: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    linked_profile_id: Optional[str] = None

    @field_validator("name", "identifier")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude={"profile_id"})


class ProfileOut(BaseModel):
    profile_id: str
    profile_type: ProfileType
    name: str
    identifier: str
    email: Optional[str] = None
    company: Optional[str] = None
    driver_name: Optional[str] = None
    driver_phone: Optional[str] = None
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    is_blacklisted: bool = False
    linked_profile_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _local_times(cls, v):
        return to_local_naive(v)

    class Config:
        from_attributes = True
        frozen = True
