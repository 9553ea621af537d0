# gate_register/schemas/snapshot.py
"""Full register contents, in store order. Used for export and restore."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, field_validator

from gate_register.schemas.access_log import AccessLogOut
from gate_register.schemas.profile import ProfileOut
from gate_register.utils.clock import to_local_naive


class BlacklistEventOut(BaseModel):
    event_id: str
    profile_id: str
    action: Literal["blacklisted", "unblacklisted"]
    reason: Optional[str] = None
    actor: str
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _local_time(cls, v):
        return to_local_naive(v)

    class Config:
        from_attributes = True
        frozen = True


class RegistrySnapshot(BaseModel):
    version: int = 1
    profiles: List[ProfileOut] = []
    access_logs: List[AccessLogOut] = []
    blacklist_events: List[BlacklistEventOut] = []
