# gate_register/schemas/access_log.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from gate_register.utils.clock import to_local_naive

AccessStatus = Literal["Inside", "Exited"]


class AccessLogRecord(BaseModel):
    """A ready-made log handed to Registry.record_access_log()."""
    profile_id: str
    log_id: Optional[str] = None          # generated when omitted
    entry_time: Optional[datetime] = None  # clock.now() when omitted
    exit_time: Optional[datetime] = None
    status: AccessStatus = "Inside"
    associated_profile_id: Optional[str] = None
    purpose: Optional[str] = None
    guard_notes: Optional[str] = None

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _local_times(cls, v):
        return to_local_naive(v)


class AccessLogOut(BaseModel):
    log_id: str
    profile_id: str
    entry_time: datetime
    exit_time: Optional[datetime] = None
    status: AccessStatus
    associated_profile_id: Optional[str] = None
    purpose: Optional[str] = None
    guard_notes: Optional[str] = None

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _local_times(cls, v):
        return to_local_naive(v)

    class Config:
        from_attributes = True
        frozen = True


class AccessLogFilters(BaseModel):
    start: Optional[datetime] = None      # entry_time >= start
    end: Optional[datetime] = None        # entry_time <= end
    profile_type: Optional[Literal["Individual", "Vehicle"]] = None
    status: Optional[AccessStatus] = None
    search_query: Optional[str] = None

    @field_validator("start", "end")
    @classmethod
    def _local_times(cls, v):
        return to_local_naive(v)
