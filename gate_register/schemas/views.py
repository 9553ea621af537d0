# gate_register/schemas/views.py
"""Joined, read-only views built by the query layer."""

from typing import List, Literal, Optional

from pydantic import BaseModel

from gate_register.schemas.access_log import AccessLogOut
from gate_register.schemas.profile import ProfileOut

MatchType = Literal["name", "identifier", "both"]


class ProfileSearchResult(BaseModel):
    profile: ProfileOut
    match_type: MatchType
    match_score: int

    class Config:
        frozen = True


class AccessLogWithProfile(AccessLogOut):
    profile: ProfileOut
    associated_profile: Optional[ProfileOut] = None


class ProfileWithLogs(ProfileOut):
    recent_logs: List[AccessLogOut]      # newest first
    is_currently_inside: bool
