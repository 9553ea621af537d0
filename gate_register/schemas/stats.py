# gate_register/schemas/stats.py
from typing import List, Literal, Optional

from pydantic import BaseModel

TrafficWindow = Literal["24h", "7d", "30d"]


class DashboardStats(BaseModel):
    total_profiles: int
    total_access_logs: int
    currently_inside: int
    today_entries: int
    this_week_entries: int
    this_month_entries: int
    blacklisted_profiles: int

    class Config:
        frozen = True


class ProfileTypeStats(BaseModel):
    individual: int
    vehicle: int

    class Config:
        frozen = True


class Bucket(BaseModel):
    index: int          # hour 0-23, or weekday 0-6 with 0 = Sunday
    label: str
    count: int

    class Config:
        frozen = True


class PeakPrediction(BaseModel):
    hour: int
    confidence: str
    reason: str


class QuietPeriod(BaseModel):
    start_hour: int
    duration: int       # hours
    confidence: str


class TrafficPattern(BaseModel):
    window: TrafficWindow
    total_entries: int
    hourly: List[Bucket]
    weekly: List[Bucket]
    peak_hours: List[Bucket]
    quiet_hours: List[Bucket]
    average_hourly_rate: float
    next_peak: Optional[PeakPrediction] = None
    quiet_period: Optional[QuietPeriod] = None
