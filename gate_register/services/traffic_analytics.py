# gate_register/services/traffic_analytics.py
"""
Traffic-pattern analytics over access log entry times.

Hourly histogram for a trailing window (24h / 7d / 30d), weekday histogram,
peak and quiet buckets, and the two simple predictions shown on the dashboard:
next peak hour and the longest quiet stretch (good for maintenance).
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from gate_register.schemas.access_log import AccessLogOut
from gate_register.schemas.stats import Bucket, PeakPrediction, QuietPeriod, TrafficPattern

WINDOW_DAYS = {"24h": 1, "7d": 7, "30d": 30}
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
QUIET_THRESHOLD = 1          # a bucket with this many entries or fewer is "quiet"


def window_start(window: str, now: datetime) -> datetime:
    if window not in WINDOW_DAYS:
        raise ValueError(f"Unknown traffic window '{window}', expected one of {list(WINDOW_DAYS)}")
    return now - timedelta(days=WINDOW_DAYS[window])


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00 - {hour + 1:02d}:00"


def bucket_by_hour_of_day(logs: Sequence[AccessLogOut], window: str, now: datetime) -> List[Bucket]:
    """24 buckets of entries inside the window, by local hour of entry."""
    start = window_start(window, now)
    counts = [0] * 24
    for log in logs:
        if log.entry_time >= start:
            counts[log.entry_time.hour] += 1
    return [Bucket(index=h, label=hour_label(h), count=c) for h, c in enumerate(counts)]


def bucket_by_day_of_week(logs: Sequence[AccessLogOut]) -> List[Bucket]:
    """7 buckets over all given logs; index 0 is Sunday."""
    counts = [0] * 7
    for log in logs:
        # weekday(): Monday=0 .. Sunday=6
        counts[(log.entry_time.weekday() + 1) % 7] += 1
    return [Bucket(index=d, label=DAY_NAMES[d], count=c) for d, c in enumerate(counts)]


def peak_buckets(buckets: Sequence[Bucket], top_n: int = 5) -> List[Bucket]:
    """Busiest non-empty buckets, most entries first; ties go to the lower index."""
    busy = [b for b in buckets if b.count > 0]
    return sorted(busy, key=lambda b: b.count, reverse=True)[:top_n]


def quiet_buckets(buckets: Sequence[Bucket], limit: int = 5) -> List[Bucket]:
    return [b for b in buckets if b.count <= QUIET_THRESHOLD][:limit]


def predict_next_peak_hour(peaks: Sequence[Bucket]) -> Optional[PeakPrediction]:
    if not peaks:
        return None
    busiest = peaks[0].index
    return PeakPrediction(
        hour=(busiest + 1) % 24,
        confidence="High",
        reason=f"Based on peak at {busiest:02d}:00",
    )


def longest_quiet_period(hourly: Sequence[Bucket]) -> Optional[QuietPeriod]:
    """Longest run of consecutive quiet hours within the day (no wrap past midnight)."""
    best_len, best_start, run = 0, 0, 0
    for bucket in hourly:
        if bucket.count <= QUIET_THRESHOLD:
            run += 1
            if run > best_len:
                best_len = run
                best_start = bucket.index - run + 1
        else:
            run = 0

    if best_len == 0:
        return None
    return QuietPeriod(start_hour=best_start, duration=best_len, confidence="Medium")


def average_hourly_rate(hourly: Sequence[Bucket], window: str) -> float:
    total = sum(b.count for b in hourly)
    return round(total / (WINDOW_DAYS[window] * 24), 2)


def analyze_traffic(logs: Sequence[AccessLogOut], window: str, now: datetime,
                    peak_count: int = 5, quiet_limit: int = 5) -> TrafficPattern:
    hourly = bucket_by_hour_of_day(logs, window, now)
    peaks = peak_buckets(hourly, peak_count)
    return TrafficPattern(
        window=window,
        total_entries=sum(b.count for b in hourly),
        hourly=hourly,
        weekly=bucket_by_day_of_week(logs),
        peak_hours=peaks,
        quiet_hours=quiet_buckets(hourly, quiet_limit),
        average_hourly_rate=average_hourly_rate(hourly, window),
        next_peak=predict_next_peak_hour(peaks),
        quiet_period=longest_quiet_period(hourly),
    )
