# gate_register/services/queries.py
"""
Read-only derivations over a snapshot of profiles and access logs:
search ranking, joined views, dashboard counts and log filtering.
Nothing is cached; the Registry hands in fresh snapshots on every call.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, Sequence

from gate_register.schemas.access_log import AccessLogFilters, AccessLogOut
from gate_register.schemas.profile import ProfileOut
from gate_register.schemas.stats import DashboardStats, ProfileTypeStats
from gate_register.schemas.views import AccessLogWithProfile, ProfileSearchResult, ProfileWithLogs

SCORE_BOTH = 100
SCORE_IDENTIFIER = 90
SCORE_NAME = 80


# ── Search ────────────────────────────────────────────────────────────────

def search_profiles(profiles: Sequence[ProfileOut], query: str) -> List[ProfileSearchResult]:
    """
    Case-insensitive substring search on name and identifier.
    Scores: both fields 100, identifier only 90, name only 80.
    Highest score first; equal scores keep store order.
    """
    if not query or not query.strip():
        return []

    needle = query.lower()
    results = []
    for profile in profiles:
        name_match = needle in profile.name.lower()
        identifier_match = needle in profile.identifier.lower()

        if name_match and identifier_match:
            results.append(ProfileSearchResult(profile=profile, match_type="both", match_score=SCORE_BOTH))
        elif identifier_match:
            results.append(ProfileSearchResult(profile=profile, match_type="identifier", match_score=SCORE_IDENTIFIER))
        elif name_match:
            results.append(ProfileSearchResult(profile=profile, match_type="name", match_score=SCORE_NAME))

    # sorted() is stable, reverse=True included
    return sorted(results, key=lambda r: r.match_score, reverse=True)


# ── Joined views ──────────────────────────────────────────────────────────

def join_logs_with_profiles(profiles: Sequence[ProfileOut],
                            logs: Sequence[AccessLogOut]) -> List[AccessLogWithProfile]:
    """Attach each log's profile (and associated profile, if it resolves). Orphan logs are dropped."""
    by_id = {p.profile_id: p for p in profiles}
    joined = []
    for log in logs:
        profile = by_id.get(log.profile_id)
        if profile is None:
            continue
        associated = by_id.get(log.associated_profile_id) if log.associated_profile_id else None
        joined.append(AccessLogWithProfile(**log.model_dump(), profile=profile, associated_profile=associated))
    return joined


def join_profiles_with_recent_logs(profiles: Sequence[ProfileOut], logs: Sequence[AccessLogOut],
                                   limit: int = 5) -> List[ProfileWithLogs]:
    logs_by_profile = {}
    for log in logs:
        logs_by_profile.setdefault(log.profile_id, []).append(log)

    views = []
    for profile in profiles:
        own = logs_by_profile.get(profile.profile_id, [])
        recent = sorted(own, key=lambda l: l.entry_time, reverse=True)[:limit]
        views.append(ProfileWithLogs(
            **profile.model_dump(),
            recent_logs=recent,
            is_currently_inside=any(l.status == "Inside" for l in own),
        ))
    return views


# ── Dashboard ─────────────────────────────────────────────────────────────

def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def week_window_start(now: datetime) -> datetime:
    """Rolling 7 × 24h back from now."""
    return now - timedelta(days=7)


def month_window_start(now: datetime) -> datetime:
    """
    Midnight of the same day-of-month one calendar month back.
    A day the previous month lacks rolls forward: 31 Mar -> 3 Mar (28-day Feb).
    """
    if now.month == 1:
        year, month = now.year - 1, 12
    else:
        year, month = now.year, now.month - 1
    return datetime(year, month, 1) + timedelta(days=now.day - 1)


def _entries_since(logs: Iterable[AccessLogOut], start: datetime) -> int:
    return sum(1 for log in logs if log.entry_time >= start)


def compute_dashboard_stats(profiles: Sequence[ProfileOut], logs: Sequence[AccessLogOut],
                            now: datetime) -> DashboardStats:
    """Counts over the snapshot. The today/week/month windows are independent and may overlap."""
    return DashboardStats(
        total_profiles=len(profiles),
        total_access_logs=len(logs),
        currently_inside=sum(1 for log in logs if log.status == "Inside"),
        today_entries=_entries_since(logs, start_of_day(now)),
        this_week_entries=_entries_since(logs, week_window_start(now)),
        this_month_entries=_entries_since(logs, month_window_start(now)),
        blacklisted_profiles=sum(1 for p in profiles if p.is_blacklisted),
    )


def count_profiles_by_type(profiles: Sequence[ProfileOut]) -> ProfileTypeStats:
    return ProfileTypeStats(
        individual=sum(1 for p in profiles if p.profile_type == "Individual"),
        vehicle=sum(1 for p in profiles if p.profile_type == "Vehicle"),
    )


# ── Filtering ─────────────────────────────────────────────────────────────

def filter_access_logs(joined: Sequence[AccessLogWithProfile],
                       filters: AccessLogFilters) -> List[AccessLogWithProfile]:
    """Apply the admin log filters. Unset filters match everything; a set search query uses search_profiles()."""
    matched_ids = None
    if filters.search_query and filters.search_query.strip():
        distinct = {log.profile.profile_id: log.profile for log in joined}
        matched_ids = {r.profile.profile_id for r in search_profiles(list(distinct.values()), filters.search_query)}

    result = []
    for log in joined:
        if filters.start and log.entry_time < filters.start:
            continue
        if filters.end and log.entry_time > filters.end:
            continue
        if filters.profile_type and log.profile.profile_type != filters.profile_type:
            continue
        if filters.status and log.status != filters.status:
            continue
        if matched_ids is not None and log.profile_id not in matched_ids:
            continue
        result.append(log)
    return result
