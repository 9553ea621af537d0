# gate_register/services/access_state.py
"""
Entry/exit state machine for access logs.

  Inside ──log_exit──▶ Exited      (one-way, exit_time written once)

A profile may hold at most one Inside log. Blacklisted profiles never get one.
Functions here stage changes on the session; the Registry owns the commit.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from gate_register.models.access_log import AccessLog
from gate_register.models.profile import Profile
from gate_register.utils.exceptions import (
    AccessDenied, AlreadyExited, AlreadyInside, LogNotFound, ProfileNotFound,
)
from gate_register.utils.logger import get_logger

logger = get_logger(__name__)

INSIDE = "Inside"
EXITED = "Exited"


def open_logs_for(db: Session, profile_id: str) -> list:
    return (
        db.query(AccessLog)
        .filter(AccessLog.profile_id == profile_id, AccessLog.status == INSIDE)
        .all()
    )


def ensure_can_enter(profile: Optional[Profile], profile_id: str, open_logs: list):
    if profile is None:
        raise ProfileNotFound(profile_id)
    if profile.is_blacklisted:
        raise AccessDenied(f'Profile "{profile.name}" is blacklisted and cannot enter')
    if open_logs:
        if len(open_logs) > 1:
            # Should never happen; refuse rather than guess which one is real
            logger.error(f"[entry] Profile {profile_id} has {len(open_logs)} open logs")
        raise AlreadyInside()


def ensure_can_exit(log: Optional[AccessLog], log_id: str):
    if log is None:
        raise LogNotFound(log_id)
    if log.status == EXITED:
        raise AlreadyExited()


def open_entry(profile_id: str, now: datetime, purpose: Optional[str] = None,
               associated_profile_id: Optional[str] = None,
               guard_notes: Optional[str] = None) -> AccessLog:
    return AccessLog(
        log_id=str(uuid.uuid4()),
        profile_id=profile_id,
        entry_time=now,
        status=INSIDE,
        associated_profile_id=associated_profile_id,
        purpose=purpose,
        guard_notes=guard_notes,
    )


def close_entry(log: AccessLog, now: datetime) -> AccessLog:
    log.exit_time = now
    log.status = EXITED
    return log


def log_entry(db: Session, now: datetime, profile_id: str, purpose: Optional[str] = None,
              associated_profile_id: Optional[str] = None) -> AccessLog:
    """Open a new Inside log for profile_id. Raises on unknown, blacklisted or already-inside profiles."""
    profile = db.query(Profile).filter(Profile.profile_id == profile_id).first()
    try:
        ensure_can_enter(profile, profile_id, open_logs_for(db, profile_id))
    except AccessDenied as exc:
        logger.warning(f"[entry] DENIED {profile.profile_type} '{profile.name}' ({profile.identifier}): {exc}")
        raise

    log = open_entry(profile_id, now, purpose, associated_profile_id)
    db.add(log)
    logger.info(f"[entry] {profile.profile_type} '{profile.name}' entered | log={log.log_id}")
    return log


def log_exit(db: Session, now: datetime, log_id: str) -> AccessLog:
    """Close an Inside log. Raises LogNotFound or AlreadyExited."""
    log = db.query(AccessLog).filter(AccessLog.log_id == log_id).first()
    ensure_can_exit(log, log_id)
    close_entry(log, now)
    logger.info(f"[exit] profile={log.profile_id} exited | log={log_id}")
    return log
