# gate_register/services/validation.py
"""
Identity & validation checks run before a profile is admitted or changed.
Pure functions: they look at a snapshot of existing profiles and raise
ValidationError on the first rule that fails.

Identifier formats:
  - Individual: Nigerian phone number, e.g. 08123456789 or +2348123456789
  - Vehicle:    plate number, e.g. ABC-123, ABC 123 or ABC123DE
"""

import re
from typing import Iterable, Optional

from gate_register.utils.exceptions import ValidationError

PHONE_PATTERN = re.compile(r"^(\+?234|0)?[789][01]\d{8}$")
PLATE_PATTERN = re.compile(r"^[A-Z]{3}[- ]?[0-9]{3}[A-Z]{0,2}$", re.IGNORECASE)

_WHITESPACE = re.compile(r"\s")


def identifier_key(identifier: str) -> str:
    """Comparison key for identifiers. Uniqueness is case-insensitive."""
    return identifier.lower()


def validate_required(field: str, value: Optional[str]):
    if value is None or not value.strip():
        raise ValidationError(field, f"{field.replace('_', ' ').capitalize()} is required")


def validate_identifier_unique(identifier: str, existing_profiles: Iterable,
                               exclude_profile_id: Optional[str] = None):
    """Fail if any other profile, of any type, already uses this identifier."""
    key = identifier_key(identifier)
    for profile in existing_profiles:
        if profile.profile_id == exclude_profile_id:
            continue
        if identifier_key(profile.identifier) == key:
            raise ValidationError(
                "identifier", f'A profile with identifier "{identifier}" already exists'
            )


def validate_identifier_format(profile_type: str, identifier: str):
    compact = _WHITESPACE.sub("", identifier)
    if profile_type == "Individual" and not PHONE_PATTERN.match(compact):
        raise ValidationError("identifier", "Please enter a valid Nigerian phone number")
    if profile_type == "Vehicle" and not PLATE_PATTERN.match(compact):
        raise ValidationError("identifier", "Please enter a valid plate number (e.g., ABC-123)")


def validate_profile_fields(profile_type: str, name: Optional[str], identifier: Optional[str],
                            existing_profiles: Iterable, enforce_format: bool = True,
                            exclude_profile_id: Optional[str] = None):
    """
    Full admission check for a new or edited profile.
    Order: required fields, then uniqueness, then format. First failure wins.
    """
    validate_required("name", name)
    validate_required("identifier", identifier)
    validate_identifier_unique(identifier, existing_profiles, exclude_profile_id)
    if enforce_format:
        validate_identifier_format(profile_type, identifier)


def validate_snapshot(snapshot):
    """
    Check a full register snapshot before it replaces the store:
    unique ids and identifiers, no orphan logs, coherent log states,
    and at most one Inside log per profile.
    """
    profile_ids = set()
    identifier_keys = set()
    for p in snapshot.profiles:
        if p.profile_id in profile_ids:
            raise ValidationError("profiles", f'Duplicate profile id "{p.profile_id}"')
        profile_ids.add(p.profile_id)
        validate_required("name", p.name)
        validate_required("identifier", p.identifier)
        key = identifier_key(p.identifier)
        if key in identifier_keys:
            raise ValidationError("profiles", f'A profile with identifier "{p.identifier}" already exists')
        identifier_keys.add(key)

    log_ids = set()
    inside = set()
    for log in snapshot.access_logs:
        if log.log_id in log_ids:
            raise ValidationError("access_logs", f'Duplicate access log id "{log.log_id}"')
        log_ids.add(log.log_id)
        if log.profile_id not in profile_ids:
            raise ValidationError("access_logs", f'Access log "{log.log_id}" references an unknown profile')
        if log.status == "Inside":
            if log.exit_time is not None:
                raise ValidationError("access_logs", f'Inside log "{log.log_id}" has an exit time')
            if log.profile_id in inside:
                raise ValidationError("access_logs", f'Profile "{log.profile_id}" has more than one Inside log')
            inside.add(log.profile_id)
        elif log.exit_time is None:
            raise ValidationError("access_logs", f'Exited log "{log.log_id}" has no exit time')

    event_ids = set()
    for event in snapshot.blacklist_events:
        if event.event_id in event_ids:
            raise ValidationError("blacklist_events", f'Duplicate blacklist event id "{event.event_id}"')
        event_ids.add(event.event_id)
        if event.profile_id not in profile_ids:
            raise ValidationError("blacklist_events", f'Blacklist event "{event.event_id}" references an unknown profile')
