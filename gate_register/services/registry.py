# gate_register/services/registry.py
"""
The Registry: sole owner of profiles, access logs and the blacklist audit trail.

Every public operation runs under one lock, inside one session, and commits
before it returns. Mutations return a Result; a refused or failed operation
leaves the store exactly as it was. Reads return plain frozen snapshots,
recomputed from the store on every call.

Usage:
    registry = Registry.open()                     # load, or create + seed on first start
    john = registry.create_profile({"profile_type": "Individual",
                                    "name": "John Doe", "identifier": "08123456789"})
    entry = registry.log_entry(john.data.profile_id, purpose="Meeting")
    registry.log_exit(entry.data.log_id)
"""

import threading
import uuid
from typing import Callable, List, Optional, Tuple

from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from gate_register.config import Settings, settings
from gate_register.database import create_tables, make_engine, make_session_factory, session_scope
from gate_register.models.access_log import AccessLog
from gate_register.models.blacklist_event import BlacklistEvent
from gate_register.models.profile import Profile
from gate_register.schemas.access_log import AccessLogFilters, AccessLogOut, AccessLogRecord
from gate_register.schemas.profile import ProfileCreate, ProfileOut, ProfileUpdate
from gate_register.schemas.result import Result
from gate_register.schemas.snapshot import BlacklistEventOut, RegistrySnapshot
from gate_register.schemas.stats import DashboardStats, ProfileTypeStats, TrafficPattern
from gate_register.schemas.views import AccessLogWithProfile, ProfileSearchResult, ProfileWithLogs
from gate_register.services import access_state, queries, traffic_analytics
from gate_register.services.validation import (
    identifier_key, validate_profile_fields, validate_required, validate_snapshot,
)
from gate_register.utils.clock import SystemClock
from gate_register.utils.exceptions import (
    GateRegisterError, PersistenceError, ProfileNotFound, ValidationError,
)
from gate_register.utils.logger import get_logger

logger = get_logger(__name__)

_REQUIRED_PROFILE_FIELDS = ("profile_type", "name", "identifier")


def _parse(model: type, data):
    """Accept a model instance or a plain dict; schema errors become ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except SchemaError as exc:
        raise ValidationError.from_schema_error(exc) from exc


class Registry:
    def __init__(self, session_factory: sessionmaker, clock=None, config: Settings = None):
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self.clock = clock or SystemClock()
        self.settings = config or settings

    @property
    def engine(self):
        return self._session_factory.kw.get("bind")

    @classmethod
    def open(cls, database_url: str = None, clock=None, config: Settings = None,
             seed: Optional[bool] = None) -> "Registry":
        """
        Connect to the store and make sure the schema exists.
        Sample profiles are seeded only when the schema is created by this call,
        so a register emptied on purpose stays empty after a restart.
        """
        config = config or settings
        engine = make_engine(database_url or config.DATABASE_URL)
        is_new = create_tables(engine)
        registry = cls(make_session_factory(engine), clock=clock, config=config)

        if is_new and (config.SEED_SAMPLE_DATA if seed is None else seed):
            from gate_register.services.seed import seed_sample_profiles
            seed_sample_profiles(registry)
        logger.info(f"[store] Register ready ({'new' if is_new else 'existing'} store at {engine.url})")
        return registry

    def close(self):
        """Release the store's connection pool. The registry must not be used afterwards."""
        with self._lock:
            self.engine.dispose()
        logger.info("[store] Register closed")

    # ── plumbing ──────────────────────────────────────────────────────────

    def _mutate(self, action: str, apply: Callable[[Session], object],
                out: Callable[[object], object] = None) -> Result:
        with self._lock:
            try:
                with session_scope(self._session_factory) as db:
                    obj = apply(db)
                    db.commit()
                return Result.ok(out(obj) if out else obj)
            except GateRegisterError as exc:
                logger.info(f"[{action}] refused: {exc.message}")
                return Result.fail(exc)
            except SQLAlchemyError as exc:
                logger.error(f"[store] Failed to {action}, rolled back: {exc}", exc_info=True)
                return Result.fail(PersistenceError(f"Failed to {action}"))

    def _read(self, fetch: Callable[[Session], object]):
        """Run a read under the lock. Store faults surface as PersistenceError."""
        with self._lock:
            try:
                with session_scope(self._session_factory) as db:
                    return fetch(db)
            except SQLAlchemyError as exc:
                logger.error(f"[store] Read failed: {exc}", exc_info=True)
                raise PersistenceError("Failed to read the register") from exc

    @staticmethod
    def _get_profile(db: Session, profile_id: str) -> Profile:
        profile = db.query(Profile).filter(Profile.profile_id == profile_id).first()
        if profile is None:
            raise ProfileNotFound(profile_id)
        return profile

    @staticmethod
    def _load(db: Session) -> Tuple[List[ProfileOut], List[AccessLogOut]]:
        profiles = [ProfileOut.model_validate(p) for p in db.query(Profile).order_by(Profile.id).all()]
        logs = [AccessLogOut.model_validate(l) for l in db.query(AccessLog).order_by(AccessLog.id).all()]
        return profiles, logs

    def _insert_profile(self, db: Session, form: ProfileCreate) -> Profile:
        validate_profile_fields(
            form.profile_type, form.name, form.identifier,
            existing_profiles=db.query(Profile).all(),
            enforce_format=self.settings.ENFORCE_IDENTIFIER_FORMAT,
        )
        now = self.clock.now()
        profile = Profile(
            profile_id=str(uuid.uuid4()),
            profile_type=form.profile_type,
            name=form.name,
            identifier=form.identifier,
            identifier_key=identifier_key(form.identifier),
            email=form.email,
            company=form.company,
            driver_name=form.driver_name,
            driver_phone=form.driver_phone,
            photo_url=form.photo_url,
            notes=form.notes,
            is_blacklisted=False,
            linked_profile_id=form.linked_profile_id,
            created_at=now,
            updated_at=now,
        )
        db.add(profile)
        logger.info(f"[profile] Registered {profile.profile_type} '{profile.name}' ({profile.identifier})")
        return profile

    # ── profiles ──────────────────────────────────────────────────────────

    def create_profile(self, form) -> Result:
        def apply(db):
            return self._insert_profile(db, _parse(ProfileCreate, form))
        return self._mutate("create profile", apply, out=ProfileOut.model_validate)

    def update_profile(self, form) -> Result:
        """Merge the fields the caller set into an existing profile."""
        def apply(db):
            update = _parse(ProfileUpdate, form)
            profile = self._get_profile(db, update.profile_id)
            changes = update.changes()

            for field in _REQUIRED_PROFILE_FIELDS:
                if field in changes:
                    validate_required(field, changes[field])

            if any(field in changes for field in _REQUIRED_PROFILE_FIELDS):
                identity_changed = "identifier" in changes or "profile_type" in changes
                validate_profile_fields(
                    changes.get("profile_type", profile.profile_type),
                    changes.get("name", profile.name),
                    changes.get("identifier", profile.identifier),
                    existing_profiles=db.query(Profile).all(),
                    enforce_format=self.settings.ENFORCE_IDENTIFIER_FORMAT and identity_changed,
                    exclude_profile_id=profile.profile_id,
                )

            for field, value in changes.items():
                setattr(profile, field, value)
            profile.identifier_key = identifier_key(profile.identifier)
            profile.updated_at = self.clock.now()
            logger.info(f"[profile] Updated '{profile.name}' fields={sorted(changes)}")
            return profile
        return self._mutate("update profile", apply, out=ProfileOut.model_validate)

    def delete_profile(self, profile_id: str) -> Result:
        """Remove a profile with its access logs and blacklist history. Irreversible."""
        def apply(db):
            profile = self._get_profile(db, profile_id)
            logs = (
                db.query(AccessLog)
                .filter(AccessLog.profile_id == profile_id)
                .delete(synchronize_session=False)
            )
            db.query(BlacklistEvent).filter(BlacklistEvent.profile_id == profile_id).delete(
                synchronize_session=False
            )
            db.delete(profile)
            logger.warning(f"[profile] Deleted '{profile.name}' ({profile.identifier}) with {logs} access logs")
            return None
        return self._mutate("delete profile", apply)

    def toggle_blacklist(self, profile_id: str, reason: Optional[str] = None,
                         actor: Optional[str] = None) -> Result:
        def apply(db):
            profile = self._get_profile(db, profile_id)
            now = self.clock.now()
            profile.is_blacklisted = not profile.is_blacklisted
            profile.updated_at = now
            action = "blacklisted" if profile.is_blacklisted else "unblacklisted"
            db.add(BlacklistEvent(
                event_id=str(uuid.uuid4()),
                profile_id=profile_id,
                action=action,
                reason=reason,
                actor=actor or self.settings.DEFAULT_BLACKLIST_ACTOR,
                created_at=now,
            ))
            logger.warning(f"[blacklist] '{profile.name}' ({profile.identifier}) {action}"
                           + (f": {reason}" if reason else ""))
            return profile
        return self._mutate("update blacklist status", apply, out=ProfileOut.model_validate)

    # ── access logs ───────────────────────────────────────────────────────

    def log_entry(self, profile_id: str, purpose: Optional[str] = None,
                  associated_profile_id: Optional[str] = None) -> Result:
        def apply(db):
            return access_state.log_entry(db, self.clock.now(), profile_id, purpose, associated_profile_id)
        return self._mutate("log entry", apply, out=AccessLogOut.model_validate)

    def log_exit(self, log_id: str) -> Result:
        def apply(db):
            return access_state.log_exit(db, self.clock.now(), log_id)
        return self._mutate("log exit", apply, out=AccessLogOut.model_validate)

    def record_access_log(self, record) -> Result:
        """
        Insert a ready-made log. The owner must exist and the single-Inside and
        blacklist rules still hold, so this is no back door around log_entry().
        """
        def apply(db):
            rec = _parse(AccessLogRecord, record)
            profile = self._get_profile(db, rec.profile_id)
            log_id = rec.log_id or str(uuid.uuid4())
            if db.query(AccessLog).filter(AccessLog.log_id == log_id).first():
                raise ValidationError("log_id", f'Access log "{log_id}" already exists')

            entry_time = rec.entry_time or self.clock.now()
            if rec.status == access_state.INSIDE:
                if rec.exit_time is not None:
                    raise ValidationError("exit_time", "An Inside log cannot have an exit time")
                access_state.ensure_can_enter(profile, rec.profile_id, access_state.open_logs_for(db, rec.profile_id))
            else:
                if rec.exit_time is None:
                    raise ValidationError("exit_time", "An Exited log needs an exit time")
                if rec.exit_time < entry_time:
                    raise ValidationError("exit_time", "Exit time is before entry time")

            log = AccessLog(
                log_id=log_id,
                profile_id=rec.profile_id,
                entry_time=entry_time,
                exit_time=rec.exit_time,
                status=rec.status,
                associated_profile_id=rec.associated_profile_id,
                purpose=rec.purpose,
                guard_notes=rec.guard_notes,
            )
            db.add(log)
            logger.info(f"[entry] Recorded {rec.status} log {log_id} for '{profile.name}'")
            return log
        return self._mutate("record access log", apply, out=AccessLogOut.model_validate)

    def clear_all_access_logs(self) -> Result:
        """Remove every access log. Returns how many were removed."""
        def apply(db):
            removed = db.query(AccessLog).delete(synchronize_session=False)
            logger.warning(f"[store] Cleared all access logs ({removed} removed)")
            return removed
        return self._mutate("clear access logs", apply)

    def register_and_enter(self, form, purpose: Optional[str] = "New registration") -> Result:
        """Guard-desk flow: register a new profile and log its first entry in one commit."""
        def apply(db):
            profile = self._insert_profile(db, _parse(ProfileCreate, form))
            db.flush()
            log = access_state.log_entry(db, self.clock.now(), profile.profile_id, purpose)
            return log, profile

        def out(pair):
            log, profile = pair
            return AccessLogWithProfile(
                **AccessLogOut.model_validate(log).model_dump(),
                profile=ProfileOut.model_validate(profile),
            )
        return self._mutate("register and enter", apply, out=out)

    # ── reads ─────────────────────────────────────────────────────────────

    def get_profile(self, profile_id: str) -> Optional[ProfileOut]:
        def fetch(db):
            profile = db.query(Profile).filter(Profile.profile_id == profile_id).first()
            return ProfileOut.model_validate(profile) if profile else None
        return self._read(fetch)

    def list_profiles(self) -> List[ProfileOut]:
        return self._read(lambda db: self._load(db)[0])

    def list_access_logs(self) -> List[AccessLogOut]:
        return self._read(lambda db: self._load(db)[1])

    def get_blacklisted_profiles(self) -> List[ProfileOut]:
        return [p for p in self.list_profiles() if p.is_blacklisted]

    def get_blacklist_history(self, profile_id: Optional[str] = None) -> List[BlacklistEventOut]:
        def fetch(db):
            q = db.query(BlacklistEvent)
            if profile_id:
                q = q.filter(BlacklistEvent.profile_id == profile_id)
            return [BlacklistEventOut.model_validate(e) for e in q.order_by(BlacklistEvent.id).all()]
        return self._read(fetch)

    def search_profiles(self, query: str) -> List[ProfileSearchResult]:
        return queries.search_profiles(self.list_profiles(), query)

    def join_logs_with_profiles(self) -> List[AccessLogWithProfile]:
        profiles, logs = self._read(self._load)
        return queries.join_logs_with_profiles(profiles, logs)

    def join_profiles_with_recent_logs(self) -> List[ProfileWithLogs]:
        profiles, logs = self._read(self._load)
        return queries.join_profiles_with_recent_logs(profiles, logs, self.settings.RECENT_LOG_LIMIT)

    def filter_access_logs(self, filters) -> List[AccessLogWithProfile]:
        return queries.filter_access_logs(self.join_logs_with_profiles(), _parse(AccessLogFilters, filters))

    def compute_dashboard_stats(self) -> DashboardStats:
        profiles, logs = self._read(self._load)
        return queries.compute_dashboard_stats(profiles, logs, self.clock.now())

    def profile_type_stats(self) -> ProfileTypeStats:
        return queries.count_profiles_by_type(self.list_profiles())

    def traffic_pattern(self, window: str = "24h") -> TrafficPattern:
        """Traffic report for one of the 24h / 7d / 30d windows. Raises ValidationError for any other window."""
        if window not in traffic_analytics.WINDOW_DAYS:
            raise ValidationError(
                "window", f"Unknown traffic window '{window}', expected one of {list(traffic_analytics.WINDOW_DAYS)}"
            )
        return traffic_analytics.analyze_traffic(
            self.list_access_logs(), window, self.clock.now(),
            peak_count=self.settings.PEAK_BUCKET_COUNT,
            quiet_limit=self.settings.QUIET_BUCKET_LIMIT,
        )

    # ── snapshots ─────────────────────────────────────────────────────────

    def export_snapshot(self) -> RegistrySnapshot:
        def fetch(db):
            profiles, logs = self._load(db)
            events = [BlacklistEventOut.model_validate(e)
                      for e in db.query(BlacklistEvent).order_by(BlacklistEvent.id).all()]
            return RegistrySnapshot(profiles=profiles, access_logs=logs, blacklist_events=events)
        return self._read(fetch)

    def restore_snapshot(self, snapshot) -> Result:
        """Replace the whole register with a snapshot, after checking its invariants."""
        def apply(db):
            snap = _parse(RegistrySnapshot, snapshot)
            validate_snapshot(snap)

            db.query(BlacklistEvent).delete(synchronize_session=False)
            db.query(AccessLog).delete(synchronize_session=False)
            db.query(Profile).delete(synchronize_session=False)
            db.flush()

            for p in snap.profiles:
                db.add(Profile(identifier_key=identifier_key(p.identifier), **p.model_dump()))
            db.flush()
            for log in snap.access_logs:
                db.add(AccessLog(**log.model_dump()))
            db.flush()
            for event in snap.blacklist_events:
                db.add(BlacklistEvent(**event.model_dump()))

            logger.warning(f"[store] Restored snapshot: {len(snap.profiles)} profiles, "
                           f"{len(snap.access_logs)} access logs, {len(snap.blacklist_events)} blacklist events")
            return snap
        return self._mutate("restore snapshot", apply)
