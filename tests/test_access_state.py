# tests/test_access_state.py
"""Unit tests for the entry/exit state machine and the blacklist gate."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import random
import pytest
from unittest.mock import MagicMock
from gate_register.services.access_state import close_entry, ensure_can_enter, ensure_can_exit
from gate_register.utils.exceptions import AlreadyExited, AlreadyInside, LogNotFound, ProfileNotFound
from conftest import NOW, make_individual, make_vehicle


def make_john(registry):
    return registry.create_profile(make_individual()).data


class TestEntryExitScenario:
    def test_enter_block_exit_reenter(self, registry, clock):
        john = make_john(registry)

        first = registry.log_entry(john.profile_id, purpose="Meeting")
        assert first.success
        assert first.data.status == "Inside"
        assert first.data.entry_time == NOW
        assert first.data.purpose == "Meeting"

        again = registry.log_entry(john.profile_id)
        assert not again.success
        assert again.error_code == "already_inside"

        clock.advance(hours=2)
        exited = registry.log_exit(first.data.log_id)
        assert exited.success
        assert exited.data.status == "Exited"
        assert exited.data.exit_time == clock.now()

        second = registry.log_entry(john.profile_id)
        assert second.success
        assert second.data.log_id != first.data.log_id

    def test_unknown_profile(self, registry):
        result = registry.log_entry("no-such-profile")
        assert not result.success
        assert result.error_code == "profile_not_found"

    def test_associated_profile_kept_even_if_it_does_not_resolve(self, registry):
        car = registry.create_profile(make_vehicle()).data
        result = registry.log_entry(car.profile_id, associated_profile_id="gone")
        assert result.success
        assert result.data.associated_profile_id == "gone"


class TestBlacklistGate:
    def test_blacklisted_profile_is_denied(self, registry):
        john = make_john(registry)
        registry.toggle_blacklist(john.profile_id)

        result = registry.log_entry(john.profile_id)
        assert not result.success
        assert result.error_code == "access_denied"
        assert registry.list_access_logs() == []

    def test_blacklisted_while_inside_can_leave_but_not_return(self, registry):
        john = make_john(registry)
        entry = registry.log_entry(john.profile_id).data
        registry.toggle_blacklist(john.profile_id)

        assert registry.log_exit(entry.log_id).success
        assert registry.log_entry(john.profile_id).error_code == "access_denied"

    def test_lifting_blacklist_restores_entry(self, registry):
        john = make_john(registry)
        registry.toggle_blacklist(john.profile_id)
        registry.toggle_blacklist(john.profile_id)
        assert registry.log_entry(john.profile_id).success


class TestExitMonotonicity:
    def test_second_exit_rejected_and_exit_time_unchanged(self, registry, clock):
        john = make_john(registry)
        entry = registry.log_entry(john.profile_id).data

        clock.advance(minutes=30)
        first = registry.log_exit(entry.log_id)
        clock.advance(minutes=30)
        second = registry.log_exit(entry.log_id)

        assert first.success
        assert not second.success
        assert second.error_code == "already_exited"
        stored = registry.list_access_logs()[0]
        assert stored.exit_time == first.data.exit_time

    def test_unknown_log(self, registry):
        result = registry.log_exit("no-such-log")
        assert result.error_code == "log_not_found"


class TestSingleActiveEntry:
    def test_random_traffic_never_opens_two_entries(self, registry, clock):
        profiles = [
            registry.create_profile(make_individual("A", "08011111111")).data,
            registry.create_profile(make_individual("B", "08022222222")).data,
            registry.create_profile(make_vehicle("C", "CAR-001")).data,
        ]
        rng = random.Random(7)

        for _ in range(120):
            clock.advance(minutes=rng.randrange(1, 30))
            action = rng.random()
            if action < 0.5:
                registry.log_entry(rng.choice(profiles).profile_id)
            elif action < 0.9:
                open_logs = [l for l in registry.list_access_logs() if l.status == "Inside"]
                if open_logs:
                    registry.log_exit(rng.choice(open_logs).log_id)
            else:
                registry.toggle_blacklist(rng.choice(profiles).profile_id)

            inside = [l.profile_id for l in registry.list_access_logs() if l.status == "Inside"]
            assert len(inside) == len(set(inside))


class TestTransitionHelpers:
    def test_missing_profile(self):
        with pytest.raises(ProfileNotFound):
            ensure_can_enter(None, "p-1", [])

    def test_corrupted_state_fails_closed(self):
        profile = MagicMock()
        profile.is_blacklisted = False
        with pytest.raises(AlreadyInside):
            ensure_can_enter(profile, "p-1", [MagicMock(), MagicMock()])

    def test_exit_guards(self):
        with pytest.raises(LogNotFound):
            ensure_can_exit(None, "l-1")
        log = MagicMock()
        log.status = "Exited"
        with pytest.raises(AlreadyExited):
            ensure_can_exit(log, "l-1")

    def test_close_entry_sets_exit(self):
        log = MagicMock()
        log.status = "Inside"
        close_entry(log, NOW)
        assert log.status == "Exited"
        assert log.exit_time == NOW
