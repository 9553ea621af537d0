# tests/test_snapshot.py
"""Unit tests for export / restore of the whole register."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timezone
from gate_register.services.registry import Registry
from gate_register.utils.exceptions import ValidationError
from gate_register.utils.json_parser import dump_snapshot, load_snapshot, safe_parse_json
from conftest import NOW, make_individual, make_vehicle


@pytest.fixture
def populated(registry, clock):
    john = registry.create_profile(make_individual()).data
    car = registry.create_profile(make_vehicle(linked_profile_id=john.profile_id)).data
    entry = registry.log_entry(john.profile_id, purpose="Meeting", associated_profile_id=car.profile_id).data
    clock.advance(hours=2)
    registry.log_exit(entry.log_id)
    registry.log_entry(car.profile_id)
    registry.toggle_blacklist(john.profile_id, reason="Tailgating")
    return registry


class TestExportRestore:
    def test_export_contains_everything_in_store_order(self, populated):
        snap = populated.export_snapshot()
        assert snap.version == 1
        assert [p.name for p in snap.profiles] == ["John Doe", "Toyota Camry"]
        assert [l.status for l in snap.access_logs] == ["Exited", "Inside"]
        assert snap.blacklist_events[0].reason == "Tailgating"

    def test_json_round_trip_into_fresh_register(self, populated, clock):
        text = dump_snapshot(populated.export_snapshot())

        fresh = Registry.open("sqlite://", clock=clock, seed=False)
        result = fresh.restore_snapshot(load_snapshot(text))
        assert result.success
        assert fresh.export_snapshot() == populated.export_snapshot()
        assert fresh.compute_dashboard_stats() == populated.compute_dashboard_stats()
        fresh.close()

    def test_restore_replaces_existing_contents(self, populated, clock):
        snap = populated.export_snapshot()
        other = Registry.open("sqlite://", clock=clock, seed=False)
        other.create_profile(make_vehicle(name="Honda Accord", identifier="XYZ-789"))

        other.restore_snapshot(snap.model_dump())
        assert [p.identifier for p in other.list_profiles()] == ["08123456789", "ABC-123"]
        other.close()

    def test_restored_register_keeps_rules(self, populated):
        populated.restore_snapshot(populated.export_snapshot())
        car = populated.search_profiles("Camry")[0].profile
        assert populated.log_entry(car.profile_id).error_code == "already_inside"
        assert populated.create_profile(make_individual(name="Copy")).error_code == "validation_error"

    def test_offset_timestamps_round_trip_as_local_time(self, registry):
        result = registry.restore_snapshot({
            "profiles": [{"profile_id": "p-1", "profile_type": "Individual", "name": "John Doe",
                          "identifier": "08123456789", "is_blacklisted": True,
                          "created_at": "2025-03-12T07:00:00+00:00",
                          "updated_at": "2025-03-12T07:30:00+00:00"}],
            "access_logs": [{"log_id": "l-1", "profile_id": "p-1", "status": "Exited",
                             "entry_time": "2025-03-12T08:00:00+00:00",
                             "exit_time": "2025-03-12T09:00:00+01:00"}],
            "blacklist_events": [{"event_id": "e-1", "profile_id": "p-1", "action": "blacklisted",
                                  "actor": "admin", "created_at": "2025-03-12T07:30:00+00:00"}],
        })
        assert result.success
        assert result.data == registry.export_snapshot()

        log = result.data.access_logs[0]
        assert log.entry_time == datetime(2025, 3, 12, 8, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
        # 09:00+01:00 is 08:00 UTC
        assert log.exit_time == log.entry_time
        assert result.data.profiles[0].created_at.tzinfo is None


class TestRestoreRejects:
    def _restore_with(self, registry, mutate):
        before = registry.export_snapshot()
        data = before.model_dump()
        mutate(data)
        result = registry.restore_snapshot(data)
        assert not result.success
        assert result.error_code == "validation_error"
        assert registry.export_snapshot() == before
        return result

    def test_orphan_log(self, populated):
        def mutate(data):
            data["access_logs"].append({"log_id": "l-ghost", "profile_id": "ghost",
                                        "entry_time": NOW, "status": "Exited", "exit_time": NOW})
        result = self._restore_with(populated, mutate)
        assert result.field == "access_logs"

    def test_second_inside_log(self, populated):
        def mutate(data):
            car_id = data["profiles"][1]["profile_id"]
            data["access_logs"].append({"log_id": "l-twin", "profile_id": car_id,
                                        "entry_time": NOW, "status": "Inside"})
        result = self._restore_with(populated, mutate)
        assert "more than one Inside log" in result.error

    def test_inside_log_with_exit_time(self, populated):
        def mutate(data):
            data["access_logs"][1]["exit_time"] = NOW
        self._restore_with(populated, mutate)

    def test_duplicate_identifier(self, populated):
        def mutate(data):
            twin = dict(data["profiles"][0], profile_id="p-twin", identifier="08123456789")
            data["profiles"].append(twin)
        self._restore_with(populated, mutate)

    def test_malformed_profile(self, populated):
        def mutate(data):
            data["profiles"][0]["profile_type"] = "Boat"
        result = self._restore_with(populated, mutate)
        assert result.field.startswith("profiles")


class TestJsonHelpers:
    def test_safe_parse_json(self):
        assert safe_parse_json(b'{"a": 1}') == {"a": 1}
        assert safe_parse_json("not json") is None

    @pytest.mark.parametrize("raw", [b"not json", "[]", '{"profiles": [{"name": "x"}]}'])
    def test_load_snapshot_rejects_garbage(self, raw):
        with pytest.raises(ValidationError):
            load_snapshot(raw)

    def test_load_snapshot_reports_field_path(self):
        with pytest.raises(ValidationError) as exc_info:
            load_snapshot('{"access_logs": [{"log_id": "l-1"}]}')
        assert exc_info.value.field.startswith("access_logs.0.")
