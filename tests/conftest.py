# tests/conftest.py
"""Shared fixtures: an in-memory register with a frozen clock."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest
from datetime import datetime
from gate_register.services.registry import Registry
from gate_register.utils.clock import FrozenClock

NOW = datetime(2025, 3, 12, 10, 30)   # a Wednesday


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def registry(clock):
    registry = Registry.open("sqlite://", clock=clock, seed=False)
    yield registry
    registry.close()


def make_individual(name="John Doe", identifier="08123456789", **extra):
    return {"profile_type": "Individual", "name": name, "identifier": identifier, **extra}


def make_vehicle(name="Toyota Camry", identifier="ABC-123", **extra):
    return {"profile_type": "Vehicle", "name": name, "identifier": identifier, **extra}
