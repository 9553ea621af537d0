# tests/test_validation.py
"""Unit tests for identifier uniqueness and format checks."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from gate_register.services.validation import (
    validate_identifier_format, validate_identifier_unique, validate_profile_fields, validate_required,
)
from gate_register.utils.exceptions import ValidationError


def make_existing(identifier, profile_id="p-1"):
    profile = MagicMock()
    profile.identifier = identifier
    profile.profile_id = profile_id
    return profile


class TestIdentifierUniqueness:
    def test_unused_identifier_passes(self):
        validate_identifier_unique("ABC-123", [make_existing("XYZ-789")])

    def test_clash_is_case_insensitive(self):
        with pytest.raises(ValidationError) as exc:
            validate_identifier_unique("abc-123", [make_existing("ABC-123")])
        assert exc.value.field == "identifier"
        assert "already exists" in exc.value.reason

    def test_own_profile_is_excluded(self):
        validate_identifier_unique("abc-123", [make_existing("ABC-123", "me")], exclude_profile_id="me")


class TestIdentifierFormat:
    @pytest.mark.parametrize("phone", ["08123456789", "+2348123456789", "2349012345678", "0812 345 6789"])
    def test_valid_phone_numbers(self, phone):
        validate_identifier_format("Individual", phone)

    @pytest.mark.parametrize("phone", ["12345", "08623456789", "ABC-123"])
    def test_invalid_phone_numbers(self, phone):
        with pytest.raises(ValidationError, match="phone"):
            validate_identifier_format("Individual", phone)

    @pytest.mark.parametrize("plate", ["ABC-123", "abc123", "ABC 123", "LAG-234XY"])
    def test_valid_plates(self, plate):
        validate_identifier_format("Vehicle", plate)

    @pytest.mark.parametrize("plate", ["AB-123", "ABCD-123", "08123456789"])
    def test_invalid_plates(self, plate):
        with pytest.raises(ValidationError, match="plate"):
            validate_identifier_format("Vehicle", plate)


class TestProfileFields:
    def test_blank_name_is_required(self):
        with pytest.raises(ValidationError) as exc:
            validate_required("name", "   ")
        assert exc.value.field == "name"
        assert exc.value.reason == "Name is required"

    def test_duplicate_reported_before_format(self):
        # A duplicate phone number entered as a Vehicle fails on uniqueness first
        with pytest.raises(ValidationError, match="already exists"):
            validate_profile_fields("Vehicle", "Car", "08123456789", [make_existing("08123456789")])

    def test_format_skipped_when_not_enforced(self):
        validate_profile_fields("Vehicle", "Car", "not a plate", [], enforce_format=False)
