# gate_register/utils/json_parser.py
"""
Helpers for writing and reading register snapshots as JSON text
(the admin "Export Data" file).
"""

import json
from typing import Optional, Union

from pydantic import ValidationError as SchemaError

from gate_register.schemas.snapshot import RegistrySnapshot
from gate_register.utils.exceptions import ValidationError


def safe_parse_json(raw_body: Union[bytes, str]) -> Optional[dict]:
    """Parse JSON bytes or text safely. Returns None on error."""
    if isinstance(raw_body, bytes):
        raw_body = raw_body.decode("utf-8", errors="replace")
    try:
        return json.loads(raw_body)
    except json.JSONDecodeError:
        return None


def dump_snapshot(snapshot: RegistrySnapshot) -> str:
    return snapshot.model_dump_json(indent=2)


def load_snapshot(raw_body: Union[bytes, str]) -> RegistrySnapshot:
    """Parse an exported snapshot. Raises ValidationError for malformed input."""
    data = safe_parse_json(raw_body)
    if not isinstance(data, dict):
        raise ValidationError(None, "Snapshot is not a JSON object")
    try:
        return RegistrySnapshot.model_validate(data)
    except SchemaError as exc:
        raise ValidationError.from_schema_error(exc) from exc
