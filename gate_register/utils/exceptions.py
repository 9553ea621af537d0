# gate_register/utils/exceptions.py
"""
Error taxonomy for the register.
Services raise these; the Registry turns them into failed Result values,
so callers never see them as uncaught exceptions.
"""

from typing import Optional


class GateRegisterError(Exception):
    """Base exception for the gate access register."""
    code = "register_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GateRegisterError):
    """Bad or duplicate input. The caller should re-prompt."""
    code = "validation_error"

    def __init__(self, field: Optional[str], reason: str):
        super().__init__(reason)
        self.field = field
        self.reason = reason

    @classmethod
    def from_schema_error(cls, exc) -> "ValidationError":
        """Report the first error of a pydantic ValidationError against its field path."""
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        return cls(field, first["msg"])


class NotFoundError(GateRegisterError):
    """A stale id reference. The caller should refresh its view."""
    code = "not_found"


class ProfileNotFound(NotFoundError):
    code = "profile_not_found"

    def __init__(self, profile_id: str):
        super().__init__("Profile not found")
        self.profile_id = profile_id


class LogNotFound(NotFoundError):
    code = "log_not_found"

    def __init__(self, log_id: str):
        super().__init__("Access log not found")
        self.log_id = log_id


class AccessDenied(GateRegisterError):
    """Entry refused because the profile is blacklisted. A business outcome, not a fault."""
    code = "access_denied"


class StateConflict(GateRegisterError):
    """The requested transition does not apply to the current access state."""
    code = "state_conflict"


class AlreadyInside(StateConflict):
    code = "already_inside"

    def __init__(self, message: str = "Profile is already inside"):
        super().__init__(message)


class AlreadyExited(StateConflict):
    code = "already_exited"

    def __init__(self, message: str = "Exit already logged"):
        super().__init__(message)


class PersistenceError(GateRegisterError):
    """The store refused or failed to commit. Nothing from the operation was kept."""
    code = "persistence_error"
